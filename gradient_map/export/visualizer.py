"""Visualization and export for the gradient map."""

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
from pathlib import Path
from typing import List, Optional, TYPE_CHECKING
from PIL import Image
import io

from ..config import RenderConfig
from ..model.gradient import ColorGradient, DEFAULT_GRADIENT, colorize

if TYPE_CHECKING:
    from ..model.grid import Floorplan
    from ..model.sensors import Sensor
    from ..model.state import FieldSnapshot

LEGEND_ROWS = 256


def legend_marks(start: float, end: float, step: float) -> List[float]:
    """Values from start toward end, every step, both ends included when hit."""
    if step == 0 or (end - start) * step < 0:
        return [start, end]
    marks = []
    value = start
    while (step < 0 and value >= end) or (step > 0 and value <= end):
        marks.append(value)
        value += step
    return marks


class Visualizer:
    """
    Generates visual outputs using matplotlib.

    Supports:
    - PNG snapshots of the floorplan colored by the field, with a legend
    - Animated GIF of the relaxation
    """

    SENSOR_COLOR = '#FFFFFF'

    def __init__(self, floorplan: "Floorplan",
                 sensors: List["Sensor"],
                 render: Optional[RenderConfig] = None,
                 gradient: Optional[ColorGradient] = None):
        self.floorplan = floorplan
        self.sensors = list(sensors)
        self.render = render or RenderConfig()
        self.gradient = gradient or DEFAULT_GRADIENT
        self.frames: List[Image.Image] = []

    def legend_strip(self) -> np.ndarray:
        """Column of legend colors, legend_start in the first row."""
        values = np.linspace(self.render.legend_start, self.render.legend_end, LEGEND_ROWS)
        strip = np.array([self.gradient.color_for(v) for v in values], dtype=np.uint8)
        return strip.reshape(LEGEND_ROWS, 1, 3)

    def _create_figure(self, snapshot: "FieldSnapshot") -> plt.Figure:
        """Create matplotlib figure for snapshot visualization."""
        width, height = self.floorplan.width, self.floorplan.height
        scale = self.render.block_size / 25
        fig_height = max(4, height * scale)
        fig_width = max(6, width * scale + (1.5 if self.render.legend else 0))

        if self.render.legend:
            fig, (ax, legend_ax) = plt.subplots(
                1, 2, figsize=(fig_width, fig_height),
                gridspec_kw={'width_ratios': [20, 1]}
            )
        else:
            fig, ax = plt.subplots(figsize=(fig_width, fig_height))
            legend_ax = None

        # Row 0 at the top, like the floorplan drawings
        image = colorize(self.floorplan, snapshot.field, self.gradient)
        ax.imshow(image, origin='upper', aspect='equal', interpolation='nearest',
                  extent=[-0.5, width - 0.5, height - 0.5, -0.5])

        for sensor in self.sensors:
            ax.plot(sensor.x, sensor.y, 'x', color=self.SENSOR_COLOR,
                    markersize=6, markeredgewidth=1.5)
            ax.annotate(str(sensor.sensor_id), (sensor.x, sensor.y),
                        xytext=(3, 3), textcoords='offset points',
                        color=self.SENSOR_COLOR, fontsize=7)

        ax.set_title(f"Step {snapshot.step} | "
                     f"mean {snapshot.metrics.get('mean', 0) / self.render.legend_scale:.2f} | "
                     f"max change {snapshot.metrics.get('max_change', 0):.3g}")
        ax.set_xlabel('X')
        ax.set_ylabel('Y')

        if legend_ax is not None:
            self._draw_legend(legend_ax)

        plt.tight_layout()
        return fig

    def _draw_legend(self, ax: plt.Axes) -> None:
        """Gradient strip with labels every legend_step, divided by legend_scale."""
        start, end = self.render.legend_start, self.render.legend_end
        ax.imshow(self.legend_strip(), origin='upper', aspect='auto',
                  extent=[0, 1, end, start])
        marks = legend_marks(start, end, self.render.legend_step)
        ax.set_yticks(marks)
        ax.set_yticklabels([f"{m / self.render.legend_scale:g}" for m in marks])
        ax.yaxis.tick_right()
        ax.set_xticks([])

    def buffer_frame(self, snapshot: "FieldSnapshot") -> None:
        """Store frame for GIF generation."""
        fig = self._create_figure(snapshot)

        # Convert to PIL Image
        buf = io.BytesIO()
        fig.savefig(buf, format='png', dpi=80)
        buf.seek(0)
        img = Image.open(buf).copy()
        self.frames.append(img)
        buf.close()
        plt.close(fig)

    def save_snapshot(self, snapshot: "FieldSnapshot", output_path: Path) -> None:
        """Save single PNG image of the field."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig = self._create_figure(snapshot)
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)

    def generate_gif(self, output_path: Path, fps: int = 10) -> None:
        """Compile buffered frames into animated GIF."""
        if not self.frames:
            return

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        duration = int(1000 / fps)  # milliseconds per frame

        self.frames[0].save(
            output_path,
            save_all=True,
            append_images=self.frames[1:],
            duration=duration,
            loop=0
        )
