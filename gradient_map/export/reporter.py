"""Summary report generation for gradient map runs."""

from typing import List, Dict, Optional, TYPE_CHECKING
from pathlib import Path

if TYPE_CHECKING:
    from ..model.state import FieldSnapshot


class Reporter:
    """Tracks convergence per step and formats a text report."""

    def __init__(self, config_path: str, tolerance: float, scale: float = 100):
        self.config_path = config_path
        self.tolerance = tolerance
        self.scale = scale
        self.changes: List[float] = []
        self.converged_at: Optional[int] = None

    def update(self, snapshot: "FieldSnapshot") -> None:
        """Record the change produced by one relaxation step."""
        change = snapshot.metrics.get('max_change', float('inf'))
        self.changes.append(change)
        if self.converged_at is None and change <= self.tolerance:
            self.converged_at = snapshot.step

    def generate_summary(self, final_snapshot: "FieldSnapshot",
                         summary: Dict,
                         output_dir: Path,
                         csv_enabled: bool,
                         snapshot_enabled: bool,
                         gif_enabled: bool) -> str:
        """Returns formatted text report."""
        metrics = final_snapshot.metrics
        if self.converged_at is not None:
            convergence = f"yes, at step {self.converged_at}"
        else:
            convergence = f"no (tolerance {self.tolerance:g})"

        lines = [
            "",
            "=" * 80,
            "                         GRADIENT MAP REPORT",
            "=" * 80,
            f"Configuration: {self.config_path}",
            f"Floorplan:     {summary.get('width')}x{summary.get('height')}",
            f"Sensors:       {summary.get('sensors', 0)} "
            f"({summary.get('readings', 0)} with readings)",
            "",
            "REGIONS",
            "-" * 40,
        ]
        for sensor_id, size in sorted(summary.get('region_sizes', {}).items()):
            lines.append(f"Sensor {sensor_id:<6} {size} cells")
        lines.append(f"Unassigned:   {summary.get('unassigned_cells', 0)} cells")

        lines += [
            "",
            "FIELD",
            "-" * 40,
            f"Steps:                 {final_snapshot.step}",
            f"Converged:             {convergence}",
            f"Last Max Change:       {metrics.get('max_change', 0):.4g}",
            f"Min / Mean / Max:      {metrics.get('min', 0) / self.scale:.2f} / "
            f"{metrics.get('mean', 0) / self.scale:.2f} / "
            f"{metrics.get('max', 0) / self.scale:.2f}",
            "",
            "OUTPUT FILES",
            "-" * 40,
        ]

        # Output file paths
        if csv_enabled:
            lines.append(f"CSV Log:    {output_dir / 'field_log.csv'}")
        else:
            lines.append("CSV Log:    (disabled)")

        if snapshot_enabled:
            lines.append(f"Snapshot:   {output_dir / 'final_field.png'}")
        else:
            lines.append("Snapshot:   (disabled)")

        if gif_enabled:
            lines.append(f"Animation:  {output_dir / 'relaxation.gif'}")
        else:
            lines.append("Animation:  (disabled)")

        lines.append("=" * 80)

        return "\n".join(lines)
