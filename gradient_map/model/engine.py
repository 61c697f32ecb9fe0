"""Heatmap engine: one scenario's floorplan, sensors and field."""

import logging
from typing import Dict, Optional, TYPE_CHECKING

import numpy as np

from ..errors import ConfigurationError
from .field import initialize_field, relax_step, max_change
from .gradient import ColorGradient, DEFAULT_GRADIENT, RGB, colorize
from .grid import Floorplan
from .regions import RegionMap, assign_regions, build_static_mask
from .sensors import SensorRegistry
from .state import FieldSnapshot

if TYPE_CHECKING:
    from ..config import FloorplanConfig, ScenarioConfig
    from ..export.region_cache import RegionCache

logger = logging.getLogger(__name__)


def build_floorplan(config: "FloorplanConfig") -> Floorplan:
    """Construct a floorplan from its configuration."""
    if config.cells is not None:
        return Floorplan.from_cells(config.cells)

    if config.border:
        floorplan = Floorplan.with_border(config.width, config.height)
    else:
        floorplan = Floorplan(config.width, config.height)

    for wall_spec in config.walls:
        if wall_spec.wall_type == "line":
            (x1, y1), (x2, y2) = wall_spec.data['start'], wall_spec.data['end']
            floorplan.add_wall_line(x1, y1, x2, y2, wall_spec.cell_type)
        elif wall_spec.wall_type == "rectangle":
            floorplan.add_wall_rectangle(
                wall_spec.data['x'], wall_spec.data['y'],
                wall_spec.data['width'], wall_spec.data['height'],
                wall_spec.cell_type
            )
        elif wall_spec.wall_type == "points":
            floorplan.add_wall_points(wall_spec.data['coords'], wall_spec.cell_type)
    return floorplan


class HeatmapEngine:
    """
    Explicit simulation context for one scenario.

    Holds the floorplan, the sensor registry and the grids derived from
    them. Derived grids are dropped whenever their inputs change:

    1. New floorplan or new sensor -> region map, static mask and field
    2. New reading -> nothing; call initialize_field() to reseed

    The field is advanced one relaxation pass per step_field() call; the
    caller decides how many passes to run.
    """

    def __init__(self, floorplan: Optional[Floorplan] = None,
                 gradient: Optional[ColorGradient] = None,
                 seed_value: float = 100.0,
                 region_cache: Optional["RegionCache"] = None,
                 log: Optional[logging.Logger] = None):
        self.log = log or logger
        self.gradient = gradient or DEFAULT_GRADIENT
        self.seed_value = seed_value
        self.region_cache = region_cache

        self.floorplan: Optional[Floorplan] = None
        self.sensors = SensorRegistry()

        self.region_map: Optional[RegionMap] = None
        self.static_mask: Optional[np.ndarray] = None
        self.field: Optional[np.ndarray] = None
        self.current_step = 0
        self.last_change = float('inf')

        if floorplan is not None:
            self.configure_floorplan(floorplan)

    @classmethod
    def from_config(cls, config: "ScenarioConfig",
                    region_cache: Optional["RegionCache"] = None) -> "HeatmapEngine":
        """Build the floorplan and register sensors and readings from config."""
        engine = cls(build_floorplan(config.floorplan),
                     seed_value=config.field.seed_value,
                     region_cache=region_cache)
        for spec in config.sensors:
            engine.add_sensor(spec.x, spec.y, spec.sensor_id)
            if spec.value is not None:
                engine.set_sensor_reading(spec.sensor_id, spec.value)
        return engine

    def _invalidate(self) -> None:
        self.region_map = None
        self.static_mask = None
        self.field = None
        self.current_step = 0
        self.last_change = float('inf')

    def _require_floorplan(self) -> Floorplan:
        if self.floorplan is None:
            raise ConfigurationError("No floorplan configured")
        return self.floorplan

    def configure_floorplan(self, floorplan: Floorplan) -> None:
        """Replace the floorplan; registered sensors must still sit on Air."""
        self.sensors.validate(floorplan)
        floorplan.freeze()
        self.floorplan = floorplan
        self._invalidate()
        self.log.debug("Floorplan configured: %dx%d", floorplan.width, floorplan.height)

    def add_sensor(self, x: int, y: int, sensor_id: int) -> None:
        """Register a single-cell sensor at (x, y)."""
        self.sensors.add_sensor(x, y, sensor_id, self._require_floorplan())
        self._invalidate()

    def set_sensor_reading(self, sensor_id: int, value: float) -> None:
        """Update a reading. Raises UnknownSensorError for unregistered ids."""
        self.sensors.set_reading(sensor_id, value)

    def get_sensor_reading(self, sensor_id: int) -> Optional[float]:
        return self.sensors.get_reading(sensor_id)

    def compute_regions(self) -> RegionMap:
        """Assign every reachable Air cell to a sensor, using the cache if any."""
        floorplan = self._require_floorplan()
        if not self.sensors:
            raise ConfigurationError("No sensors defined")

        region_map = None
        if self.region_cache is not None:
            region_map = self.region_cache.load(floorplan, self.sensors)
            if region_map is not None:
                self.log.info("Region map loaded from cache %s", self.region_cache.path)

        if region_map is None:
            region_map = assign_regions(floorplan, self.sensors.ordered(), log=self.log)
            if self.region_cache is not None:
                self.region_cache.save(floorplan, self.sensors, region_map)

        self.region_map = region_map
        self.static_mask = build_static_mask(floorplan, self.sensors)
        self.field = None
        return region_map

    def initialize_field(self, default_value: Optional[float] = None) -> np.ndarray:
        """Seed the field from regions and current readings."""
        floorplan = self._require_floorplan()
        if self.region_map is None:
            self.compute_regions()
        if default_value is None:
            default_value = self.seed_value

        self.field = initialize_field(floorplan, self.region_map,
                                      self.sensors.readings, default_value)
        self.current_step = 0
        self.last_change = float('inf')
        return self.field

    def step_field(self) -> FieldSnapshot:
        """Run exactly one relaxation pass."""
        if self.field is None:
            raise ConfigurationError("Field not initialized")

        new_field = relax_step(self.floorplan, self.field, self.static_mask)
        self.last_change = max_change(self.field, new_field)
        self.field = new_field
        self.current_step += 1
        return self.snapshot()

    def relax(self, max_steps: int, tolerance: float = 0.0) -> FieldSnapshot:
        """
        Step until no cell changes by more than tolerance, or max_steps.

        Initializes the field first if needed.
        """
        if self.field is None:
            self.initialize_field()

        snapshot = self.snapshot()
        for _ in range(max_steps):
            snapshot = self.step_field()
            if self.last_change <= tolerance:
                self.log.info("Field converged after %d steps", self.current_step)
                break
        else:
            self.log.info("Stopped after %d steps, last change %.4g",
                          self.current_step, self.last_change)
        return snapshot

    def is_converged(self, tolerance: float) -> bool:
        return self.last_change <= tolerance

    def color_for(self, value: float) -> RGB:
        return self.gradient.color_for(value)

    def color_image(self) -> np.ndarray:
        """RGB image of the current field, barriers colored by type."""
        floorplan = self._require_floorplan()
        if self.field is None:
            raise ConfigurationError("Field not initialized")
        return colorize(floorplan, self.field, self.gradient)

    def snapshot(self) -> FieldSnapshot:
        """Create a copy of the current field state."""
        if self.field is None:
            raise ConfigurationError("Field not initialized")

        air = self.floorplan.air_mask()
        values = self.field[air]
        metrics = {
            'max_change': self.last_change,
            'min': float(values.min()) if values.size else 0.0,
            'max': float(values.max()) if values.size else 0.0,
            'mean': float(values.mean()) if values.size else 0.0,
        }
        return FieldSnapshot(
            step=self.current_step,
            field=self.field.copy(),
            region_ids=self.region_map.ids.copy(),
            air=air,
            metrics=metrics
        )

    def get_summary(self) -> Dict:
        """Get summary statistics for the scenario."""
        floorplan = self._require_floorplan()
        summary = {
            'width': floorplan.width,
            'height': floorplan.height,
            'sensors': len(self.sensors),
            'readings': len(self.sensors.readings),
            'total_steps': self.current_step,
            'last_change': self.last_change,
        }
        if self.region_map is not None:
            summary['unassigned_cells'] = self.region_map.unassigned_count(floorplan)
            summary['region_sizes'] = self.region_map.region_sizes()
        return summary
