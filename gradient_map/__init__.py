"""Estimate a smoothed scalar field over a floorplan from sparse sensors."""

from .errors import ConfigurationError, UnknownSensorError
from .model import (
    CellType,
    Floorplan,
    HeatmapEngine,
    RegionMap,
    assign_regions,
    initialize_field,
    relax_step,
    value_to_color,
)

__version__ = "0.1.0"

__all__ = [
    'ConfigurationError',
    'UnknownSensorError',
    'CellType',
    'Floorplan',
    'HeatmapEngine',
    'RegionMap',
    'assign_regions',
    'initialize_field',
    'relax_step',
    'value_to_color',
]
