"""Model package for the gradient map."""

from .grid import CellType, Floorplan
from .sensors import Sensor, SensorRegistry
from .regions import RegionMap, UNASSIGNED, assign_regions, build_static_mask
from .field import initialize_field, relax_step, max_change
from .gradient import RGB, ColorAnchor, ColorGradient, DEFAULT_GRADIENT, interpolate, value_to_color
from .state import FieldSnapshot
from .engine import HeatmapEngine, build_floorplan

__all__ = [
    'CellType',
    'Floorplan',
    'Sensor',
    'SensorRegistry',
    'RegionMap',
    'UNASSIGNED',
    'assign_regions',
    'build_static_mask',
    'initialize_field',
    'relax_step',
    'max_change',
    'RGB',
    'ColorAnchor',
    'ColorGradient',
    'DEFAULT_GRADIENT',
    'interpolate',
    'value_to_color',
    'FieldSnapshot',
    'HeatmapEngine',
    'build_floorplan',
]
