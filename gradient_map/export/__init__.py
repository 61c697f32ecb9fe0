"""I/O package for the gradient map."""

from .csv_writer import CSVWriter, write_field_matrix
from .region_cache import RegionCache
from .visualizer import Visualizer
from .reporter import Reporter

__all__ = ['CSVWriter', 'write_field_matrix', 'RegionCache', 'Visualizer', 'Reporter']
