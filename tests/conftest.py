"""Shared fixtures for the gradient map tests."""

import pytest

from gradient_map.model.engine import HeatmapEngine
from gradient_map.model.grid import Floorplan


@pytest.fixture
def bordered_10x5():
    """10x5 floorplan: wall ring around an 8x3 Air interior."""
    return Floorplan.with_border(10, 5)


@pytest.fixture
def single_sensor_engine():
    """5x5 walled room with one sensor (id 0) reading 2000 in the middle."""
    engine = HeatmapEngine(Floorplan.with_border(5, 5))
    engine.add_sensor(2, 2, 0)
    engine.set_sensor_reading(0, 2000)
    return engine


@pytest.fixture
def two_source_engine():
    """7x5 walled room, sensor 0 at (1,2) reading 0, sensor 1 at (5,2) reading 1000."""
    engine = HeatmapEngine(Floorplan.with_border(7, 5))
    engine.add_sensor(1, 2, 0)
    engine.add_sensor(5, 2, 1)
    engine.set_sensor_reading(0, 0)
    engine.set_sensor_reading(1, 1000)
    return engine
