"""Scalar field seeding and relaxation over the floorplan."""

from typing import Mapping, Optional

import numpy as np
from scipy.ndimage import convolve

from .grid import Floorplan, MOORE_KERNEL
from .regions import RegionMap, UNASSIGNED


def initialize_field(floorplan: Floorplan,
                     region_map: RegionMap,
                     readings: Mapping[int, Optional[float]],
                     default_value: float) -> np.ndarray:
    """
    Seed the field from the region map.

    Air cells take the reading of their owning sensor, or default_value
    when the cell is unassigned or its sensor has no reading yet. Every
    other cell is zero.
    """
    floorplan.check_shape(region_map.ids, "Region map")

    air = floorplan.air_mask()
    field = np.zeros(floorplan.shape, dtype=np.float64)
    field[air] = default_value

    for sensor_id in np.unique(region_map.ids[air]):
        if sensor_id == UNASSIGNED:
            continue
        value = readings.get(int(sensor_id))
        if value is None:
            continue
        field[air & (region_map.ids == sensor_id)] = value

    return field


def relax_step(floorplan: Floorplan,
               field: np.ndarray,
               static_mask: np.ndarray) -> np.ndarray:
    """
    One Jacobi smoothing pass; returns a new array.

    Each interior Air cell that is not static becomes the mean of its Air
    Moore neighbors. Barriers count as missing neighbors, and a cell with
    no Air neighbor keeps its value. Static and non-Air cells are copied.
    """
    floorplan.check_shape(field, "Field")
    floorplan.check_shape(static_mask, "Static mask")

    air = floorplan.air_mask()
    values = np.where(air, field, 0.0).astype(np.float64)

    # Neighbor sums and neighbor counts, barriers contributing nothing
    sums = convolve(values, MOORE_KERNEL.astype(np.float64), mode='constant', cval=0.0)
    counts = convolve(air.astype(np.int32), MOORE_KERNEL, mode='constant', cval=0)

    update = (air & floorplan.interior_mask()
              & ~np.asarray(static_mask, dtype=bool) & (counts > 0))

    new_field = np.array(field, dtype=np.float64, copy=True)
    new_field[update] = sums[update] / counts[update]
    return new_field


def max_change(previous: np.ndarray, current: np.ndarray) -> float:
    """Largest absolute per-cell difference between two fields."""
    if previous.size == 0:
        return 0.0
    return float(np.max(np.abs(current - previous)))
