"""Region assignment: which sensor owns each Air cell."""

import logging
from typing import Iterable, List, Optional

import numpy as np
from scipy.ndimage import convolve

from ..errors import ConfigurationError
from .grid import Floorplan, MOORE_KERNEL
from .sensors import Sensor

logger = logging.getLogger(__name__)

# Sensor ids are non-negative, so this never collides with a real owner
UNASSIGNED = -1


class RegionMap:
    """
    Owning sensor id per cell, same shape as the floorplan.

    Cells no sensor could reach hold UNASSIGNED internally and report
    None through owner().
    """

    def __init__(self, ids: np.ndarray):
        self.ids = np.asarray(ids, dtype=np.int32)

    @property
    def shape(self):
        return self.ids.shape

    def owner(self, x: int, y: int) -> Optional[int]:
        """Sensor id owning (x, y), or None when unassigned."""
        sensor_id = int(self.ids[y, x])
        return None if sensor_id == UNASSIGNED else sensor_id

    def assigned_mask(self) -> np.ndarray:
        return self.ids != UNASSIGNED

    def unassigned_count(self, floorplan: Floorplan) -> int:
        """Number of Air cells that no sensor owns."""
        return int(np.count_nonzero(floorplan.air_mask() & ~self.assigned_mask()))

    def region_sizes(self) -> dict:
        ids, counts = np.unique(self.ids[self.assigned_mask()], return_counts=True)
        return {int(i): int(c) for i, c in zip(ids, counts)}

    def to_list(self) -> List[List[int]]:
        return self.ids.tolist()

    @classmethod
    def from_list(cls, rows: List[List[int]]) -> "RegionMap":
        return cls(np.array(rows, dtype=np.int32))


def _seed(floorplan: Floorplan, sensors: List[Sensor]) -> np.ndarray:
    ids = np.full(floorplan.shape, UNASSIGNED, dtype=np.int32)
    for sensor in sensors:
        if not floorplan.is_inside(sensor.x, sensor.y):
            raise ConfigurationError(
                f"Sensor {sensor.sensor_id} at ({sensor.x},{sensor.y}) is outside the floorplan"
            )
        if not floorplan.is_air(sensor.x, sensor.y):
            raise ConfigurationError(
                f"Sensor {sensor.sensor_id} at ({sensor.x},{sensor.y}) is not on an Air cell"
            )
        # First sensor placed on a cell keeps it
        if ids[sensor.y, sensor.x] == UNASSIGNED:
            ids[sensor.y, sensor.x] = sensor.sensor_id
    return ids


def assign_regions(floorplan: Floorplan,
                   sensors: Iterable[Sensor],
                   max_passes: Optional[int] = None,
                   log: Optional[logging.Logger] = None) -> RegionMap:
    """
    Grow sensor ownership over the Air cells by majority vote.

    Every pass looks at the unassigned interior Air cells (the outer ring
    never grows) and gives each the id held by most of its Moore
    neighbors, ties going to the lowest id. A pass decides all of its cells
    from the map as it was when the pass began, so the result does not
    depend on scan order.

    Growth stops once a pass assigns nothing or after max_passes
    (default width * height) passes. Air pockets sealed off from every
    sensor stay unassigned; this is logged, not raised.
    """
    log = log or logger
    sensors = list(sensors)
    if not sensors:
        raise ConfigurationError("No sensors defined")

    ids = _seed(floorplan, sensors)
    sensor_ids = np.array(sorted({int(i) for i in ids[ids != UNASSIGNED]}), dtype=np.int32)
    growable = floorplan.air_mask() & floorplan.interior_mask()
    if max_passes is None:
        max_passes = floorplan.width * floorplan.height

    passes = 0
    while True:
        candidates = growable & (ids == UNASSIGNED)
        if not np.any(candidates):
            break
        if passes >= max_passes:
            log.warning("Region growth stopped at pass cap (%d)", max_passes)
            break
        passes += 1

        # tallies[k, y, x] = neighbors of (x, y) owned by sensor_ids[k]
        tallies = np.stack([
            convolve((ids == sid).astype(np.int32), MOORE_KERNEL,
                     mode='constant', cval=0)
            for sid in sensor_ids
        ])
        # argmax returns the first maximum, i.e. the lowest id
        winner = np.argmax(tallies, axis=0)
        best = np.max(tallies, axis=0)

        newly = candidates & (best > 0)
        if not np.any(newly):
            break
        ids[newly] = sensor_ids[winner[newly]]

    region_map = RegionMap(ids)
    remaining = region_map.unassigned_count(floorplan)
    if remaining:
        log.warning("%d air cells left unassigned: no sensor can reach them", remaining)
    log.debug("Region growth finished after %d passes", passes)
    return region_map


def build_static_mask(floorplan: Floorplan, sensors: Iterable[Sensor]) -> np.ndarray:
    """Boolean mask of cells pinned during relaxation (sensor cells)."""
    mask = np.zeros(floorplan.shape, dtype=bool)
    for sensor in sensors:
        if floorplan.is_inside(sensor.x, sensor.y):
            mask[sensor.y, sensor.x] = True
    return mask
