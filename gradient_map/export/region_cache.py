"""Persistence of computed region maps."""

import hashlib
import json
import logging
from pathlib import Path
from typing import Optional, TYPE_CHECKING

from ..model.regions import RegionMap

if TYPE_CHECKING:
    from ..model.grid import Floorplan
    from ..model.sensors import SensorRegistry

logger = logging.getLogger(__name__)

CACHE_VERSION = 1


def configuration_key(floorplan: "Floorplan", sensors: "SensorRegistry") -> str:
    """Hash of the floorplan cells and the sensor ids and positions."""
    digest = hashlib.sha1()
    digest.update(floorplan.cells.tobytes())
    digest.update(sensors.configuration_hash().encode())
    return digest.hexdigest()


class RegionCache:
    """
    Stores one region map as JSON so it can be reused across reading updates.

    File format:
        {"version": 1, "width": W, "height": H,
         "config_hash": "...", "regions": [[id, ...], ...]}

    Unassigned cells are stored as -1. A file whose version, dimensions or
    hash do not match the current scenario is treated as a miss.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self, floorplan: "Floorplan",
             sensors: "SensorRegistry") -> Optional[RegionMap]:
        """Return the cached region map, or None on any mismatch."""
        if not self.path.exists():
            return None
        try:
            with open(self.path) as f:
                payload = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable region cache %s: %s", self.path, e)
            return None

        if not isinstance(payload, dict):
            logger.warning("Ignoring malformed region cache %s", self.path)
            return None
        if payload.get('version') != CACHE_VERSION:
            logger.info("Region cache version mismatch, recomputing")
            return None
        if (payload.get('width'), payload.get('height')) != (floorplan.width, floorplan.height):
            return None
        if payload.get('config_hash') != configuration_key(floorplan, sensors):
            return None

        try:
            region_map = RegionMap.from_list(payload['regions'])
        except (KeyError, ValueError, TypeError) as e:
            logger.warning("Ignoring malformed region cache %s: %r", self.path, e)
            return None
        if region_map.shape != floorplan.shape:
            return None
        return region_map

    def save(self, floorplan: "Floorplan", sensors: "SensorRegistry",
             region_map: RegionMap) -> None:
        """Write region_map, replacing any previous cache file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            'version': CACHE_VERSION,
            'width': floorplan.width,
            'height': floorplan.height,
            'config_hash': configuration_key(floorplan, sensors),
            'regions': region_map.to_list(),
        }
        with open(self.path, 'w') as f:
            json.dump(payload, f)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
