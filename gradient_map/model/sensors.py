"""Sensors and their latest readings."""

import hashlib
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from ..errors import ConfigurationError, UnknownSensorError
from .grid import Floorplan


@dataclass(frozen=True)
class Sensor:
    """Measurement point pinned to a single Air cell."""
    sensor_id: int
    x: int
    y: int


class SensorRegistry:
    """
    Registered sensors keyed by id, plus the latest reading of each.

    Readings live in their own mapping: a sensor can exist without a
    reading, in which case get_reading() returns None ("unassigned").
    """

    def __init__(self):
        self.sensors: Dict[int, Sensor] = {}
        self.readings: Dict[int, float] = {}

    def __len__(self) -> int:
        return len(self.sensors)

    def __iter__(self) -> Iterator[Sensor]:
        return iter(self.sensors.values())

    def __contains__(self, sensor_id: int) -> bool:
        return sensor_id in self.sensors

    def add_sensor(self, x: int, y: int, sensor_id: int,
                   floorplan: Floorplan) -> Sensor:
        """Register a sensor at (x, y) after validating it against the floorplan."""
        if sensor_id < 0:
            raise ConfigurationError(f"Sensor id must be non-negative, got {sensor_id}")
        if sensor_id in self.sensors:
            raise ConfigurationError(f"Sensor id {sensor_id} already registered")
        if not floorplan.is_inside(x, y):
            raise ConfigurationError(
                f"Sensor {sensor_id} at ({x},{y}) is outside the "
                f"{floorplan.width}x{floorplan.height} floorplan"
            )
        if not floorplan.is_air(x, y):
            raise ConfigurationError(
                f"Sensor {sensor_id} at ({x},{y}) is on a "
                f"{floorplan.cell_type(x, y).name} cell"
            )
        occupant = self.sensor_at(x, y)
        if occupant is not None:
            raise ConfigurationError(
                f"Cell ({x},{y}) already holds sensor {occupant.sensor_id}"
            )

        sensor = Sensor(sensor_id=sensor_id, x=x, y=y)
        self.sensors[sensor_id] = sensor
        return sensor

    def sensor_at(self, x: int, y: int) -> Optional[Sensor]:
        for sensor in self.sensors.values():
            if sensor.x == x and sensor.y == y:
                return sensor
        return None

    def set_reading(self, sensor_id: int, value: float) -> None:
        """Record the latest reading; unknown ids raise UnknownSensorError."""
        if sensor_id not in self.sensors:
            raise UnknownSensorError(sensor_id)
        self.readings[sensor_id] = float(value)

    def get_reading(self, sensor_id: int) -> Optional[float]:
        """Latest reading, or None if nothing was recorded for this id."""
        return self.readings.get(sensor_id)

    def validate(self, floorplan: Floorplan) -> None:
        """Check every sensor still sits on an Air cell of floorplan."""
        for sensor in self.sensors.values():
            if not floorplan.is_air(sensor.x, sensor.y):
                raise ConfigurationError(
                    f"Sensor {sensor.sensor_id} at ({sensor.x},{sensor.y}) "
                    f"is not on an Air cell of the new floorplan"
                )

    def ordered(self) -> List[Sensor]:
        """Sensors in registration order."""
        return list(self.sensors.values())

    def configuration_hash(self) -> str:
        """Digest of sensor ids and positions; readings are not included."""
        digest = hashlib.sha1()
        for sensor in sorted(self.sensors.values(), key=lambda s: s.sensor_id):
            digest.update(f"{sensor.sensor_id}:{sensor.x}:{sensor.y};".encode())
        return digest.hexdigest()
