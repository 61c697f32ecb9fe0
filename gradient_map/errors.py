"""Exception types raised by the gradient map engine."""


class ConfigurationError(ValueError):
    """
    Scenario is not usable as configured.

    Raised for missing sensors, grids of mismatched dimensions, and sensors
    placed outside the floorplan or on a non-Air or already occupied cell.
    Nothing is committed when this is raised.
    """


class UnknownSensorError(KeyError):
    """A reading was set for a sensor id that was never registered."""

    def __init__(self, sensor_id: int):
        super().__init__(sensor_id)
        self.sensor_id = sensor_id

    def __str__(self) -> str:
        return f"Unknown sensor id: {self.sensor_id}"
