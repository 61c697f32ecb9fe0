"""Piecewise-linear color gradient for field values."""

import logging
from typing import NamedTuple, Optional, Sequence

import numpy as np

from ..errors import ConfigurationError
from .grid import CellType, Floorplan, round_half_up

logger = logging.getLogger(__name__)


class RGB(NamedTuple):
    r: int
    g: int
    b: int

    @property
    def hex(self) -> str:
        return "#{:02x}{:02x}{:02x}".format(self.r, self.g, self.b)


class ColorAnchor(NamedTuple):
    threshold: float
    color: RGB


WHITE_RED = RGB(255, 107, 107)
RED = RGB(255, 17, 17)
YELLOW = RGB(255, 233, 17)
GREEN = RGB(14, 212, 14)
BLUE = RGB(22, 41, 85)
PURPLE = RGB(92, 28, 123)
BLACK_GREEN = RGB(50, 83, 60)


def interpolate(col1: RGB, col2: RGB, fraction: float,
                log: Optional[logging.Logger] = None) -> RGB:
    """
    Blend col1 (fraction 0) into col2 (fraction 1), channel by channel.

    Fractions outside [0, 1] are clamped and reported as a warning.
    """
    if fraction < 0.0 or fraction > 1.0:
        (log or logger).warning("Invalid fraction given: %s", fraction)
        fraction = min(max(fraction, 0.0), 1.0)

    return RGB(
        round_half_up(col2.r * fraction + col1.r * (1 - fraction)),
        round_half_up(col2.g * fraction + col1.g * (1 - fraction)),
        round_half_up(col2.b * fraction + col1.b * (1 - fraction)),
    )


class ColorGradient:
    """
    Ordered table of (threshold, color) anchors.

    Values between two anchors are interpolated linearly; values above the
    top anchor or below the bottom one clamp to its color.
    """

    def __init__(self, anchors: Sequence[ColorAnchor],
                 log: Optional[logging.Logger] = None):
        anchors = [ColorAnchor(float(t), RGB(*c)) for t, c in anchors]
        if len(anchors) < 2:
            raise ConfigurationError("A gradient needs at least two anchors")
        for lower, upper in zip(anchors, anchors[1:]):
            if upper.threshold <= lower.threshold:
                raise ConfigurationError(
                    "Gradient thresholds must be strictly ascending"
                )
        self.anchors = anchors
        self.log = log or logger

    @property
    def low(self) -> float:
        return self.anchors[0].threshold

    @property
    def high(self) -> float:
        return self.anchors[-1].threshold

    def color_for(self, value: float) -> RGB:
        """Map a scalar value onto the gradient."""
        if value > self.high:
            return self.anchors[-1].color
        if value < self.low:
            return self.anchors[0].color

        # Highest anchor whose threshold is <= value opens the bucket
        for lower, upper in zip(reversed(self.anchors[:-1]), reversed(self.anchors[1:])):
            if value >= lower.threshold:
                fraction = (value - lower.threshold) / (upper.threshold - lower.threshold)
                return interpolate(lower.color, upper.color, fraction, self.log)

        # Only reachable for NaN, which fails every comparison
        raise ValueError(f"Cannot map {value!r} to a color")


DEFAULT_GRADIENT = ColorGradient([
    ColorAnchor(0, BLACK_GREEN),
    ColorAnchor(1000, PURPLE),
    ColorAnchor(1500, BLUE),
    ColorAnchor(2000, GREEN),
    ColorAnchor(2600, YELLOW),
    ColorAnchor(3000, RED),
    ColorAnchor(3500, WHITE_RED),
])


def value_to_color(value: float) -> RGB:
    """Color of value on the default temperature gradient (degrees x 100)."""
    return DEFAULT_GRADIENT.color_for(value)


# Fixed colors for barrier cells when rendering
BARRIER_COLORS = {
    CellType.WALL: RGB(0, 0, 0),
    CellType.INTERNAL_DOOR: RGB(0, 255, 0),
    CellType.EXTERNAL_BARRIER: RGB(0, 255, 255),
}


def colorize(floorplan: Floorplan, field: np.ndarray,
             gradient: Optional[ColorGradient] = None) -> np.ndarray:
    """
    RGB image (height, width, 3) of a field.

    Air cells are colored by the gradient, barrier cells by their type.
    """
    floorplan.check_shape(field, "Field")
    gradient = gradient or DEFAULT_GRADIENT

    image = np.zeros(floorplan.shape + (3,), dtype=np.uint8)
    for y in range(floorplan.height):
        for x in range(floorplan.width):
            cell = floorplan.cell_type(x, y)
            if cell == CellType.AIR:
                image[y, x] = gradient.color_for(field[y, x])
            else:
                image[y, x] = BARRIER_COLORS[cell]
    return image
