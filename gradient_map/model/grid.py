"""Floorplan grid for the gradient map."""

import logging
import math
from enum import IntEnum
from typing import List, Sequence, Tuple

import numpy as np

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

MIN_SIZE = 3

# Moore neighborhood (8-connected), as (dx, dy)
MOORE_OFFSETS = [
    (-1, -1), (0, -1), (1, -1),
    (-1, 0),           (1, 0),
    (-1, 1),  (0, 1),  (1, 1)
]

# 3x3 kernel summing the Moore neighborhood, center excluded
MOORE_KERNEL = np.array([
    [1, 1, 1],
    [1, 0, 1],
    [1, 1, 1]
], dtype=np.int32)


class CellType(IntEnum):
    AIR = 0               # medium the field propagates through
    WALL = 1              # impenetrable barrier
    INTERNAL_DOOR = 2     # classified, behaves like a wall for now
    EXTERNAL_BARRIER = 3  # exterior door or window, behaves like a wall for now


def round_half_up(value: float) -> int:
    """Round .5 toward +infinity, unlike round() which rounds to even."""
    return int(math.floor(value + 0.5))


class Floorplan:
    """
    Static classification of every cell of the floorplan.

    Coordinate convention: (x, y) for API, [y, x] for array indexing.
    Only AIR cells take part in region growth and relaxation; every other
    cell type is a barrier.
    """

    def __init__(self, width: int, height: int):
        if width < MIN_SIZE or height < MIN_SIZE:
            raise ConfigurationError(
                f"Floorplan must be at least {MIN_SIZE}x{MIN_SIZE}, "
                f"got {width}x{height}"
            )
        self.width = width
        self.height = height
        self.cells = np.full((height, width), CellType.AIR, dtype=np.int8)

    @classmethod
    def with_border(cls, width: int, height: int) -> "Floorplan":
        """Air floorplan enclosed by a one cell wall ring."""
        plan = cls(width, height)
        plan.add_wall_line(0, 0, width - 1, 0)
        plan.add_wall_line(0, height - 1, width - 1, height - 1)
        plan.add_wall_line(0, 0, 0, height - 1)
        plan.add_wall_line(width - 1, 0, width - 1, height - 1)
        return plan

    @classmethod
    def from_cells(cls, rows: Sequence[Sequence[int]]) -> "Floorplan":
        """Build a floorplan from a list of rows of cell type codes."""
        if not rows or not rows[0]:
            raise ConfigurationError("Floorplan cell grid is empty")
        width = len(rows[0])
        if any(len(row) != width for row in rows):
            raise ConfigurationError("Floorplan rows must all have the same length")

        plan = cls(width, len(rows))
        valid = {int(c) for c in CellType}
        for y, row in enumerate(rows):
            for x, code in enumerate(row):
                if int(code) not in valid:
                    raise ConfigurationError(
                        f"Unknown cell type {code!r} at ({x},{y})"
                    )
                plan.cells[y, x] = int(code)
        return plan

    @property
    def shape(self) -> Tuple[int, int]:
        """Array shape (height, width) shared by every grid on this plan."""
        return (self.height, self.width)

    def freeze(self) -> None:
        """Make the cell array read-only."""
        self.cells.setflags(write=False)

    def is_inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_air(self, x: int, y: int) -> bool:
        """Check if cell is within bounds and contains air."""
        if not self.is_inside(x, y):
            return False
        return self.cells[y, x] == CellType.AIR

    def cell_type(self, x: int, y: int) -> CellType:
        return CellType(int(self.cells[y, x]))

    def air_mask(self) -> np.ndarray:
        """Boolean mask, True where the cell contains air."""
        return self.cells == CellType.AIR

    def interior_mask(self) -> np.ndarray:
        """Boolean mask excluding the outermost ring of cells."""
        mask = np.zeros(self.shape, dtype=bool)
        mask[1:-1, 1:-1] = True
        return mask

    def moore_neighbors(self, x: int, y: int) -> List[Tuple[int, int]]:
        """Air cells in the Moore neighborhood of (x, y)."""
        neighbors = []
        for dx, dy in MOORE_OFFSETS:
            nx, ny = x + dx, y + dy
            if self.is_air(nx, ny):
                neighbors.append((nx, ny))
        return neighbors

    def add_wall_line(self, x1: int, y1: int, x2: int, y2: int,
                      cell_type: CellType = CellType.WALL) -> bool:
        """
        Rasterize a straight segment of barrier cells.

        Both endpoints must lie inside the floorplan; otherwise the call is
        skipped with a warning and False is returned.
        """
        for name, value, limit in (("x1", x1, self.width), ("x2", x2, self.width),
                                   ("y1", y1, self.height), ("y2", y2, self.height)):
            if not 0 <= value < limit:
                logger.warning("%s for wall out of range: 0 - %d, got: %d",
                               name, limit - 1, value)
                return False

        dx = x2 - x1
        dy = y2 - y1
        steps = max(abs(dx), abs(dy))
        if steps == 0:
            self.cells[y1, x1] = cell_type
            return True

        step_x = dx / steps
        step_y = dy / steps
        for i in range(steps + 1):
            x = x1 + round_half_up(i * step_x)
            y = y1 + round_half_up(i * step_y)
            self.cells[y, x] = cell_type
        return True

    def add_wall_rectangle(self, x: int, y: int, w: int, h: int,
                           cell_type: CellType = CellType.WALL) -> bool:
        """
        Mark rectangular region as barrier, clipped to the floorplan.

        A rectangle with no cell inside the floorplan is skipped with a
        warning and False is returned.
        """
        # Clamp both corners to grid boundaries
        x_start = min(max(x, 0), self.width)
        y_start = min(max(y, 0), self.height)
        x_end = min(max(x + w, 0), self.width)
        y_end = min(max(y + h, 0), self.height)
        if x_start >= x_end or y_start >= y_end:
            logger.warning("Wall rectangle at (%d,%d) size %dx%d lies outside "
                           "the %dx%d floorplan, skipped",
                           x, y, w, h, self.width, self.height)
            return False
        if (x_start, y_start, x_end, y_end) != (x, y, x + w, y + h):
            logger.warning("Wall rectangle at (%d,%d) size %dx%d clipped to the floorplan",
                           x, y, w, h)
        self.cells[y_start:y_end, x_start:x_end] = cell_type
        return True

    def add_wall_points(self, coords: List[Tuple[int, int]],
                        cell_type: CellType = CellType.WALL) -> None:
        """Mark specific cells as barrier, skipping those out of bounds."""
        for x, y in coords:
            if self.is_inside(x, y):
                self.cells[y, x] = cell_type
            else:
                logger.warning("Wall point (%d,%d) outside %dx%d floorplan, skipped",
                               x, y, self.width, self.height)

    def check_shape(self, grid: np.ndarray, name: str) -> None:
        """Raise ConfigurationError unless grid matches this plan's shape."""
        if np.shape(grid) != self.shape:
            raise ConfigurationError(
                f"{name} has shape {np.shape(grid)}, floorplan is {self.shape}"
            )
