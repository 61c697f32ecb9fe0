"""State snapshot dataclasses for the gradient map."""

from dataclasses import dataclass
from typing import Dict, List

import numpy as np


@dataclass
class FieldSnapshot:
    """Field after a given relaxation step."""
    step: int
    field: np.ndarray          # Copy of the scalar field
    region_ids: np.ndarray     # Copy of the owning sensor ids
    air: np.ndarray            # Air mask of the floorplan
    metrics: Dict[str, float]  # max_change, min, max, mean over air

    def to_csv_rows(self) -> List[Dict]:
        """Convert Air cells to CSV-compatible rows."""
        ys, xs = np.nonzero(self.air)
        return [
            {
                "step": self.step,
                "x": int(x),
                "y": int(y),
                "region": int(self.region_ids[y, x]),
                "value": float(self.field[y, x])
            }
            for x, y in zip(xs, ys)
        ]
