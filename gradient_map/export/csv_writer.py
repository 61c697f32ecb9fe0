"""CSV export of relaxed field values."""

import csv
from pathlib import Path
from typing import IO, Optional, TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from ..model.state import FieldSnapshot


class CSVWriter:
    """
    Appends the Air cells of field snapshots to a CSV log.

    Output format:
        step,x,y,region,value
        0,1,1,0,2000.0
        ...

    Region is the owning sensor id, -1 when no sensor reaches the cell.
    Only every `every`-th step is written; step 0 is always written.
    """

    FIELDS = ['step', 'x', 'y', 'region', 'value']

    def __init__(self, output_path: Path, every: int = 1):
        self.output_path = Path(output_path)
        self.every = max(1, every)
        self.file: Optional[IO[str]] = None
        self.writer: Optional[csv.DictWriter] = None
        self.rows_written = 0

    @property
    def is_open(self) -> bool:
        return self.file is not None

    def open(self) -> None:
        """Create the file and write the header."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.file = open(self.output_path, 'w', newline='')
        self.writer = csv.DictWriter(self.file, fieldnames=self.FIELDS)
        self.writer.writeheader()

    def append(self, snapshot: "FieldSnapshot") -> None:
        if not self.is_open:
            self.open()
        if snapshot.step % self.every:
            return
        rows = snapshot.to_csv_rows()
        self.writer.writerows(rows)
        self.rows_written += len(rows)
        self.file.flush()

    def close(self) -> None:
        if self.file:
            self.file.close()
            self.file = None
            self.writer = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def write_field_matrix(field: np.ndarray, output_path: Path, precision: int = 2) -> None:
    """Dump a field as a plain height x width matrix, one CSV row per y."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    np.savetxt(output_path, field, delimiter=',', fmt=f'%.{precision}f')
