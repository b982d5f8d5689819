from __future__ import annotations
import math
from datetime import date, datetime, time
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from . import canon
from .types import BLANK, Blank, CellValue, Moment, Number, Text


def to_cell(value: object) -> CellValue:
    """Classify a raw value coming out of a spreadsheet reader."""
    if isinstance(value, (Number, Text, Moment, Blank)):
        return value
    if isinstance(value, np.datetime64):
        value = pd.Timestamp(value)
    if value is None or value is pd.NaT or value is pd.NA:
        return BLANK
    if isinstance(value, bool):
        return Text(str(value))
    if isinstance(value, (int, float, np.integer, np.floating)):
        f = float(value)
        return Number(f) if math.isfinite(f) else BLANK
    if isinstance(value, datetime):
        # pd.Timestamp is a datetime subclass
        return Moment(pd.Timestamp(value).to_pydatetime())
    if isinstance(value, date):
        return Moment(datetime(value.year, value.month, value.day))
    if isinstance(value, time):
        seconds = value.hour * 3600 + value.minute * 60 + value.second
        return Number(seconds / canon.SECONDS_PER_DAY)
    if isinstance(value, str):
        return Text(value) if value.strip() else BLANK
    return Text(str(value))


class CellGrid:
    """
    Row-major view over the first sheet of a source file.

    Cells are addressed by (row, col), zero-based; anything outside the
    loaded rectangle reads as Blank.
    """

    def __init__(self, rows: Iterable[Sequence[object]]):
        self._rows: list[list[CellValue]] = [[to_cell(v) for v in row] for row in rows]

    @classmethod
    def from_rows(cls, rows: Iterable[Sequence[object]]) -> "CellGrid":
        return cls(rows)

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> "CellGrid":
        # header=None frames: the column labels are positions, not data
        return cls(df.astype(object).itertuples(index=False, name=None))

    @property
    def n_rows(self) -> int:
        return len(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def has_row(self, row: int) -> bool:
        return 0 <= row < len(self._rows)

    def row_is_blank(self, row: int) -> bool:
        if not self.has_row(row):
            return True
        return all(isinstance(c, Blank) for c in self._rows[row])

    def cell(self, row: int, col: int) -> CellValue:
        if not self.has_row(row) or col < 0:
            return BLANK
        cells = self._rows[row]
        return cells[col] if col < len(cells) else BLANK

    def head(self, n: int) -> "CellGrid":
        out = CellGrid([])
        out._rows = [list(r) for r in self._rows[:n]]
        return out

    def to_rows(self) -> list[list[object]]:
        """Plain python values (None for blanks), e.g. for a preview table."""
        return [
            [None if isinstance(c, Blank) else c.value for c in row]  # type: ignore[union-attr]
            for row in self._rows
        ]
