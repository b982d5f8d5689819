"""Reconcile a date cell and an optional time cell into one naive instant.

Cells are matched on their variant (Number, Text, Moment, Blank):

- no time cell: a Number is a full day-serial (date + time of day); Text is
  parsed as ISO-8601, falling back to ``D/M/Y H:M`` tokens; a Moment is used
  as is.
- time cell present: two Numbers are summed as integer day + day fraction;
  otherwise the date and the time are resolved separately and combined.

Every accepted instant has a year after 1990 and zero seconds.
"""

from __future__ import annotations
import math
import re
from datetime import datetime, timedelta
from typing import Optional

import pandas as pd

from . import canon, utils
from .grid import to_cell
from .types import Blank, CellValue, Moment, Number, Text

_DATE_TIME_TOKENS = re.compile(r"[/\-\s:]+")
_DATE_TOKENS = re.compile(r"[/\-\s]+")


def _to_int(token: str) -> Optional[int]:
    try:
        return int(token)
    except ValueError:
        return None


def _build(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> Optional[datetime]:
    # out-of-range dates such as 31/02 are rejected, not rolled into the next month
    try:
        return datetime(year, month, day) + timedelta(hours=hour, minutes=minute)
    except (ValueError, OverflowError):
        return None


def _parse_iso(text: str) -> Optional[datetime]:
    ts = pd.to_datetime(text.strip(), format="ISO8601", errors="coerce")
    if pd.isna(ts):
        return None
    # keep the encoded wall time; no timezone conversion
    return ts.tz_localize(None).to_pydatetime() if ts.tz is not None else ts.to_pydatetime()


def _parse_day_first(text: str) -> Optional[datetime]:
    """'15/03/2023 14:30' -> D/M/Y H:M; needs at least five tokens."""
    parts = [p for p in _DATE_TIME_TOKENS.split(text.strip()) if p]
    if len(parts) < 5:
        return None
    day, month, year, hour, minute = (_to_int(p) for p in parts[:5])
    if None in (day, month, year, hour, minute):
        return None
    return _build(year, month, day, hour, minute)  # type: ignore[arg-type]


def _parse_date_text(text: str) -> Optional[datetime]:
    """
    Date-only text. ISO first, then a best-effort token heuristic:
    third token > 1000 -> DD/MM/YYYY, first token > 1000 -> YYYY/MM/DD.
    """
    parsed = _parse_iso(text)
    if parsed is not None:
        return parsed
    parts = [p for p in _DATE_TOKENS.split(text.strip()) if p]
    if len(parts) < 3:
        return None
    p1, p2, p3 = (_to_int(p) for p in parts[:3])
    if p1 is None or p2 is None or p3 is None:
        return None
    if p3 > 1000:
        return _build(p3, p2, p1)
    if p1 > 1000:
        return _build(p1, p2, p3)
    # no year token: the row is dropped rather than stamped with today's date
    return None


def _resolve_date_part(cell: CellValue) -> Optional[datetime]:
    if isinstance(cell, Number):
        return utils.serial_to_datetime(cell.value)
    if isinstance(cell, Moment):
        return cell.value.replace(tzinfo=None)
    if isinstance(cell, Text):
        return _parse_date_text(cell.value)
    return None


def _resolve_time_part(cell: CellValue) -> Optional[tuple[int, int]]:
    if isinstance(cell, Number):
        return utils.fraction_to_hm(cell.value)
    if isinstance(cell, Moment):
        return cell.value.hour, cell.value.minute
    if isinstance(cell, Text):
        parts = cell.value.strip().split(":")
        if len(parts) < 2:
            return 0, 0
        hour, minute = _to_int(parts[0].strip()), _to_int(parts[1].strip())
        if hour is None or minute is None:
            return None
        return hour, minute
    return 0, 0


def _resolve_single(cell: CellValue) -> Optional[datetime]:
    if isinstance(cell, Number):
        return utils.serial_to_datetime(cell.value)
    if isinstance(cell, Moment):
        return cell.value.replace(tzinfo=None)
    if isinstance(cell, Text):
        return _parse_iso(cell.value) or _parse_day_first(cell.value)
    return None


def _resolve_pair(date_cell: CellValue, time_cell: CellValue) -> Optional[datetime]:
    if isinstance(date_cell, Number) and isinstance(time_cell, Number):
        serial = math.floor(date_cell.value) + math.fmod(time_cell.value, 1.0)
        return utils.serial_to_datetime(serial)

    day = _resolve_date_part(date_cell)
    hm = _resolve_time_part(time_cell)
    if day is None or hm is None:
        return None
    hour, minute = hm
    midnight = day.replace(hour=0, minute=0, second=0, microsecond=0)
    try:
        return midnight + timedelta(hours=hour, minutes=minute)
    except OverflowError:
        return None


def resolve_timestamp(date_cell: object, time_cell: object = None) -> Optional[datetime]:
    """
    Resolve the instant of one data row, or None if the row must be skipped.

    Accepts CellValue variants or raw reader values (float, str, datetime, None).
    """
    date_cell = to_cell(date_cell)
    time_cell = to_cell(time_cell)

    if isinstance(time_cell, Blank):
        ts = _resolve_single(date_cell)
    else:
        ts = _resolve_pair(date_cell, time_cell)

    if ts is None or ts.year <= canon.MIN_VALID_YEAR:
        return None
    return utils.floor_minute(ts)
