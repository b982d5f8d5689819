from __future__ import annotations
import math
import re
from datetime import datetime, timedelta
from typing import Optional

import numpy as np

from . import canon
from .types import Number, Text

_UNIX_EPOCH = datetime(1970, 1, 1)
_NON_NUMERIC = re.compile(r"[^0-9.\-]")
_LEADING_NUMBER = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")


def parse_number(cell: object) -> float:
    """
    Normalise a cell to a float, independent of locale formatting.

    - numbers pass through (non-finite -> 0)
    - text: trimmed, first comma becomes the decimal point, everything but
      digits, '.' and '-' is dropped, then the longest numeric prefix is parsed
    - anything else, or text without a number, -> 0.0
    """
    if isinstance(cell, Number):
        cell = cell.value
    elif isinstance(cell, Text):
        cell = cell.value

    if isinstance(cell, bool):
        return 0.0
    if isinstance(cell, (int, float, np.integer, np.floating)):
        value = float(cell)
        return value if math.isfinite(value) else 0.0
    if isinstance(cell, str):
        cleaned = _NON_NUMERIC.sub("", cell.strip().replace(",", ".", 1))
        match = _LEADING_NUMBER.match(cleaned)
        return float(match.group(0)) if match else 0.0
    return 0.0


def serial_to_datetime(serial: float) -> Optional[datetime]:
    """
    Convert a spreadsheet day-serial (1899-12-30 base) to a naive datetime.

    Rounded to the nearest millisecond so float noise from the serial does not
    leak into the minute. Returns None when the serial is out of range.
    """
    if not math.isfinite(serial):
        return None
    millis = round((serial - canon.EXCEL_EPOCH_OFFSET) * canon.SECONDS_PER_DAY * 1000)
    try:
        return _UNIX_EPOCH + timedelta(milliseconds=millis)
    except OverflowError:
        return None


def fraction_to_hm(fraction: float) -> tuple[int, int]:
    """Fraction of a day (0.5 == 12:00) -> (hours, minutes); hours may exceed 23."""
    total_seconds = round(fraction * canon.SECONDS_PER_DAY)
    return total_seconds // 3600, (total_seconds % 3600) // 60


def floor_minute(ts: datetime) -> datetime:
    return ts.replace(second=0, microsecond=0)


def floor_hour(ts: datetime) -> datetime:
    return ts.replace(minute=0, second=0, microsecond=0)


def hour_label(ts: datetime) -> str:
    """Short display label for an hourly bucket, e.g. '15 mar 14:00'."""
    return f"{ts.day:02d} {canon.MONTHS_PT_SHORT[ts.month - 1]} {ts:%H:%M}"


def day_label(ts: datetime) -> str:
    return f"{ts:%d/%m/%Y}"


def month_label(ts: datetime) -> str:
    return f"{canon.MONTHS_PT[ts.month - 1]} de {ts.year}"


def format_decimal(value: float, decimals: int = 2, decimal: str = ",") -> str:
    return f"{value:.{decimals}f}".replace(".", decimal)
