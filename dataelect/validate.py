from __future__ import annotations
from typing import Sequence

from . import canon, exceptions
from .types import HourlyRecord, RawReading


def assert_readings(readings: Sequence[RawReading]) -> None:
    """Merged readings must be sorted ascending (duplicates allowed)."""
    for a, b in zip(readings, readings[1:]):
        if b.timestamp < a.timestamp:
            raise exceptions.AggregationError(
                f"Readings out of order at {b.timestamp.isoformat()}."
            )


def assert_hourly(records: Sequence[HourlyRecord]) -> None:
    prev = None
    for r in records:
        ts = r.hour_start
        if (ts.minute, ts.second, ts.microsecond) != (0, 0, 0):
            raise exceptions.AggregationError(
                f"hour_start {ts.isoformat()} is not truncated to the hour."
            )
        if prev is not None and ts <= prev:
            raise exceptions.AggregationError(
                "hour_start values must be unique and ascending."
            )
        for q in canon.QUANTITIES:
            lo, avg, hi = r.stat(q, "min"), r.stat(q, "avg"), r.stat(q, "max")
            if not lo <= avg <= hi:
                raise exceptions.AggregationError(
                    f"{q} at {ts.isoformat()}: expected min <= avg <= max, "
                    f"got {lo} / {avg} / {hi}."
                )
        prev = ts
