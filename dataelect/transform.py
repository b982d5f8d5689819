from __future__ import annotations
import logging
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from . import canon, utils
from .exceptions import require, ExportError
from .types import HourlyRecord, RawReading, Resolution

logger = logging.getLogger(__name__)

_FREQ = {"daily": "D", "monthly": "M"}


def readings_to_frame(readings: Iterable[RawReading]) -> pd.DataFrame:
    """
    Readings as a frame indexed by 'timestamp' with one column per quantity.
    Row order is preserved.
    """
    rows = [
        (r.timestamp, r.active_power, r.inductive_power, r.capacitive_power)
        for r in readings
    ]
    df = pd.DataFrame.from_records(
        rows, columns=[canon.INDEX_NAME, *canon.QUANTITIES]
    )
    df[canon.INDEX_NAME] = pd.to_datetime(df[canon.INDEX_NAME])
    df[list(canon.QUANTITIES)] = df[list(canon.QUANTITIES)].astype(float)
    return df.set_index(canon.INDEX_NAME)


def records_from_frame(df: pd.DataFrame) -> list[HourlyRecord]:
    """Inverse of hourly_to_frame."""
    out: list[HourlyRecord] = []
    for ts, row in df.iterrows():
        hour = pd.Timestamp(ts).to_pydatetime()
        out.append(
            HourlyRecord(
                hour_start=hour,
                label=utils.hour_label(hour),
                **{
                    f"{q}_{s}": float(row[f"{q}_{s}"])
                    for q in canon.QUANTITIES
                    for s in canon.STATS
                },
            )
        )
    return out


def hourly_to_frame(records: Sequence[HourlyRecord]) -> pd.DataFrame:
    """Hourly records as a frame indexed by 'hour_start' with '<quantity>_<stat>' columns."""
    cols = [f"{q}_{s}" for q in canon.QUANTITIES for s in canon.STATS]
    df = pd.DataFrame.from_records(
        [(r.hour_start, *(r.stat(q, s) for q in canon.QUANTITIES for s in canon.STATS)) for r in records],
        columns=[canon.HOUR_INDEX_NAME, *cols],
    )
    df[canon.HOUR_INDEX_NAME] = pd.to_datetime(df[canon.HOUR_INDEX_NAME])
    df[cols] = df[cols].astype(float)
    return df.set_index(canon.HOUR_INDEX_NAME)


def aggregate_hourly(readings: Iterable[RawReading]) -> list[HourlyRecord]:
    """
    Bucket readings by timestamp truncated to the hour and compute
    avg/max/min per quantity.

    The average of an hour is its mean power, read as that hour's energy in
    matching units (kW -> kWh) since the source interval is <= 1 hour.
    Output is sorted ascending by hour_start, one record per hour.
    """
    df = readings_to_frame(readings)
    if df.empty:
        return []

    hours = df.index.floor("h")
    g = df.groupby(hours, sort=True)
    stats = g.agg(["mean", "max", "min"])

    out = pd.DataFrame(index=stats.index)
    for q in canon.QUANTITIES:
        lo = stats[(q, "min")].to_numpy()
        hi = stats[(q, "max")].to_numpy()
        # float summation can push the mean an ulp outside [min, max]
        out[f"{q}_avg"] = np.clip(stats[(q, "mean")].to_numpy(), lo, hi)
        out[f"{q}_max"] = hi
        out[f"{q}_min"] = lo
    out.index.name = canon.HOUR_INDEX_NAME

    logger.debug("Aggregated %d readings into %d hours", len(df), len(out))
    return records_from_frame(out)


def rebucket(records: Sequence[HourlyRecord], resolution: Resolution) -> pd.DataFrame:
    """
    Re-render hourly data at a coarser resolution.

    - hourly: the hour averages (instantaneous power)
    - daily / monthly: sum of hourly averages per calendar day / month
      (accumulated energy)

    Returns a frame indexed by period start with one column per quantity,
    sorted ascending.
    """
    require(resolution in canon.RESOLUTIONS, f"Unknown resolution: {resolution!r}", ExportError)

    df = hourly_to_frame(records)
    avgs = df[[f"{q}_avg" for q in canon.QUANTITIES]].rename(
        columns={f"{q}_avg": q for q in canon.QUANTITIES}
    )
    if resolution == "hourly" or avgs.empty:
        out = avgs.sort_index(kind="mergesort")
        out.index.name = "period"
        return out

    idx = pd.DatetimeIndex(avgs.index)
    periods = idx.to_period(_FREQ[resolution]).to_timestamp()
    out = avgs.groupby(periods, sort=True).sum()
    out.index.name = "period"
    return out
