from __future__ import annotations
from typing import Optional, Sequence, cast

import numpy as np
import pandas as pd

from . import canon, transform, utils
from .types import GlobalStats, HourlyRecord, QuantityStats, SeriesStats, SummaryPayload

TREND_BAND = 0.05  # +/-5% between halves counts as stable


def global_stats(records: Sequence[HourlyRecord]) -> GlobalStats:
    """
    Whole-series statistics per quantity:
    peak of hourly maxima, floor of hourly minima, mean of hourly averages
    and sum of hourly averages (energy).
    """
    df = transform.hourly_to_frame(records)
    out: dict[str, object] = {"count": len(df)}
    for q in canon.QUANTITIES:
        if df.empty:
            out[q] = QuantityStats(max=0.0, min=0.0, avg=0.0, sum=0.0)
            continue
        # true extremes: an all-negative quantity reports its negative peak, not 0
        out[q] = QuantityStats(
            max=float(df[f"{q}_max"].max()),
            min=float(df[f"{q}_min"].min()),
            avg=float(df[f"{q}_avg"].mean()),
            sum=float(df[f"{q}_avg"].sum()),
        )
    return cast(GlobalStats, out)


def monthly_breakdown(records: Sequence[HourlyRecord]) -> pd.DataFrame:
    """
    Per calendar month: mean of hourly averages, peak of hourly maxima and
    sum of hourly averages.

    Columns: month (label), <q> (mean), <q>_max, <q>_sum.
    """
    df = transform.hourly_to_frame(records)
    cols = ["month"] + [c for q in canon.QUANTITIES for c in (q, f"{q}_max", f"{q}_sum")]
    if df.empty:
        return pd.DataFrame(columns=cols)

    months = pd.DatetimeIndex(df.index).to_period("M").to_timestamp()
    g = df.groupby(months, sort=True)
    out = pd.DataFrame(index=g.size().index)
    for q in canon.QUANTITIES:
        out[q] = g[f"{q}_avg"].mean()
        out[f"{q}_max"] = g[f"{q}_max"].max()
        out[f"{q}_sum"] = g[f"{q}_avg"].sum()
    out = out.reset_index(names="period")
    out.insert(0, "month", [utils.month_label(ts.to_pydatetime()) for ts in out["period"]])
    return out[cols]


def series_stats(values: Sequence[float], labels: Optional[Sequence[str]] = None) -> SeriesStats:
    """
    Descriptive statistics of a short series (e.g. one value per month).

    trend compares the mean of the second half against the first half.
    """
    arr = np.asarray(values, dtype=float)
    labels = list(labels) if labels is not None else [str(i) for i in range(len(arr))]
    if arr.size == 0:
        return SeriesStats(
            min=0.0, max=0.0, avg=0.0, total=0.0, median=0.0,
            max_label="", min_label="", trend="stable",
        )

    half = arr.size // 2
    first = arr[:half].mean() if half else 0.0
    second = arr[half:].mean()
    trend = "stable"
    if second > first * (1 + TREND_BAND):
        trend = "rising"
    if second < first * (1 - TREND_BAND):
        trend = "falling"

    return SeriesStats(
        min=float(arr.min()),
        max=float(arr.max()),
        avg=float(arr.mean()),
        total=float(arr.sum()),
        median=float(np.median(arr)),
        max_label=labels[int(arr.argmax())],
        min_label=labels[int(arr.argmin())],
        trend=trend,  # type: ignore[typeddict-item]
    )


def summarise(records: Sequence[HourlyRecord], cpe: Optional[str] = None) -> SummaryPayload:
    months = monthly_breakdown(records)
    start = records[0].hour_start if records else None
    end = records[-1].hour_start if records else None
    days = int((end.date() - start.date()).days) + 1 if start and end else 0

    labels = months["month"].tolist()
    trends = {q: series_stats(months[f"{q}_sum"].tolist(), labels) for q in canon.QUANTITIES}

    # Pylance-friendly typed records
    month_records: list[dict[str, float | str]] = (
        months.to_dict(orient="records") if not months.empty else []  # type: ignore[assignment]
    )

    payload: SummaryPayload = cast(
        SummaryPayload,
        {
            "meta": {
                "cpe": cpe,
                "start": start.isoformat() if start else "",
                "end": end.isoformat() if end else "",
                "hours": len(records),
                "days": days,
            },
            "stats": global_stats(records),
            "months": month_records,
            "trends": trends,
        },
    )
    return payload
