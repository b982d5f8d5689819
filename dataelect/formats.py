from __future__ import annotations
import logging
from os import PathLike
from pathlib import Path
from typing import Optional, Sequence, Union

import pandas as pd

from . import canon, transform, utils
from .config import FormatConfig
from .exceptions import ExportError, require
from .types import ExportSpec, HourlyRecord, Resolution

logger = logging.getLogger(__name__)


def header(options: ExportSpec) -> list[str]:
    cols: list[str] = []
    if options.split_date_time:
        cols.append(canon.HEADER_DATE)
        if options.resolution == "hourly":
            cols.append(canon.HEADER_TIME)
    else:
        cols.append(canon.HEADER_PERIOD)

    units = canon.POWER_HEADERS if options.resolution == "hourly" else canon.ENERGY_HEADERS
    cols.extend(units[q] for q in options.enabled())
    return cols


def _period_cells(ts: pd.Timestamp, options: ExportSpec) -> list[str]:
    t = ts.to_pydatetime()
    if options.resolution == "hourly":
        if options.split_date_time:
            return [utils.day_label(t), f"{t:%H:%M}"]
        return [f"{utils.day_label(t)}, {t:%H:%M:%S}"]
    # daily/monthly periods have no time-of-day column
    label = utils.day_label(t) if options.resolution == "daily" else utils.month_label(t)
    return [label]


def export_frame(
    records: Sequence[HourlyRecord],
    options: ExportSpec,
) -> pd.DataFrame:
    """
    The export table: text period column(s) followed by one float column per
    enabled quantity, headed with the export labels, one row per period.

    Hourly rows carry the hour's average power; daily and monthly rows carry
    the sum of hourly averages (energy).
    """
    require(bool(options.enabled()), "No columns selected for export.", ExportError)

    periods = transform.rebucket(records, options.resolution)
    cols = header(options)
    n_period = len(cols) - len(options.enabled())

    labels = [_period_cells(pd.Timestamp(ts), options) for ts in periods.index]
    out = pd.DataFrame(labels, columns=cols[:n_period], dtype=object)
    for name, q in zip(cols[n_period:], options.enabled()):
        out[name] = periods[q].to_numpy(dtype=float)
    return out


def render_rows(
    records: Sequence[HourlyRecord],
    options: ExportSpec,
    fmt: Optional[FormatConfig] = None,
) -> list[list[str]]:
    """Text cells of export_frame, numbers formatted as in the document."""
    fmt = fmt or FormatConfig()
    frame = export_frame(records, options)
    n_period = len(frame.columns) - len(options.enabled())
    return [
        [
            *row[:n_period],
            *(utils.format_decimal(float(v), fmt.decimals, fmt.decimal) for v in row[n_period:]),
        ]
        for row in frame.itertuples(index=False, name=None)
    ]


def to_csv(
    records: Sequence[HourlyRecord],
    options: ExportSpec,
    fmt: Optional[FormatConfig] = None,
) -> str:
    """Delimited text document: optional BOM, header row, one row per period."""
    fmt = fmt or FormatConfig()
    body = export_frame(records, options).to_csv(
        sep=fmt.delimiter,
        decimal=fmt.decimal,
        float_format=f"%.{fmt.decimals}f",
        lineterminator=fmt.line_terminator,
        index=False,
    )
    return (canon.BOM if fmt.bom else "") + body


def export_filename(resolution: Resolution, fmt: Optional[FormatConfig] = None) -> str:
    fmt = fmt or FormatConfig()
    return f"{fmt.product}_export_{resolution}.{fmt.extension}"


def write_csv(
    records: Sequence[HourlyRecord],
    options: ExportSpec,
    directory: Union[str, PathLike] = ".",
    fmt: Optional[FormatConfig] = None,
) -> Path:
    fmt = fmt or FormatConfig()
    path = Path(directory) / export_filename(options.resolution, fmt)
    text = to_csv(records, options, fmt)
    # newline="" keeps the configured line terminator untouched
    with open(path, "w", encoding="utf-8", newline="") as fh:
        fh.write(text)
    logger.info("Exported %s (%d periods)", path, text.count(fmt.line_terminator) - 1)
    return path
