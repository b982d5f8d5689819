from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from os import PathLike, fspath
from typing import IO, Iterable, Optional, Sequence, Union

import pandas as pd

from . import canon, utils
from .config import ImportConfig
from .exceptions import FileTimeoutError, NoValidDataError, UnreadableFileError
from .grid import CellGrid
from .mapping import FieldMapping
from .timestamps import resolve_timestamp
from .types import Blank, MergeResult, Number, RawReading

logger = logging.getLogger(__name__)

Source = Union[str, PathLike, IO[bytes], pd.DataFrame, CellGrid]

_CSV_SUFFIXES = (".csv", ".txt")


def _numeric_text(value: object) -> object:
    """Plain numeric strings ('45000', '0,5') as floats, like a spreadsheet cell."""
    if not isinstance(value, str) or not value.strip():
        return value
    number = pd.to_numeric(value.strip().replace(",", ".", 1), errors="coerce")
    return value if pd.isna(number) else float(number)


def _source_name(source: Source) -> str:
    if isinstance(source, (str, PathLike)):
        return fspath(source)
    return getattr(source, "name", type(source).__name__)


def load_grid(source: Source) -> CellGrid:
    """
    Decode the first sheet of a source into a CellGrid.

    CSV/TXT are sniffed for their delimiter and numeric text is typed as
    numbers; anything else goes through ``pandas.read_excel``.
    Raises UnreadableFileError if decoding fails.
    """
    if isinstance(source, CellGrid):
        return source
    if isinstance(source, pd.DataFrame):
        return CellGrid.from_frame(source)

    name = _source_name(source)
    try:
        if str(name).lower().endswith(_CSV_SUFFIXES):
            df = pd.read_csv(
                source,
                header=None,
                sep=None,
                engine="python",
                dtype=object,
                skip_blank_lines=False,
                encoding="utf-8-sig",
            ).map(_numeric_text)
        else:
            df = pd.read_excel(source, sheet_name=0, header=None)
    except Exception as exc:
        raise UnreadableFileError(f"Cannot read spreadsheet {name!r}: {exc}") from exc

    logger.debug("Loaded %s: %d rows x %d cols", name, df.shape[0], df.shape[1])
    return CellGrid.from_frame(df)


def preview(source: Source, n_rows: int = 50) -> CellGrid:
    """First rows of a source, for choosing the field mapping."""
    return load_grid(source).head(n_rows)


def read_cpe(grid: CellGrid, mapping: FieldMapping) -> Optional[str]:
    """Installation identifier at its fixed anchor (never row-offset)."""
    if not mapping.has_cpe:
        return None
    cell = grid.cell(mapping.cpe_row, mapping.cpe_col)  # type: ignore[arg-type]
    if isinstance(cell, Blank):
        return None
    if isinstance(cell, Number) and float(cell.value).is_integer():
        text = str(int(cell.value))
    else:
        text = str(cell.value).strip()
    return text or None


def extract(
    grid: CellGrid, mapping: FieldMapping, *, skip_blank_rows: bool = True
) -> list[RawReading]:
    """
    Walk the grid from the date row down and emit one reading per row whose
    timestamp resolves. Unresolvable rows are dropped; quantity cells on rows
    past the end of the grid read as 0.
    """
    offsets = {q: mapping.offset(q) for q in canon.QUANTITIES}
    cols = {q: mapping.column(q) for q in canon.QUANTITIES}

    readings: list[RawReading] = []
    skipped = 0
    for row in range(mapping.date_row, grid.n_rows):
        if skip_blank_rows and grid.row_is_blank(row):
            continue

        date_cell = grid.cell(row, mapping.date_col)
        time_cell = (
            grid.cell(row + mapping.time_offset, mapping.time_col)  # type: ignore[arg-type]
            if mapping.has_time
            else None
        )
        ts = resolve_timestamp(date_cell, time_cell)
        if ts is None:
            skipped += 1
            continue

        values = {}
        for q in canon.QUANTITIES:
            target = row + offsets[q]
            values[q] = (
                utils.parse_number(grid.cell(target, cols[q]))
                if grid.has_row(target)
                else 0.0
            )

        readings.append(
            RawReading(
                timestamp=ts,
                active_power=values["active"],
                inductive_power=values["inductive"],
                capacitive_power=values["capacitive"],
            )
        )

    if skipped:
        logger.debug("Skipped %d rows without a resolvable timestamp", skipped)
    return readings


def _load_and_extract(
    source: Source, mapping: FieldMapping, read_id: bool, skip_blank_rows: bool
) -> tuple[list[RawReading], Optional[str]]:
    grid = load_grid(source)
    readings = extract(grid, mapping, skip_blank_rows=skip_blank_rows)
    logger.debug("%s: %d readings", _source_name(source), len(readings))
    return readings, (read_cpe(grid, mapping) if read_id else None)


def _count_duplicates(readings: Sequence[RawReading]) -> int:
    return sum(
        1 for a, b in zip(readings, readings[1:]) if a.timestamp == b.timestamp
    )


def merge(
    sources: Iterable[Source],
    mapping: FieldMapping,
    config: Optional[ImportConfig] = None,
) -> MergeResult:
    """
    Extract every source, concatenate in input order and stable-sort by time.

    - Each source is loaded in a worker with its own timeout; the first
      failure cancels the rest and aborts the import.
    - The CPE is read from the first source only.
    - Overlapping sources are not de-duplicated.
    - Raises NoValidDataError if nothing resolves.
    """
    config = config or ImportConfig()
    sources = list(sources)
    if not sources:
        raise NoValidDataError("no valid data found: no input files")

    per_file: list[list[RawReading]] = []
    cpe: Optional[str] = None

    pool = ThreadPoolExecutor(max_workers=max(1, min(config.max_workers, len(sources))))
    try:
        futures = [
            pool.submit(_load_and_extract, src, mapping, i == 0, config.skip_blank_rows)
            for i, src in enumerate(sources)
        ]
        for src, fut in zip(sources, futures):
            try:
                readings, file_cpe = fut.result(timeout=config.file_timeout_s)
            except FutureTimeout as exc:
                raise FileTimeoutError(
                    f"Timed out after {config.file_timeout_s}s reading {_source_name(src)!r}"
                ) from exc
            per_file.append(readings)
            cpe = cpe or file_cpe
    finally:
        pool.shutdown(wait=False, cancel_futures=True)

    combined = [r for readings in per_file for r in readings]
    if not combined:
        raise NoValidDataError()

    # sorted() is stable: equal timestamps keep input-file order
    combined = sorted(combined, key=lambda r: r.timestamp)

    dups = _count_duplicates(combined)
    if dups:
        logger.warning(
            "%d duplicate timestamps after merge; input files overlap", dups
        )
    logger.info(
        "Merged %d readings from %d files (%s .. %s)",
        len(combined),
        len(sources),
        combined[0].timestamp.isoformat(),
        combined[-1].timestamp.isoformat(),
    )
    return MergeResult(readings=combined, cpe=cpe)
