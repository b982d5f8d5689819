from __future__ import annotations
import logging
from os import PathLike
from pathlib import Path
from typing import Iterable, Optional, Union

from pydantic import ValidationError

from .. import canon, formats, ingest, transform, validate
from ..config import Config, default_config
from ..exceptions import ProjectLoadError
from ..mapping import FieldMapping
from ..types import ExportSpec, HourlyRecord, RawReading
from .types import (
    HourlyRecordModel,
    InstallationMetadata,
    ProjectSnapshot,
    RawReadingModel,
)

logger = logging.getLogger(__name__)


def to_snapshot(
    metadata: InstallationMetadata,
    readings: Iterable[RawReading],
    hourly: Iterable[HourlyRecord],
    ai_analysis: Optional[str] = None,
) -> ProjectSnapshot:
    return ProjectSnapshot(
        metadata=metadata,
        raw_data=[
            RawReadingModel(
                timestamp=r.timestamp,
                active_power=r.active_power,
                inductive_power=r.inductive_power,
                capacitive_power=r.capacitive_power,
            )
            for r in readings
        ],
        hourly_data=[
            HourlyRecordModel(
                hour_start=h.hour_start,
                label=h.label,
                active_avg=h.active_avg,
                active_max=h.active_max,
                active_min=h.active_min,
                inductive_avg=h.inductive_avg,
                inductive_max=h.inductive_max,
                inductive_min=h.inductive_min,
                capacitive_avg=h.capacitive_avg,
                capacitive_max=h.capacitive_max,
                capacitive_min=h.capacitive_min,
            )
            for h in hourly
        ],
        ai_analysis=ai_analysis,
    )


def readings_of(snapshot: ProjectSnapshot) -> list[RawReading]:
    return [
        RawReading(
            timestamp=m.timestamp,
            active_power=m.active_power,
            inductive_power=m.inductive_power,
            capacitive_power=m.capacitive_power,
        )
        for m in snapshot.raw_data
    ]


def hourly_of(snapshot: ProjectSnapshot) -> list[HourlyRecord]:
    return [HourlyRecord(**m.model_dump(by_alias=False)) for m in snapshot.hourly_data]


def build_project(
    sources: Iterable[ingest.Source],
    mapping: FieldMapping,
    metadata: Optional[InstallationMetadata] = None,
    config: Optional[Config] = None,
) -> ProjectSnapshot:
    """
    Import sources into a fresh snapshot: merge -> hourly aggregation.

    The previous series is never reused; metadata is copied with the CPE,
    file count and record count of this import.
    """
    sources = list(sources)
    metadata = metadata or InstallationMetadata()
    config = config or default_config()

    merged = ingest.merge(sources, mapping, config.imports)
    hourly = transform.aggregate_hourly(merged.readings)
    validate.assert_hourly(hourly)

    meta = metadata.model_copy(
        update={
            "cpe": merged.cpe or metadata.cpe,
            "files_count": len(sources),
            "total_records": len(merged.readings),
        }
    )
    return to_snapshot(meta, merged.readings, hourly)


def dumps(snapshot: ProjectSnapshot, indent: Optional[int] = None) -> str:
    """JSON with ISO-8601 timestamps and camelCase keys."""
    return snapshot.model_dump_json(by_alias=True, indent=indent)


def loads(text: Union[str, bytes]) -> ProjectSnapshot:
    """Parse a saved project; any failure raises ProjectLoadError."""
    try:
        return ProjectSnapshot.model_validate_json(text)
    except ValidationError as exc:
        raise ProjectLoadError(f"Invalid project file: {exc}") from exc


def save(snapshot: ProjectSnapshot, path: Union[str, PathLike]) -> Path:
    path = Path(path)
    path.write_text(dumps(snapshot), encoding="utf-8")
    logger.info("Saved project %s (%d readings)", path, len(snapshot.raw_data))
    return path


def load(path: Union[str, PathLike]) -> ProjectSnapshot:
    try:
        text = Path(path).read_bytes()
    except OSError as exc:
        raise ProjectLoadError(f"Cannot read project file {path!s}: {exc}") from exc
    return loads(text)


def default_project_filename(snapshot: ProjectSnapshot, product: str = canon.PRODUCT_NAME) -> str:
    return f"{product}_{snapshot.metadata.name or 'projeto'}.json"


def export(
    snapshot: ProjectSnapshot,
    options: ExportSpec,
    directory: Union[str, PathLike] = ".",
    config: Optional[Config] = None,
) -> Path:
    """Write the snapshot's hourly series as a delimited export file."""
    config = config or default_config()
    return formats.write_csv(hourly_of(snapshot), options, directory, config.formats)
