from __future__ import annotations
from typing import List, Optional
from datetime import date, datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .. import canon


def _naive(ts: datetime) -> datetime:
    # aware timestamps (e.g. '...Z' in older snapshots) are kept as UTC wall time
    if ts.tzinfo is not None:
        return ts.astimezone(timezone.utc).replace(tzinfo=None)
    return ts


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InstallationMetadata(_Model):
    """Descriptive metadata of the metered installation.

    Attributes:
        name: Installation name
        location: Site location
        technician: Responsible technician
        report_date: Report date (YYYY-MM-DD)
        cpe: Metering-point identifier, read from the first source file
        source_interval: Nominal interval of the source readings, e.g. '15m'
        files_count: Number of files in the last import
        total_records: Number of readings in the last import
    """

    name: str = ""
    location: str = ""
    technician: str = ""
    report_date: str = Field(default_factory=lambda: date.today().isoformat())
    cpe: str = ""
    source_interval: Optional[str] = canon.DEFAULT_SOURCE_INTERVAL
    files_count: Optional[int] = 0
    total_records: Optional[int] = 0


class RawReadingModel(_Model):
    timestamp: datetime
    active_power: float
    inductive_power: float
    capacitive_power: float

    @field_validator("timestamp")
    @classmethod
    def naive_timestamp(cls, v: datetime) -> datetime:
        return _naive(v)


class HourlyRecordModel(_Model):
    hour_start: datetime = Field(alias="timestamp")
    label: str = Field(default="", alias="hourLabel")
    active_avg: float
    active_max: float
    active_min: float
    inductive_avg: float
    inductive_max: float
    inductive_min: float
    capacitive_avg: float
    capacitive_max: float
    capacitive_min: float

    @field_validator("hour_start")
    @classmethod
    def naive_hour_start(cls, v: datetime) -> datetime:
        return _naive(v)


class ProjectSnapshot(_Model):
    """Serialised project: metadata plus the full raw and hourly series."""

    metadata: InstallationMetadata = Field(default_factory=InstallationMetadata)
    raw_data: List[RawReadingModel] = Field(default_factory=list)
    hourly_data: List[HourlyRecordModel] = Field(default_factory=list)
    ai_analysis: Optional[str] = None
