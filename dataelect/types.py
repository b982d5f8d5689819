from __future__ import annotations
from typing import TypedDict, Literal, List, Dict, NamedTuple, Optional, Union
from dataclasses import dataclass, field
from datetime import datetime

from . import canon

Quantity = Literal["active", "inductive", "capacitive"]
Resolution = Literal["hourly", "daily", "monthly"]


## Cell variants
@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Moment:
    """Native date/time produced by the spreadsheet reader for date-formatted cells."""

    value: datetime


@dataclass(frozen=True)
class Blank:
    pass


BLANK = Blank()

CellValue = Union[Number, Text, Moment, Blank]


## Readings
@dataclass(frozen=True)
class RawReading:
    timestamp: datetime
    active_power: float  # kW
    inductive_power: float  # kVAr
    capacitive_power: float  # kVAr

    def value(self, quantity: str) -> float:
        return getattr(self, f"{quantity}_power")


@dataclass(frozen=True)
class HourlyRecord:
    """
    Statistics of one hourly bucket.

    hour_start has zero minutes/seconds; for each quantity min <= avg <= max.
    """

    hour_start: datetime
    label: str
    active_avg: float
    active_max: float
    active_min: float
    inductive_avg: float
    inductive_max: float
    inductive_min: float
    capacitive_avg: float
    capacitive_max: float
    capacitive_min: float

    def stat(self, quantity: str, stat: str) -> float:
        return getattr(self, f"{quantity}_{stat}")


class MergeResult(NamedTuple):
    readings: List[RawReading]
    cpe: Optional[str]


## Export
@dataclass
class ExportSpec:
    resolution: Resolution = "hourly"
    split_date_time: bool = False
    columns: frozenset[str] = field(default_factory=lambda: frozenset(canon.QUANTITIES))

    def enabled(self) -> list[str]:
        """Enabled quantities in canonical column order."""
        return [q for q in canon.QUANTITIES if q in self.columns]


## Summary payloads
class QuantityStats(TypedDict):
    max: float
    min: float
    avg: float
    sum: float


class GlobalStats(TypedDict):
    count: int
    active: QuantityStats
    inductive: QuantityStats
    capacitive: QuantityStats


class SeriesStats(TypedDict):
    min: float
    max: float
    avg: float
    total: float
    median: float
    max_label: str
    min_label: str
    trend: Literal["rising", "falling", "stable"]


class SummaryMeta(TypedDict):
    cpe: Optional[str]
    start: str
    end: str
    hours: int
    days: int


class SummaryPayload(TypedDict):
    meta: SummaryMeta
    stats: GlobalStats
    months: List[Dict[str, float | str]]
    trends: Dict[str, SeriesStats]
