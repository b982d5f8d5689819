from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from . import canon
from .exceptions import MappingError


class FieldMapping(BaseModel):
    """Row/column anchors of each semantic field in the first source grid.

    Quantity rows are stored as absolute rows but applied as an offset from
    the date row (``field_row - date_row``) on every data row of every file.
    The CPE anchor is absolute and read once.

    Accepts both snake_case and the camelCase keys used by saved mappings
    (``dateRow``, ``dateCol``, ...).
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    date_row: int = Field(ge=0)
    date_col: int = Field(ge=0)

    time_row: Optional[int] = Field(default=None, ge=0)
    time_col: Optional[int] = Field(default=None, ge=0)

    active_row: int = Field(ge=0)
    active_col: int = Field(ge=0)

    inductive_row: int = Field(ge=0)
    inductive_col: int = Field(ge=0)

    capacitive_row: int = Field(ge=0)
    capacitive_col: int = Field(ge=0)

    cpe_row: Optional[int] = Field(default=None, ge=0)
    cpe_col: Optional[int] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_pairs(self) -> "FieldMapping":
        if self.time_row is not None and self.time_col is None:
            raise ValueError("time_row is set but time_col is missing")
        return self

    @property
    def time_offset(self) -> int:
        # Without a time row the time cell sits on the date row
        if self.time_row is None:
            return 0
        return self.time_row - self.date_row

    @property
    def has_time(self) -> bool:
        return self.time_col is not None

    @property
    def has_cpe(self) -> bool:
        # a half-set anchor only disables CPE detection
        return self.cpe_row is not None and self.cpe_col is not None

    def offset(self, quantity: str) -> int:
        if quantity not in canon.QUANTITIES:
            raise KeyError(quantity)
        return getattr(self, f"{quantity}_row") - self.date_row

    def column(self, quantity: str) -> int:
        if quantity not in canon.QUANTITIES:
            raise KeyError(quantity)
        return getattr(self, f"{quantity}_col")


def load_mapping(obj: dict) -> FieldMapping:
    """Validate a mapping supplied by the external configuration step."""
    try:
        return FieldMapping.model_validate(obj)
    except ValidationError as exc:
        raise MappingError(f"Invalid field mapping: {exc}") from exc
