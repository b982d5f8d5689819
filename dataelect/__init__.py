import logging

from . import (
    canon,
    exceptions,
    types,
    config,
    utils,
    grid,
    mapping,
    timestamps,
    ingest,
    validate,
    transform,
    formats,
    summary,
    io,
)

from .mapping import FieldMapping
from .types import ExportSpec, HourlyRecord, RawReading

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "canon",
    "exceptions",
    "types",
    "config",
    "utils",
    "grid",
    "mapping",
    "timestamps",
    "ingest",
    "validate",
    "transform",
    "formats",
    "summary",
    "io",
    "FieldMapping",
    "ExportSpec",
    "HourlyRecord",
    "RawReading",
]
