from __future__ import annotations

from dataclasses import dataclass, field

from . import canon


@dataclass
class ImportConfig:
    max_workers: int = 4
    file_timeout_s: float = 60.0  # per source file
    skip_blank_rows: bool = True


@dataclass
class FormatConfig:
    delimiter: str = ";"
    decimal: str = ","
    decimals: int = 2
    bom: bool = True
    line_terminator: str = "\n"
    product: str = canon.PRODUCT_NAME
    extension: str = canon.DEFAULT_EXTENSION


@dataclass
class Config:
    imports: ImportConfig = field(default_factory=ImportConfig)
    formats: FormatConfig = field(default_factory=FormatConfig)


def default_config() -> Config:
    return Config()
