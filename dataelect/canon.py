from __future__ import annotations
from typing import Final, Dict

# Spreadsheet day-serial epoch (1899-12-30) expressed as days before 1970-01-01
EXCEL_EPOCH_OFFSET: Final[int] = 25569
SECONDS_PER_DAY: Final[int] = 86400
MIN_VALID_YEAR: Final[int] = 1990  # exclusive

INDEX_NAME: Final[str] = "timestamp"
HOUR_INDEX_NAME: Final[str] = "hour_start"
QUANTITIES: Final[tuple[str, ...]] = ("active", "inductive", "capacitive")
STATS: Final[tuple[str, ...]] = ("avg", "max", "min")

RESOLUTIONS: Final[tuple[str, ...]] = ("hourly", "daily", "monthly")

PRODUCT_NAME: Final[str] = "k-dataelect"
DEFAULT_EXTENSION: Final[str] = "csv"
BOM: Final[str] = "\ufeff"

# Export headers
HEADER_DATE: Final[str] = "Data"
HEADER_TIME: Final[str] = "Hora"
HEADER_PERIOD: Final[str] = "Período"
POWER_HEADERS: Final[Dict[str, str]] = {
    "active": "Ativa (kW)",
    "inductive": "Indutiva (kVAr)",
    "capacitive": "Capacitiva (kVAr)",
}
ENERGY_HEADERS: Final[Dict[str, str]] = {
    "active": "Ativa (kWh)",
    "inductive": "Indutiva (kVArh)",
    "capacitive": "Capacitiva (kVArh)",
}

MONTHS_PT: Final[tuple[str, ...]] = (
    "janeiro",
    "fevereiro",
    "março",
    "abril",
    "maio",
    "junho",
    "julho",
    "agosto",
    "setembro",
    "outubro",
    "novembro",
    "dezembro",
)
MONTHS_PT_SHORT: Final[tuple[str, ...]] = tuple(m[:3] for m in MONTHS_PT)

DEFAULT_SOURCE_INTERVAL: Final[str] = "15m"
