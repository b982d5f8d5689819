from datetime import datetime

import pytest

from dataelect.grid import CellGrid
from dataelect.mapping import FieldMapping
from dataelect.types import RawReading

CPE = "PT0002000012345678XY"


@pytest.fixture
def quarter_hour_rows():
    # Header block, four quarter-hours of 14:00 and one of 15:00, then a totals line
    return [
        ["CPE", CPE, None, None, None],
        ["Data", "Hora", "Ativa", "Indutiva", "Capacitiva"],
        ["15/03/2023", "14:00", "10,0", "2", "1"],
        ["15/03/2023", "14:15", "20,0", "4", "1"],
        ["15/03/2023", "14:30", "30", "6", "1"],
        ["15/03/2023", "14:45", "40", "8", "1"],
        ["15/03/2023", "15:00", "5", "1", "0"],
        ["Total", None, "105", None, None],
    ]


@pytest.fixture
def quarter_hour_grid(quarter_hour_rows):
    return CellGrid.from_rows(quarter_hour_rows)


@pytest.fixture
def row_mapping():
    return FieldMapping(
        date_row=2, date_col=0,
        time_row=2, time_col=1,
        active_row=2, active_col=2,
        inductive_row=2, inductive_col=3,
        capacitive_row=2, capacitive_col=4,
        cpe_row=0, cpe_col=1,
    )


def _reading(ts: str, active: float = 0.0, inductive: float = 0.0, capacitive: float = 0.0):
    return RawReading(
        timestamp=datetime.fromisoformat(ts),
        active_power=active,
        inductive_power=inductive,
        capacitive_power=capacitive,
    )


@pytest.fixture
def make_reading():
    return _reading


@pytest.fixture
def two_day_readings():
    # 2024-01-01 00:00 .. 2024-01-02 23:45 at 15-minute cadence, active = hour of day
    out = []
    for day in (1, 2):
        for hour in range(24):
            for minute in (0, 15, 30, 45):
                out.append(
                    _reading(
                        f"2024-01-{day:02d}T{hour:02d}:{minute:02d}",
                        active=float(hour),
                        inductive=1.0,
                        capacitive=0.5,
                    )
                )
    return out
