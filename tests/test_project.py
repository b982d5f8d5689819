"""Project snapshot import, save and load."""

import json
import time
from datetime import datetime

import pytest

from dataelect import ingest
from dataelect.config import Config, FormatConfig, ImportConfig, default_config
from dataelect.exceptions import FileTimeoutError, NoValidDataError, ProjectLoadError
from dataelect.grid import CellGrid
from dataelect.io import project
from dataelect.io.types import InstallationMetadata, ProjectSnapshot
from dataelect.types import ExportSpec


def test_build_project_fills_import_metadata(quarter_hour_grid, row_mapping):
    meta = InstallationMetadata(name="Fabrica", cpe="OLD")
    snap = project.build_project([quarter_hour_grid], row_mapping, meta)
    assert snap.metadata.name == "Fabrica"
    assert snap.metadata.cpe == "PT0002000012345678XY"
    assert snap.metadata.files_count == 1
    assert snap.metadata.total_records == 5
    assert len(snap.raw_data) == 5
    assert len(snap.hourly_data) == 2
    # caller's metadata is untouched
    assert meta.cpe == "OLD"


def test_build_project_keeps_existing_cpe_when_not_mapped(quarter_hour_rows, row_mapping):
    mapping = row_mapping.model_copy(update={"cpe_row": None, "cpe_col": None})
    snap = project.build_project(
        [CellGrid.from_rows(quarter_hour_rows)], mapping, InstallationMetadata(cpe="PT-KEEP")
    )
    assert snap.metadata.cpe == "PT-KEEP"


def test_build_project_without_data_fails(row_mapping):
    with pytest.raises(NoValidDataError):
        project.build_project([CellGrid.from_rows([["nothing"]])], row_mapping)


def test_dump_uses_iso_timestamps_and_camel_case(quarter_hour_grid, row_mapping):
    snap = project.build_project([quarter_hour_grid], row_mapping)
    obj = json.loads(project.dumps(snap))
    assert set(obj) == {"metadata", "rawData", "hourlyData", "aiAnalysis"}
    assert obj["rawData"][0]["timestamp"] == "2023-03-15T14:00:00"
    assert obj["rawData"][0]["activePower"] == 10.0
    assert obj["hourlyData"][0]["timestamp"] == "2023-03-15T14:00:00"
    assert obj["hourlyData"][0]["hourLabel"] == "15 mar 14:00"
    assert obj["metadata"]["totalRecords"] == 5


def test_save_and_load_roundtrip(tmp_path, quarter_hour_grid, row_mapping):
    snap = project.build_project([quarter_hour_grid], row_mapping)
    path = project.save(snap, tmp_path / project.default_project_filename(snap))
    assert path.name == "k-dataelect_projeto.json"

    loaded = project.load(path)
    assert loaded == snap
    readings = project.readings_of(loaded)
    assert isinstance(readings[0].timestamp, datetime)
    hourly = project.hourly_of(loaded)
    assert hourly[0].hour_start == datetime(2023, 3, 15, 14, 0)
    assert hourly[0].active_avg == 25


def test_load_accepts_utc_strings_from_older_snapshots():
    text = json.dumps(
        {
            "metadata": {"name": "x", "location": "", "technician": "", "reportDate": "2024-01-31", "cpe": ""},
            "rawData": [
                {"timestamp": "2024-01-01T08:15:00.000Z", "activePower": 1, "inductivePower": 0, "capacitivePower": 0}
            ],
            "hourlyData": [],
            "aiAnalysis": None,
        }
    )
    snap = project.loads(text)
    assert snap.raw_data[0].timestamp == datetime(2024, 1, 1, 8, 15)
    assert snap.raw_data[0].timestamp.tzinfo is None
    assert snap.metadata.source_interval == "15m"


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "{}" + "}",
        json.dumps({"rawData": [{"timestamp": "yesterday", "activePower": 1}]}),
        json.dumps({"hourlyData": "oops"}),
    ],
)
def test_corrupt_project_raises(text):
    with pytest.raises(ProjectLoadError):
        project.loads(text)


def test_load_missing_file(tmp_path):
    with pytest.raises(ProjectLoadError):
        project.load(tmp_path / "missing.json")


def test_empty_snapshot_defaults():
    snap = ProjectSnapshot()
    assert snap.raw_data == [] and snap.hourly_data == []
    assert project.loads(project.dumps(snap)) == snap


def test_default_config_bundles_import_and_format_defaults():
    cfg = default_config()
    assert cfg.imports == ImportConfig()
    assert cfg.formats.delimiter == ";" and cfg.formats.bom


def test_build_project_uses_import_config(monkeypatch, quarter_hour_grid, row_mapping):
    real = ingest.load_grid

    def slow(source):
        time.sleep(0.5)
        return real(source)

    monkeypatch.setattr(ingest, "load_grid", slow)
    with pytest.raises(FileTimeoutError):
        project.build_project(
            [quarter_hour_grid], row_mapping, config=Config(imports=ImportConfig(file_timeout_s=0.05))
        )


def test_export_writes_hourly_series(tmp_path, quarter_hour_grid, row_mapping):
    snap = project.build_project([quarter_hour_grid], row_mapping)
    cfg = Config(formats=FormatConfig(bom=False, product="acme"))
    path = project.export(snap, ExportSpec("hourly", split_date_time=True), tmp_path, cfg)
    assert path.name == "acme_export_hourly.csv"
    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "Data;Hora;Ativa (kW);Indutiva (kVAr);Capacitiva (kVAr)"
    assert lines[1] == "15/03/2023;14:00;25,00;5,00;1,00"
    assert lines[2] == "15/03/2023;15:00;5,00;1,00;0,00"
