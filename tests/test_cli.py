"""Smoke tests for the command line entry point."""

from __future__ import annotations

import json
import logging
from typing import List

import pytest

from conftest import PARK_TRACK
from trail_whisper import main as cli
from trail_whisper.errors import ActivityStoreError
from trail_whisper.store import InMemoryActivityStore


@pytest.fixture(autouse=True)
def captured_warnings(monkeypatch: pytest.MonkeyPatch) -> List[bool]:
    calls: List[bool] = []
    monkeypatch.setattr(logging, "captureWarnings", calls.append)
    return calls


def _run(argv, store=None) -> int:
    factory = (lambda: store) if store is not None else cli._default_store
    return cli.main(argv, store_factory=factory)


def test_location_set_show_clear(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    path = str(tmp_path / "manual.json")

    assert _run(["location", "--file", path, "set", "51.48", "-3.18"]) == 0
    assert json.loads((tmp_path / "manual.json").read_text()) == {"lat": 51.48, "lon": -3.18}
    assert _run(["location", "--file", path, "show"]) == 0
    assert "51.48000, -3.18000" in capsys.readouterr().out

    assert _run(["location", "--file", path, "clear"]) == 0
    assert _run(["location", "--file", path, "show"]) == 0
    assert "No manual location set" in capsys.readouterr().out


def test_location_set_rejects_invalid_coordinates(tmp_path) -> None:
    path = str(tmp_path / "manual.json")
    assert _run(["location", "--file", path, "set", "95", "0"]) == 2
    assert not (tmp_path / "manual.json").exists()


def test_visits_prints_summary(
    populated_store: InMemoryActivityStore, capsys: pytest.CaptureFixture[str]
) -> None:
    argv = ["visits", "--lat", str(PARK_TRACK[0].lat), "--lon", str(PARK_TRACK[0].lon)]

    assert _run(argv, populated_store) == 0

    out = capsys.readouterr().out
    assert "2 visits within 400 m, 10.0 km in total" in out
    assert "running: 2" in out


def test_visits_with_no_matches(
    populated_store: InMemoryActivityStore, capsys: pytest.CaptureFixture[str]
) -> None:
    assert _run(["visits", "--lat", "0", "--lon", "0", "--radius", "50"], populated_store) == 0
    assert "No visits within 50 m yet." in capsys.readouterr().out


def test_history_lists_filtered_activities(
    populated_store: InMemoryActivityStore, capsys: pytest.CaptureFixture[str]
) -> None:
    assert _run(["history", "--sport", "biking"], populated_store) == 0
    out = capsys.readouterr().out
    assert "river" in out
    assert "park-new" not in out


def test_history_rejects_unknown_sport() -> None:
    with pytest.raises(SystemExit):
        _run(["history", "--sport", "curling"], InMemoryActivityStore())


def test_export_stored_activity(
    populated_store: InMemoryActivityStore, tmp_path
) -> None:
    output = tmp_path / "river.geojson"
    assert _run(["export", "river", "-o", str(output)], populated_store) == 0
    feature = json.loads(output.read_text())
    assert feature["properties"]["id"] == "river"


def test_export_unknown_activity(tmp_path) -> None:
    output = tmp_path / "missing.geojson"
    assert _run(["export", "nope", "-o", str(output)], InMemoryActivityStore()) == 1
    assert not output.exists()


def test_decode_reports_unreadable_files(tmp_path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "junk.fit"
    path.write_bytes(b"this is not a FIT file")

    assert _run(["decode", str(path)]) == 1
    assert "junk.fit: ERROR" in capsys.readouterr().out


def test_upload_without_store_configuration_fails(tmp_path) -> None:
    path = tmp_path / "junk.fit"
    path.write_bytes(b"x")

    def no_store() -> InMemoryActivityStore:
        raise ActivityStoreError("SUPABASE_URL is not configured")

    assert cli.main(["upload", str(path), "--user-id", "u"], store_factory=no_store) == 2


def test_cli_routes_library_warnings_into_logging(
    tmp_path, captured_warnings: List[bool]
) -> None:
    assert _run(["location", "--file", str(tmp_path / "manual.json"), "show"]) == 0
    assert captured_warnings == [True]
