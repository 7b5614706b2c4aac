from __future__ import annotations

import json
import logging
import os
import stat
from datetime import UTC, datetime
from pathlib import Path

import pytest

from ontmon.models.state import DeviceState
from ontmon.state.store import StateStore


def _dt() -> datetime:
    return datetime(2026, 10, 19, 3, 0, tzinfo=UTC)


def test_missing_file_loads_empty(tmp_path: Path) -> None:
    store = StateStore(tmp_path / "device_state.json")
    assert store.load() == {}
    assert len(store) == 0


def test_save_writes_camel_case_document(tmp_path: Path) -> None:
    path = tmp_path / "device_state.json"
    store = StateStore(path)
    store.put("HG6243C", DeviceState(is_online=True, rx_power=-21.5, last_checked=_dt()))
    store.put("F670L", DeviceState(is_online=False, rx_power=None, last_checked=_dt()))

    assert store.save() is True

    document = json.loads(path.read_text(encoding="utf-8"))
    assert document == {
        "HG6243C": {"isOnline": True, "rxPower": -21.5, "lastChecked": "2026-10-19T03:00:00.000Z"},
        "F670L": {"isOnline": False, "rxPower": None, "lastChecked": "2026-10-19T03:00:00.000Z"},
    }


def test_save_of_load_is_byte_stable(tmp_path: Path) -> None:
    path = tmp_path / "device_state.json"
    first = StateStore(path)
    first.save({"A": DeviceState(is_online=True, rx_power=-20.0, last_checked=_dt())})
    before = path.read_bytes()

    second = StateStore(path)
    second.save(second.load())

    assert path.read_bytes() == before


def test_load_accepts_state_written_by_other_tools(tmp_path: Path) -> None:
    path = tmp_path / "device_state.json"
    path.write_text(
        json.dumps({"GPON100": {"isOnline": False, "rxPower": -28, "lastChecked": "2026-10-19T02:50:00.123Z"}}),
        encoding="utf-8",
    )

    states = StateStore(path).load()

    assert states["GPON100"].is_online is False
    assert states["GPON100"].rx_power == -28.0
    assert states["GPON100"].last_checked == datetime(2026, 10, 19, 2, 50, 0, 123000, tzinfo=UTC)


def test_corrupt_file_loads_empty_and_logs(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "device_state.json"
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.ERROR, logger="ontmon.state.store"):
        assert StateStore(path).load() == {}
    assert "Failed to load device state" in caplog.text


def test_wrong_shape_and_bad_entries(tmp_path: Path) -> None:
    path = tmp_path / "device_state.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    assert StateStore(path).load() == {}

    path.write_text(
        json.dumps(
            {
                "good": {"isOnline": True, "rxPower": None, "lastChecked": "2026-10-19T03:00:00.000Z"},
                "bad": {"rxPower": "x"},
            }
        ),
        encoding="utf-8",
    )
    states = StateStore(path).load()
    assert list(states) == ["good"]


def test_unwritable_location_is_logged_not_raised(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = StateStore(blocker / "device_state.json")
    store.put("A", DeviceState(is_online=True, last_checked=_dt()))

    with caplog.at_level(logging.ERROR, logger="ontmon.state.store"):
        assert store.save() is False

    assert "Failed to save device state" in caplog.text
    # In-memory state survives for the next cycle.
    assert store.get("A") is not None


def test_snapshot_is_a_copy(tmp_path: Path) -> None:
    store = StateStore(tmp_path / "s.json")
    store.put("A", DeviceState(is_online=True, last_checked=_dt()))
    snapshot = store.snapshot()
    snapshot.pop("A")
    assert "A" in store


def test_save_keeps_existing_file_mode(tmp_path: Path) -> None:
    path = tmp_path / "device_state.json"
    path.write_text("{}\n", encoding="utf-8")
    path.chmod(0o644)
    store = StateStore(path)
    store.put("A", DeviceState(is_online=True, last_checked=_dt()))

    assert store.save() is True
    assert stat.S_IMODE(path.stat().st_mode) == 0o644

    path.chmod(0o640)
    assert store.save() is True
    assert stat.S_IMODE(path.stat().st_mode) == 0o640


def test_new_file_follows_umask(tmp_path: Path) -> None:
    path = tmp_path / "device_state.json"
    previous = os.umask(0o022)
    try:
        assert StateStore(path).save() is True
    finally:
        os.umask(previous)

    assert stat.S_IMODE(path.stat().st_mode) == 0o644
    assert StateStore(path).path == path
