from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
from _fakes import FakeHttpSession, FakeResponse

from ontmon.client import OntMonitor
from ontmon.config import MonitorConfig
from ontmon.exceptions import OntmonError
from ontmon.notify import LogNotifier


class _StaticSource:
    def __init__(self, devices: list[dict[str, Any]]) -> None:
        self.devices = devices

    async def fetch(self) -> list[dict[str, Any]]:
        return list(self.devices)


def _config(tmp_path: Path, **overrides: Any) -> MonitorConfig:
    return MonitorConfig(
        genieacs_url="http://acs.example:7557",
        recipients=("628111",),
        wa_api_key="key-123",
        state_file=str(tmp_path / "device_state.json"),
        **overrides,
    )


def _offline_record() -> dict[str, Any]:
    last = datetime.now(UTC) - timedelta(hours=1)
    return {"_id": "A1B2-GPON100-SN1", "_lastInform": last.isoformat(), "_tags": ["Tower-A"]}


@pytest.mark.asyncio
async def test_monitor_runs_cycle_with_injected_collaborators(tmp_path: Path) -> None:
    notifier = LogNotifier()
    http = FakeHttpSession()
    config = _config(tmp_path)

    async with OntMonitor(config, session=http, notifier=notifier, source=_StaticSource([_offline_record()])) as monitor:  # type: ignore[arg-type]
        assert monitor.get_latest_devices() == []
        result = await monitor.run_cycle()
        devices = monitor.get_latest_devices()
        last = monitor.last_result

    assert result is not None
    assert result.alerts == 1
    assert [d.id for d in devices] == ["GPON100"]
    assert last is result
    assert monitor.store.path == Path(config.state_file)
    assert notifier.sent[0][0] == "628111"
    assert notifier.sent[0][1].startswith("*--- ONT OFFLINE (New) ---*")

    document = json.loads(Path(config.state_file).read_text(encoding="utf-8"))
    assert document["GPON100"]["isOnline"] is False


@pytest.mark.asyncio
async def test_monitor_uses_genieacs_and_wacloud_by_default(tmp_path: Path) -> None:
    http = FakeHttpSession(
        [
            FakeResponse(body=[_offline_record()]),
            FakeResponse(body={"status": True}),
        ]
    )

    async with OntMonitor(_config(tmp_path), session=http) as monitor:  # type: ignore[arg-type]
        result = await monitor.run_cycle()

    assert result is not None
    assert result.deliveries_sent == 1
    assert [(method, url) for method, url, _ in http.requests] == [
        ("GET", "http://acs.example:7557/devices"),
        ("POST", "https://app.wacloud.web.id/api/send-message"),
    ]


@pytest.mark.asyncio
async def test_monitor_loads_state_on_enter(tmp_path: Path) -> None:
    config = _config(tmp_path)
    Path(config.state_file).write_text(
        json.dumps({"GPON100": {"isOnline": False, "rxPower": None, "lastChecked": "2026-10-19T03:00:00.000Z"}}),
        encoding="utf-8",
    )
    notifier = LogNotifier()

    async with OntMonitor(config, session=FakeHttpSession(), notifier=notifier, source=_StaticSource([_offline_record()])) as monitor:  # type: ignore[arg-type]
        assert "GPON100" in monitor.store
        result = await monitor.run_cycle()

    # Still offline: no transition, no alert.
    assert result is not None
    assert result.alerts == 0
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_run_cycle_requires_context(tmp_path: Path) -> None:
    monitor = OntMonitor(_config(tmp_path))
    with pytest.raises(OntmonError):
        await monitor.run_cycle()
