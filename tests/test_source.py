from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
import pytest
from _fakes import FakeHttpSession, FakeResponse

from ontmon._constants import DEVICE_PROJECTION
from ontmon._transport import AcsTransport
from ontmon.config import MonitorConfig
from ontmon.exceptions import OntmonTransportError
from ontmon.ingestion.source import GenieAcsDataSource


def _config(**overrides: Any) -> MonitorConfig:
    return MonitorConfig(genieacs_url="http://acs.example:7557/", **overrides)


@pytest.mark.asyncio
async def test_transport_builds_authenticated_projection_request() -> None:
    http = FakeHttpSession([FakeResponse(body=[{"_id": "A-B-C"}])])
    transport = AcsTransport(_config(genieacs_username="admin", genieacs_password="s3cret"), http)  # type: ignore[arg-type]
    source = GenieAcsDataSource(transport)

    devices = await source.fetch()

    assert devices == [{"_id": "A-B-C"}]
    method, url, kwargs = http.requests[0]
    assert method == "GET"
    assert url == "http://acs.example:7557/devices"
    assert kwargs["params"] == {"projection": ",".join(DEVICE_PROJECTION)}
    assert kwargs["auth"] == aiohttp.BasicAuth("admin", "s3cret")


@pytest.mark.asyncio
async def test_transport_without_credentials_sends_no_auth() -> None:
    http = FakeHttpSession([FakeResponse(body=[])])
    transport = AcsTransport(_config(), http)  # type: ignore[arg-type]

    assert await transport.get_json("/devices") == []
    assert http.requests[0][2]["auth"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("outcome", "status_code"),
    [
        (FakeResponse(status=401, text_body="Unauthorized"), 401),
        (FakeResponse(status=200, text_body="not json"), None),
        (aiohttp.ClientConnectionError("refused"), None),
        (asyncio.TimeoutError(), None),
    ],
)
async def test_transport_errors_are_typed(outcome: object, status_code: int | None) -> None:
    http = FakeHttpSession([outcome])  # type: ignore[list-item]
    transport = AcsTransport(_config(), http)  # type: ignore[arg-type]

    with pytest.raises(OntmonTransportError) as excinfo:
        await transport.get_json("/devices")

    assert excinfo.value.status_code == status_code
    assert excinfo.value.endpoint == "/devices"


@pytest.mark.asyncio
async def test_source_returns_empty_batch_on_failure() -> None:
    http = FakeHttpSession([FakeResponse(status=503, text_body="down")])
    source = GenieAcsDataSource(AcsTransport(_config(), http))  # type: ignore[arg-type]

    assert await source.fetch() == []


@pytest.mark.asyncio
async def test_source_rejects_unexpected_payloads() -> None:
    class _Transport:
        def __init__(self, payload: Any) -> None:
            self.payload = payload

        async def get_json(self, endpoint: str, params: Any = None) -> Any:
            if isinstance(self.payload, BaseException):
                raise self.payload
            return self.payload

    assert await GenieAcsDataSource(_Transport({"error": "x"})).fetch() == []
    assert await GenieAcsDataSource(_Transport([{"_id": "a"}, "junk", 3])).fetch() == [{"_id": "a"}]
    assert await GenieAcsDataSource(_Transport(RuntimeError("bug"))).fetch() == []
