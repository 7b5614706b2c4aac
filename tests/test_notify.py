from __future__ import annotations

import asyncio
import logging

import aiohttp
import pytest
from _fakes import FakeHttpSession, FakeResponse

from ontmon.exceptions import OntmonNotifierError
from ontmon.notify import LogNotifier, WaCloudNotifier, deliver_to_all


@pytest.mark.asyncio
async def test_wacloud_payload_and_success() -> None:
    http = FakeHttpSession([FakeResponse(body={"status": True, "message": "queued"})])
    notifier = WaCloudNotifier("key-123", http, api_url="https://gw.example/api/send-message")  # type: ignore[arg-type]

    assert await notifier.deliver("628123456789", "hello") is True

    method, url, kwargs = http.requests[0]
    assert method == "POST"
    assert url == "https://gw.example/api/send-message"
    assert kwargs["json"] == {"api_key": "key-123", "receiver": "628123456789", "data": {"message": "hello"}}


@pytest.mark.asyncio
async def test_wacloud_gateway_rejection_is_false(caplog: pytest.LogCaptureFixture) -> None:
    http = FakeHttpSession([FakeResponse(body={"status": False, "message": "invalid number"})])
    notifier = WaCloudNotifier("key-123", http)  # type: ignore[arg-type]

    with caplog.at_level(logging.ERROR, logger="ontmon.notify"):
        assert await notifier.deliver("628123456789", "hello") is False

    assert "Gateway rejected" in caplog.text
    assert "628123456789" not in caplog.text


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "outcome",
    [
        aiohttp.ClientConnectionError("refused"),
        asyncio.TimeoutError(),
        FakeResponse(status=200, text_body="<html>oops</html>"),
        FakeResponse(status=500, body={"status": True}),
    ],
)
async def test_wacloud_transport_failures_are_false(outcome: object) -> None:
    http = FakeHttpSession([outcome])  # type: ignore[list-item]
    notifier = WaCloudNotifier("key-123", http)  # type: ignore[arg-type]
    assert await notifier.deliver("628123456789", "hello") is False


@pytest.mark.asyncio
async def test_wacloud_without_api_key_does_not_send() -> None:
    http = FakeHttpSession()
    notifier = WaCloudNotifier(None, http)  # type: ignore[arg-type]

    assert await notifier.deliver("628123456789", "hello") is False
    assert http.requests == []


@pytest.mark.asyncio
async def test_wacloud_without_session_raises() -> None:
    notifier = WaCloudNotifier("key-123", None)
    with pytest.raises(OntmonNotifierError):
        await notifier.deliver("628123456789", "hello")


@pytest.mark.asyncio
async def test_deliver_to_all_isolates_failures() -> None:
    class Flaky:
        def __init__(self) -> None:
            self.calls: list[str] = []

        async def deliver(self, recipient: str, text: str) -> bool:
            self.calls.append(recipient)
            if recipient == "b":
                raise OntmonNotifierError("boom", recipient=recipient)
            return recipient != "c"

    notifier = Flaky()
    report = await deliver_to_all(notifier, ["a", "b", "", "c", "d"], "msg")

    assert notifier.calls == ["a", "b", "c", "d"]
    assert report.sent == 2
    assert report.failed == ["b", "c"]
    assert report.failed_count == 2


@pytest.mark.asyncio
async def test_log_notifier_records_messages() -> None:
    notifier = LogNotifier()
    assert await notifier.deliver("628111", "text") is True
    assert notifier.sent == [("628111", "text")]


@pytest.mark.asyncio
async def test_deliver_to_all_logs_false_results(caplog: pytest.LogCaptureFixture) -> None:
    class Silent:
        async def deliver(self, recipient: str, text: str) -> bool:
            return False

    with caplog.at_level(logging.ERROR, logger="ontmon.notify"):
        report = await deliver_to_all(Silent(), ["628123456789"], "msg")

    assert report.failed == ["628123456789"]
    assert "Delivery to" in caplog.text
    assert "failed" in caplog.text
    assert "628123456789" not in caplog.text
