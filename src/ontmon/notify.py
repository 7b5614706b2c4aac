"""Outbound alert delivery.

The monitor only needs "deliver text to recipient". :class:`WaCloudNotifier`
is the reference adapter for the WACLOUD WhatsApp gateway; anything with an
async ``deliver(recipient, text) -> bool`` method can replace it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol

import aiohttp

from ontmon._constants import DEFAULT_REQUEST_TIMEOUT, DEFAULT_WA_API_URL, USER_AGENT
from ontmon._redact import mask_recipient, redact_for_log
from ontmon.exceptions import OntmonNotifierError

_logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def deliver(self, recipient: str, text: str) -> bool:
        ...


class WaCloudNotifier:
    """Send WhatsApp messages through the WACLOUD HTTP gateway.

    Gateway rejections, HTTP errors and timeouts are logged and reported as
    ``False``; nothing is retried.
    """

    def __init__(
        self,
        api_key: str | None,
        http_session: aiohttp.ClientSession | None,
        *,
        api_url: str = DEFAULT_WA_API_URL,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        self._api_key = api_key
        self._http = http_session
        self._api_url = api_url
        self._timeout = aiohttp.ClientTimeout(total=timeout)

    def _build_payload(self, recipient: str, text: str) -> dict[str, Any]:
        return {
            "api_key": self._api_key,
            "receiver": recipient,
            "data": {"message": text},
        }

    async def deliver(self, recipient: str, text: str) -> bool:
        if not self._api_key:
            _logger.error("Cannot send message: WA_API_KEY is not configured")
            return False
        if self._http is None:
            raise OntmonNotifierError("WaCloudNotifier has no HTTP session", recipient=recipient)

        payload = self._build_payload(recipient, text)
        _logger.debug("POST %s %s", self._api_url, redact_for_log(payload))

        masked = mask_recipient(recipient)
        try:
            async with self._http.post(
                self._api_url,
                json=payload,
                headers={"user-agent": USER_AGENT},
                timeout=self._timeout,
            ) as resp:
                body: Any = await resp.json(content_type=None)
                status_code = resp.status
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            _logger.error("Failed to send message to %s: %s", masked, exc)
            return False

        if status_code == 200 and isinstance(body, dict) and body.get("status"):
            _logger.info("Sent message to %s", masked)
            return True

        _logger.error("Gateway rejected message to %s (HTTP %s): %s", masked, status_code, redact_for_log(body))
        return False


class LogNotifier:
    """Dry-run notifier: logs the message instead of sending it."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    async def deliver(self, recipient: str, text: str) -> bool:
        self.sent.append((recipient, text))
        _logger.info("[dry-run] message to %s:\n%s", mask_recipient(recipient), text)
        return True


@dataclass
class DeliveryReport:
    sent: int = 0
    failed: list[str] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return len(self.failed)


async def deliver_to_all(notifier: Notifier, recipients: Iterable[str], text: str) -> DeliveryReport:
    """Deliver *text* to each recipient in order.

    One failing recipient never stops the others: exceptions are logged and
    counted like a ``False`` result. Blank recipients are skipped.
    """
    report = DeliveryReport()
    for recipient in recipients:
        if not recipient:
            continue
        try:
            delivered = await notifier.deliver(recipient, text)
        except Exception:
            _logger.exception("Delivery to %s raised", mask_recipient(recipient))
            delivered = False
        if delivered:
            report.sent += 1
        else:
            _logger.error("Delivery to %s failed", mask_recipient(recipient))
            report.failed.append(recipient)
    return report
