"""GenieACS device fetch.

The data source is the only place fetch errors are handled: a failed poll
becomes an empty batch so the cycle ends early without touching state.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from ontmon._constants import DEVICE_PROJECTION
from ontmon._transport import Transport
from ontmon.exceptions import OntmonTransportError

_logger = logging.getLogger(__name__)


class DataSource(Protocol):
    async def fetch(self) -> list[dict[str, Any]]:
        ...


class GenieAcsDataSource:
    """Fetch every device with the monitoring projection."""

    def __init__(self, transport: Transport, *, projection: tuple[str, ...] = DEVICE_PROJECTION) -> None:
        self._transport = transport
        self._projection = ",".join(projection)

    async def fetch(self) -> list[dict[str, Any]]:
        """Return the raw device documents, or ``[]`` on any failure."""
        try:
            payload = await self._transport.get_json("/devices", {"projection": self._projection})
        except OntmonTransportError as exc:
            _logger.error("Failed to fetch devices: %s", exc)
            return []
        except Exception:
            _logger.exception("Unexpected error while fetching devices")
            return []

        if not isinstance(payload, list):
            _logger.error("Unexpected /devices payload type: %s", type(payload).__name__)
            return []

        devices = [item for item in payload if isinstance(item, dict)]
        if len(devices) != len(payload):
            _logger.warning("Dropped %d non-object entries from /devices", len(payload) - len(devices))
        return devices
