"""HTTP transport for the GenieACS northbound interface."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from ontmon._constants import USER_AGENT
from ontmon.config import MonitorConfig
from ontmon.exceptions import OntmonTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the data source.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`AcsTransport`) concrete.
    """

    async def get_json(self, endpoint: str, params: Mapping[str, str] | None = None) -> Any:
        ...


class AcsTransport:
    """GET JSON from GenieACS with basic auth and a per-request timeout."""

    def __init__(self, config: MonitorConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._auth: aiohttp.BasicAuth | None = None
        if config.genieacs_username:
            self._auth = aiohttp.BasicAuth(config.genieacs_username, config.genieacs_password)
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def get_json(self, endpoint: str, params: Mapping[str, str] | None = None) -> Any:
        """Send ``GET {genieacs_url}{endpoint}`` and decode the JSON body.

        Raises
        ------
        OntmonTransportError
            On network errors, timeouts, non-200 responses or invalid JSON.
        """
        url = f"{self._config.genieacs_url.rstrip('/')}{endpoint}"
        headers = {"accept": "application/json", "user-agent": USER_AGENT}

        _logger.debug("GET %s", url)

        try:
            async with self._http.get(
                url,
                params=dict(params or {}),
                headers=headers,
                auth=self._auth,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise OntmonTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except OntmonTransportError:
            raise
        except asyncio.TimeoutError as exc:
            raise OntmonTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise OntmonTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise OntmonTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc
