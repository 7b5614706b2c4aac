"""High-level async monitor wiring GenieACS, the state store and a notifier."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from ontmon._transport import AcsTransport
from ontmon.config import MonitorConfig
from ontmon.exceptions import OntmonError
from ontmon.ingestion.source import DataSource, GenieAcsDataSource
from ontmon.models.device import ParsedDevice
from ontmon.monitor import CycleResult, MonitorCycle
from ontmon.notify import Notifier, WaCloudNotifier
from ontmon.state.policy import AlertEngine
from ontmon.state.store import StateStore

_logger = logging.getLogger(__name__)


class OntMonitor:
    """Async ONT monitor.

    Usage::

        async with OntMonitor(MonitorConfig.from_env()) as monitor:
            await monitor.run_cycle()
            devices = monitor.get_latest_devices()

    The state file is loaded on enter. Pass *notifier* or *source* to replace
    the WACLOUD gateway or the GenieACS fetch (e.g. for a dry run).
    """

    def __init__(
        self,
        config: MonitorConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        notifier: Notifier | None = None,
        source: DataSource | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._notifier = notifier
        self._source = source
        self._store = StateStore(config.state_file)
        self._engine = AlertEngine(
            rx_threshold=config.rx_warning_threshold,
            time_zone=config.time_zone,
        )
        self._cycle: MonitorCycle | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> OntMonitor:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()

        source = self._source or GenieAcsDataSource(AcsTransport(self._config, self._http_session))
        notifier = self._notifier or WaCloudNotifier(
            self._config.wa_api_key,
            self._http_session,
            api_url=self._config.wa_api_url,
            timeout=self._config.request_timeout,
        )
        self._store.load()
        self._cycle = MonitorCycle(
            source=source,
            store=self._store,
            engine=self._engine,
            notifier=notifier,
            recipients=self._config.recipients,
            offline_after=self._config.offline_window,
        )
        if not self._config.recipients:
            _logger.warning("No alert recipients configured (WA_TARGET_NUMBERS)")
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._cycle = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def config(self) -> MonitorConfig:
        return self._config

    @property
    def store(self) -> StateStore:
        return self._store

    def _require_cycle(self) -> MonitorCycle:
        if self._cycle is None:
            raise OntmonError("Monitor not initialized. Use 'async with OntMonitor(...) as monitor:'")
        return self._cycle

    async def run_cycle(self) -> CycleResult | None:
        """Run one poll cycle (skipped and ``None`` if one is already running)."""
        return await self._require_cycle().run()

    @property
    def last_result(self) -> CycleResult | None:
        """Counters of the most recently completed cycle, if any."""
        if self._cycle is None:
            return None
        return self._cycle.last_result

    def get_latest_devices(self) -> list[ParsedDevice]:
        """Snapshot of the most recently completed cycle; empty before the first."""
        if self._cycle is None:
            return []
        return self._cycle.get_latest_devices()
