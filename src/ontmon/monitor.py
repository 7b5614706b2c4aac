"""One poll cycle: fetch, normalize, diff, alert, persist.

The cycle owns the dashboard-facing batch and is the single writer of the
state store. Cycles never overlap: a run requested while another is in
flight is skipped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from ontmon._constants import DEFAULT_OFFLINE_WINDOW
from ontmon.ingestion.devices import parse_device
from ontmon.ingestion.source import DataSource
from ontmon.models.device import ParsedDevice
from ontmon.notify import Notifier, deliver_to_all
from ontmon.state.policy import AlertEngine
from ontmon.state.store import StateStore

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class CycleResult:
    """Counters for one completed cycle."""

    started_at: datetime
    finished_at: datetime
    fetched: int = 0
    processed: int = 0
    alerts: int = 0
    deliveries_sent: int = 0
    deliveries_failed: int = 0
    state_saved: bool = False


class MonitorCycle:
    """Run poll cycles against a data source and a state store.

    Parameters
    ----------
    source
        Where raw device documents come from.
    store
        Persisted per-device state; expected to be loaded already.
    engine
        Decision table and message formatting.
    notifier
        Delivery capability for alert text.
    recipients
        Every alert is delivered to each of these, in order.
    clock
        Returns the current aware UTC time; injectable for tests.
    offline_after
        Inform age at which a device counts as offline.
    """

    def __init__(
        self,
        *,
        source: DataSource,
        store: StateStore,
        engine: AlertEngine,
        notifier: Notifier,
        recipients: Iterable[str] = (),
        clock: Callable[[], datetime] = _utcnow,
        offline_after: timedelta = DEFAULT_OFFLINE_WINDOW,
    ) -> None:
        self._source = source
        self._store = store
        self._engine = engine
        self._notifier = notifier
        self._recipients = tuple(recipients)
        self._clock = clock
        self._offline_after = offline_after
        self._lock = asyncio.Lock()
        self._latest: tuple[ParsedDevice, ...] = ()
        self._last_result: CycleResult | None = None

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    @property
    def last_result(self) -> CycleResult | None:
        return self._last_result

    def get_latest_devices(self) -> list[ParsedDevice]:
        """Devices from the most recently completed cycle (empty before the first)."""
        return list(self._latest)

    async def run(self) -> CycleResult | None:
        """Run one cycle; returns ``None`` if another cycle is still in flight."""
        if self._lock.locked():
            _logger.warning("Previous polling cycle still running; skipping this trigger")
            return None
        async with self._lock:
            result = await self._run_locked()
        self._last_result = result
        return result

    async def _run_locked(self) -> CycleResult:
        started_at = self._clock()
        _logger.info("Starting polling cycle...")

        raw_devices = await self._source.fetch()
        if not raw_devices:
            _logger.info("No devices fetched or fetch failed; state left untouched")
            return CycleResult(started_at=started_at, finished_at=self._clock())

        _logger.info("Fetched %d devices from GenieACS. Processing...", len(raw_devices))

        batch: list[ParsedDevice] = []
        alerts = 0
        sent = 0
        failed = 0
        for raw in raw_devices:
            now = self._clock()
            try:
                device = parse_device(raw, now=now, offline_after=self._offline_after)
                previous = self._store.get(device.id)
                event = self._engine.decide(device, previous)
                if event is not None:
                    alerts += 1
                    _logger.info("Alert triggered for %s: %s", device.id, event.title)
                    text = self._engine.format_message(event, now)
                    report = await deliver_to_all(self._notifier, self._recipients, text)
                    sent += report.sent
                    failed += report.failed_count
                self._store.put(device.id, self._engine.next_state(device, now))
            except Exception:
                raw_id = raw.get("_id") if isinstance(raw, dict) else None
                _logger.exception("Failed to process device record %r", raw_id)
                continue
            batch.append(device)

        # Single assignment: readers see either the old or the new batch.
        self._latest = tuple(batch)

        saved = self._store.save()
        _logger.info("Polling cycle complete. Triggered %d alerts.", alerts)
        if failed:
            _logger.warning("%d alert deliveries failed this cycle", failed)

        return CycleResult(
            started_at=started_at,
            finished_at=self._clock(),
            fetched=len(raw_devices),
            processed=len(batch),
            alerts=alerts,
            deliveries_sent=sent,
            deliveries_failed=failed,
            state_saved=saved,
        )
