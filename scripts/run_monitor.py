#!/usr/bin/env python3
"""Run the ONT monitor.

Runs one cycle shortly after startup and then one every
``POLL_INTERVAL_MINUTES``. A trigger that fires while a cycle is still
running is skipped.

Usage
-----
Set environment variables and run::

    export GENIEACS_URL="http://acs.example:7557"
    export GENIEACS_AUTH="admin:secret"
    export WA_API_KEY="..."
    export WA_TARGET_NUMBERS="628123456789,628987654321"
    python scripts/run_monitor.py

Options::

    --once               Run a single cycle and exit
    --dry-run            Log alert messages instead of sending them
    --initial-delay S    Seconds before the first cycle (default: 2)
    --verbose, -v        Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from ontmon import LogNotifier, MonitorConfig, OntMonitor, OntmonConfigError  # noqa: E402

LOG = logging.getLogger("run_monitor")


async def _trigger(monitor: OntMonitor) -> None:
    try:
        if await monitor.run_cycle() is None:
            return
    except Exception:
        LOG.exception("Uncaught error during monitor execution")
        return
    result = monitor.last_result
    if result is not None:
        LOG.info(
            "Cycle summary: fetched=%d processed=%d alerts=%d sent=%d failed=%d saved=%s",
            result.fetched,
            result.processed,
            result.alerts,
            result.deliveries_sent,
            result.deliveries_failed,
            result.state_saved,
        )


async def main() -> int:
    parser = argparse.ArgumentParser(description="GenieACS ONT monitor with WhatsApp alerts.")
    parser.add_argument("--once", action="store_true", help="Run a single cycle and exit")
    parser.add_argument("--dry-run", action="store_true", help="Log alert messages instead of sending them")
    parser.add_argument("--initial-delay", type=float, default=2.0, help="Seconds before the first cycle")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = MonitorConfig.from_env()
    except OntmonConfigError as exc:
        LOG.error("Invalid configuration: %s", exc)
        return 2

    notifier = LogNotifier() if args.dry_run else None
    interval = config.poll_interval_minutes * 60

    async with OntMonitor(config, notifier=notifier) as monitor:
        LOG.info("Device state file: %s", monitor.store.path)
        if args.once:
            await _trigger(monitor)
            return 0

        LOG.info("Scheduling monitor to run every %d minutes", config.poll_interval_minutes)
        await asyncio.sleep(args.initial_delay)
        LOG.info("Running initial check...")
        pending: set[asyncio.Task[None]] = set()
        while True:
            # Run as a task so a slow cycle does not delay the next trigger;
            # the cycle itself skips overlapping runs.
            task = asyncio.create_task(_trigger(monitor))
            pending.add(task)
            task.add_done_callback(pending.discard)
            await asyncio.sleep(interval)


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass
