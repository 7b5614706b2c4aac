#!/usr/bin/env python3
"""Fetch and normalize every device once, without alerts or state changes.

Prints the dashboard JSON for each device, optionally with the raw
GenieACS document, so you can spot vendor paths that aren't resolved yet.

Usage
-----
::

    export GENIEACS_URL="http://acs.example:7557"
    python scripts/dump_devices.py --raw
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

import aiohttp  # noqa: E402

from ontmon import MonitorConfig, parse_device  # noqa: E402
from ontmon._transport import AcsTransport  # noqa: E402
from ontmon.ingestion.source import GenieAcsDataSource  # noqa: E402


async def main() -> None:
    parser = argparse.ArgumentParser(description="Dump normalized GenieACS devices.")
    parser.add_argument("--raw", action="store_true", help="Include the raw device document")
    parser.add_argument("--output", "-o", help="Write output to FILE instead of stdout")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = MonitorConfig.from_env()
    async with aiohttp.ClientSession() as http:
        source = GenieAcsDataSource(AcsTransport(config, http))
        raw_devices = await source.fetch()

    result: list[dict[str, Any]] = []
    for raw in raw_devices:
        entry: dict[str, Any] = {"parsed": parse_device(raw, offline_after=config.offline_window).to_json_dict()}
        if args.raw:
            entry["raw"] = raw
        result.append(entry)

    payload = json.dumps(result, indent=2, default=str, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        print(f"JSON written to {args.output} ({len(result)} devices)", file=sys.stderr)
    else:
        print(payload)


if __name__ == "__main__":
    asyncio.run(main())
