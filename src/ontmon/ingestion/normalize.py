"""Normalization helpers.

Centralizes defensive parsing of GenieACS parameter trees and placeholder
handling. Nothing in here raises for malformed input.
"""

from __future__ import annotations

import math
import re
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any

# Leading numeric prefix, the way loose firmware strings such as "-24.5 dBm" are read.
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")

# Threshold to distinguish seconds from milliseconds.
_MS_THRESHOLD = 1e11


def is_present(value: Any) -> bool:
    """Return True if a resolved parameter value should win its precedence slot."""
    if value is None:
        return False
    return not (isinstance(value, str) and not value.strip())


def safe_float(value: Any) -> float | None:
    if isinstance(value, bool) or not is_present(value):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    else:
        match = _FLOAT_PREFIX.match(str(value))
        if match is None:
            return None
        result = float(match.group(1))
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    if isinstance(value, bool) or not is_present(value):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return None if math.isnan(value) or math.isinf(value) else int(value)
    match = _INT_PREFIX.match(str(value))
    if match is None:
        return None
    return int(match.group(1))


def safe_str(value: Any) -> str | None:
    if not is_present(value):
        return None
    return str(value).strip()


def non_negative_or_zero(value: Any) -> int:
    parsed = safe_int(value)
    if parsed is None or parsed < 0:
        return 0
    return parsed


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a GenieACS timestamp into an aware UTC datetime.

    Accepts ISO-8601 strings (``"2026-10-19T03:00:00.000Z"``) and epoch
    numbers in seconds or milliseconds. Anything else yields ``None``.
    """

    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if isinstance(value, bool) or not is_present(value):
        return None
    if isinstance(value, (int, float)):
        ts = float(value)
        if math.isnan(ts) or ts <= 0:
            return None
        if ts > _MS_THRESHOLD:
            ts /= 1000.0
        try:
            return datetime.fromtimestamp(ts, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    try:
        parsed = datetime.fromisoformat(str(value).strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def get_path(raw: Any, path: str) -> Any:
    """Walk a dotted parameter path through a nested document.

    Returns ``None`` as soon as a segment is missing or the node is not a
    mapping.
    """

    node = raw
    for segment in path.split("."):
        if not isinstance(node, dict):
            return None
        node = node.get(segment)
        if node is None:
            return None
    return node


def parameter_value(raw: Any, path: str) -> Any:
    """Return the ``_value`` of a TR-069 parameter, or ``None``.

    GenieACS stores leaves as ``{"_value": ..., "_type": ..., "_timestamp": ...}``.
    A bare scalar at the path is accepted as the value itself.
    """

    node = get_path(raw, path)
    if isinstance(node, dict):
        return node.get("_value")
    if isinstance(node, list):
        return None
    return node


def first_present(probes: Iterable[Callable[[], Any]]) -> Any:
    """Run probes in order and return the first present result."""
    for probe in probes:
        value = probe()
        if is_present(value):
            return value
    return None


def parameter_probes(raw: Any, paths: Iterable[str]) -> list[Callable[[], Any]]:
    """Build one independent probe per parameter path."""
    return [lambda path=path: parameter_value(raw, path) for path in paths]


def format_uptime(seconds: int) -> str:
    """Render an uptime counter as ``"1d 2h 30m"`` (days omitted when zero)."""
    seconds = max(0, int(seconds))
    days, remainder = divmod(seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes = remainder // 60
    if days > 0:
        return f"{days}d {hours}h {minutes}m"
    return f"{hours}h {minutes}m"
