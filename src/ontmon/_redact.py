"""Helpers for safe debug logging.

Notifier payloads carry gateway API keys and subscriber phone numbers.
This module masks them before they reach DEBUG logs.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

_SECRET_KEYS: frozenset[str] = frozenset(
    {
        "api_key",
        "apikey",
        "password",
        "token",
        "authorization",
        "cookie",
    }
)

_RECIPIENT_KEYS: frozenset[str] = frozenset({"receiver", "recipient", "to", "number"})


def mask_recipient(value: str, *, visible: int = 4) -> str:
    """Keep only the last *visible* characters of a recipient identifier."""
    text = str(value)
    if len(text) <= visible:
        return "*" * len(text)
    return "*" * (len(text) - visible) + text[-visible:]


def redact_for_log(value: Any, *, max_string: int = 256, _depth: int = 0) -> Any:
    """Return a redacted copy of *value* suitable for debug logs."""
    if _depth > 20:
        return "<max-depth>"

    if value is None or isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            lowered = key.lower()
            if lowered in _SECRET_KEYS:
                redacted[key] = "<redacted>"
            elif lowered in _RECIPIENT_KEYS and isinstance(v, str):
                redacted[key] = mask_recipient(v)
            else:
                redacted[key] = redact_for_log(v, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)
