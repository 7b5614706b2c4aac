"""Device normalization.

Turns one GenieACS device document into a :class:`ParsedDevice`. Every
logical field is resolved from an ordered list of independent probes; the
first present value wins. Parsing is total: a missing or malformed path only
ever produces the field default.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from ontmon._constants import (
    CONNECTION_REQUEST_URL_PATH,
    DEFAULT_OFFLINE_WINDOW,
    DEVICE_ID_KEY,
    EXTERNAL_IP_PATH,
    LAST_INFORM_KEY,
    NO_TAG,
    PRODUCT_CLASS_PATHS,
    RX_POWER_PATHS,
    TAGS_KEY,
    UNKNOWN,
    UPTIME_PATH,
)
from ontmon.ingestion.normalize import (
    first_present,
    non_negative_or_zero,
    parameter_probes,
    parameter_value,
    parse_timestamp,
    safe_float,
    safe_str,
)
from ontmon.models.device import ParsedDevice

# scheme://host[:port][/...]
_URL_HOST = re.compile(r"^\s*[A-Za-z][A-Za-z0-9+.-]*://([^:/?#\s]+)")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _product_class_from_id(raw_id: str | None) -> str | None:
    # GenieACS ids look like <OUI>-<ProductClass>-<SerialNumber>
    if not raw_id:
        return None
    parts = raw_id.split("-")
    if len(parts) < 2:
        return None
    return parts[1] or None


def resolve_device_id(raw: dict[str, Any]) -> str:
    raw_id = safe_str(raw.get(DEVICE_ID_KEY))
    probes: list[Callable[[], Any]] = [
        *parameter_probes(raw, PRODUCT_CLASS_PATHS),
        lambda: _product_class_from_id(raw_id),
        lambda: raw_id,
    ]
    resolved = safe_str(first_present(probes))
    return resolved or UNKNOWN


def resolve_location(raw: dict[str, Any]) -> str:
    tags = raw.get(TAGS_KEY)
    if not isinstance(tags, list):
        return NO_TAG
    labels = [str(tag) for tag in tags if tag is not None and str(tag) != ""]
    return ", ".join(labels) if labels else NO_TAG


def resolve_last_contact(raw: dict[str, Any]) -> datetime | None:
    return parse_timestamp(raw.get(LAST_INFORM_KEY))


def is_online(last_contact: datetime | None, *, now: datetime, offline_after: timedelta) -> bool:
    """A device is online while its last inform is more recent than *offline_after*."""
    if last_contact is None:
        return False
    return now - last_contact < offline_after


def resolve_rx_power(raw: dict[str, Any]) -> float | None:
    # First present wins even if it then fails to parse; later paths are not consulted.
    return safe_float(first_present(parameter_probes(raw, RX_POWER_PATHS)))


def resolve_uptime_seconds(raw: dict[str, Any]) -> int:
    return non_negative_or_zero(parameter_value(raw, UPTIME_PATH))


def _host_from_url(url: Any) -> str | None:
    text = safe_str(url)
    if text is None:
        return None
    match = _URL_HOST.match(text)
    return match.group(1) if match else None


def resolve_ip(raw: dict[str, Any]) -> str:
    probes: list[Callable[[], Any]] = [
        lambda: safe_str(parameter_value(raw, EXTERNAL_IP_PATH)),
        lambda: _host_from_url(parameter_value(raw, CONNECTION_REQUEST_URL_PATH)),
    ]
    resolved = first_present(probes)
    return resolved if resolved else UNKNOWN


def parse_device(
    raw: Any,
    *,
    now: datetime | None = None,
    offline_after: timedelta = DEFAULT_OFFLINE_WINDOW,
) -> ParsedDevice:
    """Normalize one raw GenieACS device document.

    Parameters
    ----------
    raw
        Device document as returned by ``GET /devices``. Non-dict input
        yields an all-default (offline, unknown) device.
    now
        Reference time for the online check. Defaults to the current UTC time.
    offline_after
        Inform age at which the device is considered offline.
    """

    if not isinstance(raw, dict):
        raw = {}
    if now is None:
        now = _utcnow()

    last_contact = resolve_last_contact(raw)
    return ParsedDevice(
        id=resolve_device_id(raw),
        raw_id=safe_str(raw.get(DEVICE_ID_KEY)),
        location=resolve_location(raw),
        is_online=is_online(last_contact, now=now, offline_after=offline_after),
        last_contact=last_contact,
        rx_power=resolve_rx_power(raw),
        uptime_seconds=resolve_uptime_seconds(raw),
        ip=resolve_ip(raw),
    )
