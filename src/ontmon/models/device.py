"""Normalized ONT device model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import computed_field, field_serializer

from ontmon._constants import NO_TAG, UNKNOWN
from ontmon.ingestion.normalize import format_uptime
from ontmon.models._base import OntBaseModel, UtcDatetime, isoformat_z


class ParsedDevice(OntBaseModel):
    """One device as seen in the most recent poll.

    ``id`` is the device type (product class) rather than the serial; see
    :func:`ontmon.ingestion.devices.resolve_device_id`.
    """

    id: str = UNKNOWN
    raw_id: str | None = None
    location: str = NO_TAG
    is_online: bool = False
    last_contact: UtcDatetime | None = None
    rx_power: float | None = None
    uptime_seconds: int = 0
    ip: str = UNKNOWN

    @computed_field  # type: ignore[prop-decorator]
    @property
    def uptime(self) -> str:
        """Human-readable uptime, e.g. ``"1d 2h 30m"``."""
        return format_uptime(self.uptime_seconds)

    @field_serializer("last_contact")
    def _serialize_last_contact(self, value: datetime | None) -> str | None:
        return isoformat_z(value) if value is not None else None

    def to_json_dict(self) -> dict[str, Any]:
        """Dashboard JSON shape (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)
