"""Persisted per-device state."""

from __future__ import annotations

from datetime import datetime

from pydantic import field_serializer

from ontmon.models._base import OntBaseModel, UtcDatetime, isoformat_z


class DeviceState(OntBaseModel):
    """Minimal state needed to detect transitions between two cycles.

    Serialized as ``{"isOnline": ..., "rxPower": ..., "lastChecked": ...}``.
    """

    is_online: bool
    rx_power: float | None = None
    last_checked: UtcDatetime

    @field_serializer("last_checked")
    def _serialize_last_checked(self, value: datetime) -> str:
        return isoformat_z(value)
