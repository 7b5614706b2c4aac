"""Data models for ontmon."""

from ontmon.models._base import OntBaseModel, UtcDatetime, isoformat_z
from ontmon.models.alert import AlertEvent, AlertTitle
from ontmon.models.device import ParsedDevice
from ontmon.models.state import DeviceState

__all__ = [
    "AlertEvent",
    "AlertTitle",
    "DeviceState",
    "OntBaseModel",
    "ParsedDevice",
    "UtcDatetime",
    "isoformat_z",
]
