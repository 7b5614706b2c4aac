"""Alert events produced by the decision table."""

from __future__ import annotations

from enum import StrEnum

from ontmon.models._base import OntBaseModel
from ontmon.models.device import ParsedDevice
from ontmon.models.state import DeviceState


class AlertTitle(StrEnum):
    OFFLINE_NEW = "ONT OFFLINE (New)"
    LOW_RX_NEW = "LOW RX POWER (New)"
    WENT_OFFLINE = "ONT WENT OFFLINE"
    BACK_ONLINE = "ONT BACK ONLINE"
    CRITICAL_RX = "CRITICAL RX POWER"


class AlertEvent(OntBaseModel):
    """A decided alert; consumed immediately by delivery and not retained."""

    title: AlertTitle
    device: ParsedDevice
    previous_state: DeviceState | None = None

    @property
    def connectivity_changed(self) -> bool:
        return self.previous_state is not None and self.previous_state.is_online != self.device.is_online
