"""Alert decision policy.

This module contains *no* payload parsing. It compares a normalized device
with its previous persisted state and decides, with a fixed first-match
table, whether the transition deserves an alert.
"""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from ontmon._constants import DEFAULT_RX_WARNING_THRESHOLD, DEFAULT_TIME_ZONE
from ontmon.models.alert import AlertEvent, AlertTitle
from ontmon.models.device import ParsedDevice
from ontmon.models.state import DeviceState

_TIMESTAMP_FORMAT = "%d/%m/%Y %H.%M.%S"


def is_below(rx_power: float | None, threshold: float) -> bool:
    """Unknown power is never below the threshold; the comparison is strict."""
    return rx_power is not None and rx_power < threshold


def decide_title(
    device: ParsedDevice,
    previous: DeviceState | None,
    *,
    threshold: float,
) -> AlertTitle | None:
    """First matching row wins; at most one alert per device per cycle."""
    if previous is None:
        if not device.is_online:
            return AlertTitle.OFFLINE_NEW
        if is_below(device.rx_power, threshold):
            return AlertTitle.LOW_RX_NEW
        return None

    if previous.is_online and not device.is_online:
        return AlertTitle.WENT_OFFLINE
    if not previous.is_online and device.is_online:
        return AlertTitle.BACK_ONLINE

    # Only a fresh crossing alerts; staying below the threshold is silent.
    was_good = previous.rx_power is None or previous.rx_power >= threshold
    if was_good and is_below(device.rx_power, threshold):
        return AlertTitle.CRITICAL_RX
    return None


def _status_label(online: bool) -> str:
    return "ONLINE" if online else "OFFLINE"


class AlertEngine:
    """Decide and format alerts for one device at a time.

    Parameters
    ----------
    rx_threshold : float
        Optical Rx power (dBm) below which a device is degraded.
    time_zone : str
        IANA zone used to render the timestamp line of messages.
    """

    def __init__(
        self,
        *,
        rx_threshold: float = DEFAULT_RX_WARNING_THRESHOLD,
        time_zone: str = DEFAULT_TIME_ZONE,
    ) -> None:
        self.rx_threshold = float(rx_threshold)
        self._tz = ZoneInfo(time_zone)

    def decide(self, device: ParsedDevice, previous: DeviceState | None) -> AlertEvent | None:
        title = decide_title(device, previous, threshold=self.rx_threshold)
        if title is None:
            return None
        return AlertEvent(title=title, device=device, previous_state=previous)

    def next_state(self, device: ParsedDevice, now: datetime) -> DeviceState:
        """State that replaces the stored entry, whether or not an alert fired."""
        return DeviceState(is_online=device.is_online, rx_power=device.rx_power, last_checked=now)

    def format_message(self, event: AlertEvent, now: datetime) -> str:
        """Render *event* as a multi-line WhatsApp-markdown report."""
        device = event.device
        lines = [
            f"*--- {event.title} ---*",
            "",
            f"📍 *Location/Tag:* {device.location}",
            f"🆔 *Device ID:* {device.id}",
            f"🌐 *IP TR069:* {device.ip}",
            f"⏱️ *Uptime:* {device.uptime}",
        ]

        status_glyph = "✅" if device.is_online else "🔴"
        lines.append(f"🔌 *Status:* {status_glyph} {_status_label(device.is_online)}")
        if event.connectivity_changed:
            assert event.previous_state is not None  # noqa: S101
            lines.append(f"   _(was {_status_label(event.previous_state.is_online)})_")

        if device.rx_power is None:
            lines.append("⚡ *Optical Rx:* ❓ Unknown")
        else:
            rx_glyph = "⚠️" if is_below(device.rx_power, self.rx_threshold) else "🟢"
            lines.append(f"⚡ *Optical Rx:* {rx_glyph} {device.rx_power:g} dBm")

        lines.append("")
        lines.append(f"🕒 {now.astimezone(self._tz).strftime(_TIMESTAMP_FORMAT)}")
        return "\n".join(lines)
