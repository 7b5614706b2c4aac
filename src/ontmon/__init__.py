"""ontmon - GenieACS ONT state monitor with WhatsApp alerts."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("ontmon")
except PackageNotFoundError:
    __version__ = "0+local"
from ontmon.client import OntMonitor
from ontmon.config import MonitorConfig
from ontmon.exceptions import (
    OntmonConfigError,
    OntmonError,
    OntmonNotifierError,
    OntmonTransportError,
)
from ontmon.ingestion.devices import parse_device
from ontmon.models import AlertEvent, AlertTitle, DeviceState, ParsedDevice
from ontmon.monitor import CycleResult, MonitorCycle
from ontmon.notify import DeliveryReport, LogNotifier, Notifier, WaCloudNotifier, deliver_to_all
from ontmon.state.policy import AlertEngine
from ontmon.state.store import StateStore

__all__ = [
    "__version__",
    "AlertEngine",
    "AlertEvent",
    "AlertTitle",
    "CycleResult",
    "DeliveryReport",
    "DeviceState",
    "LogNotifier",
    "MonitorConfig",
    "MonitorCycle",
    "Notifier",
    "OntMonitor",
    "OntmonConfigError",
    "OntmonError",
    "OntmonNotifierError",
    "OntmonTransportError",
    "ParsedDevice",
    "StateStore",
    "WaCloudNotifier",
    "deliver_to_all",
    "parse_device",
]
