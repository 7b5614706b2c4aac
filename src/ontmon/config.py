"""Monitor configuration for ontmon."""

from __future__ import annotations

import dataclasses
import math
import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Any

from ontmon._constants import (
    DEFAULT_OFFLINE_WINDOW,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RX_WARNING_THRESHOLD,
    DEFAULT_STATE_FILE,
    DEFAULT_TIME_ZONE,
    DEFAULT_WA_API_URL,
)
from ontmon.exceptions import OntmonConfigError


def _env_float(env: Mapping[str, str], key: str) -> float | None:
    value = env.get(key)
    if value is None or not value.strip():
        return None
    try:
        result = float(value)
    except ValueError as exc:
        raise OntmonConfigError(f"{key} must be a number, got {value!r}") from exc
    if not math.isfinite(result):
        raise OntmonConfigError(f"{key} must be finite, got {value!r}")
    return result


def _split_recipients(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())


def _split_auth(value: str | None) -> tuple[str, str]:
    if not value:
        return "", ""
    username, _, password = value.partition(":")
    return username, password


@dataclasses.dataclass(frozen=True)
class MonitorConfig:
    """Monitor configuration.

    Parameters
    ----------
    genieacs_url : str
        Base URL of the GenieACS NBI (e.g. ``"http://acs:7557"``).
    genieacs_username : str
        Basic-auth user for the NBI. Empty disables authentication.
    genieacs_password : str
        Basic-auth password for the NBI.
    request_timeout : float
        Per-request HTTP timeout in seconds.
    rx_warning_threshold : float
        Optical Rx power (dBm) below which a device is considered degraded.
    offline_window : timedelta
        A device whose last inform is at least this old is offline.
    recipients : tuple of str
        Recipient identifiers (phone numbers) that receive every alert.
    wa_api_key : str or None
        API key for the WACLOUD gateway. Without it, deliveries fail.
    wa_api_url : str
        WACLOUD send-message endpoint.
    state_file : str
        Path of the persisted per-device state document.
    poll_interval_minutes : int
        Interval between cycles, used by the runner script.
    time_zone : str
        IANA time zone used for timestamps in alert messages.
    """

    genieacs_url: str
    genieacs_username: str = ""
    genieacs_password: str = ""
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    rx_warning_threshold: float = DEFAULT_RX_WARNING_THRESHOLD
    offline_window: timedelta = DEFAULT_OFFLINE_WINDOW
    recipients: tuple[str, ...] = ()
    wa_api_key: str | None = None
    wa_api_url: str = DEFAULT_WA_API_URL
    state_file: str = DEFAULT_STATE_FILE
    poll_interval_minutes: int = 5
    time_zone: str = DEFAULT_TIME_ZONE

    def __post_init__(self) -> None:
        if not self.genieacs_url:
            raise OntmonConfigError("genieacs_url must be set")
        if self.request_timeout <= 0:
            raise OntmonConfigError("request_timeout must be positive")
        if self.offline_window <= timedelta(0):
            raise OntmonConfigError("offline_window must be positive")
        if self.poll_interval_minutes <= 0:
            raise OntmonConfigError("poll_interval_minutes must be positive")

    @classmethod
    def from_env(cls, **overrides: Any) -> MonitorConfig:
        """Create configuration from environment variables.

        Reads ``GENIEACS_URL``, ``GENIEACS_AUTH`` (``user:password``),
        ``WA_TARGET_NUMBERS`` (comma separated) and the optional tuning
        variables listed on the fields. Explicit keyword arguments
        override environment values.

        Raises
        ------
        OntmonConfigError
            If the URL is missing or a numeric variable does not parse.
        """
        env = os.environ

        config_kwargs: dict[str, Any] = {}
        _ENV_CONFIG_MAP = {
            "GENIEACS_URL": "genieacs_url",
            "WA_API_KEY": "wa_api_key",
            "WA_API_URL": "wa_api_url",
            "STATE_FILE": "state_file",
            "TIME_ZONE": "time_zone",
        }
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val:
                config_kwargs[field_name] = val

        username, password = _split_auth(env.get("GENIEACS_AUTH"))
        config_kwargs["genieacs_username"] = username
        config_kwargs["genieacs_password"] = password
        config_kwargs["recipients"] = _split_recipients(env.get("WA_TARGET_NUMBERS"))

        # Numeric env values are only parsed when not explicitly overridden
        if "rx_warning_threshold" not in overrides:
            threshold = _env_float(env, "RX_WARNING_THRESHOLD")
            if threshold is not None:
                config_kwargs["rx_warning_threshold"] = threshold

        if "request_timeout" not in overrides:
            timeout = _env_float(env, "GENIEACS_TIMEOUT")
            if timeout is not None:
                config_kwargs["request_timeout"] = timeout

        if "offline_window" not in overrides:
            window = _env_float(env, "OFFLINE_WINDOW_MINUTES")
            if window is not None:
                try:
                    config_kwargs["offline_window"] = timedelta(minutes=window)
                except OverflowError as exc:
                    raise OntmonConfigError(f"OFFLINE_WINDOW_MINUTES is out of range: {window}") from exc

        if "poll_interval_minutes" not in overrides:
            interval = _env_float(env, "POLL_INTERVAL_MINUTES")
            if interval is not None:
                config_kwargs["poll_interval_minutes"] = int(interval)

        # Allow a raw comma string override like the env var
        recipients = overrides.pop("recipients", None)
        if isinstance(recipients, str):
            config_kwargs["recipients"] = _split_recipients(recipients)
        elif recipients is not None:
            config_kwargs["recipients"] = tuple(recipients)

        config_kwargs.update(overrides)
        config_kwargs.setdefault("genieacs_url", "")

        return cls(**config_kwargs)
