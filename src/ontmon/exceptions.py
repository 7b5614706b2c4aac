"""Custom exception hierarchy for ontmon."""

from __future__ import annotations


class OntmonError(Exception):
    """Base exception for all ontmon errors."""


class OntmonConfigError(OntmonError):
    """Invalid or missing configuration."""


class OntmonTransportError(OntmonError):
    """HTTP-level failure talking to GenieACS (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class OntmonNotifierError(OntmonError):
    """A notifier could not be used to deliver a message.

    Gateway-side rejections are reported as a ``False`` delivery result;
    this is raised for problems on our side (e.g. no HTTP session).
    """

    def __init__(self, message: str, *, recipient: str = "") -> None:
        self.recipient = recipient
        super().__init__(message)
