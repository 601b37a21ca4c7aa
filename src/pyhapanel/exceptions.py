"""Custom exception hierarchy for pyhapanel."""

from __future__ import annotations


class PanelError(Exception):
    """Base exception for all pyhapanel errors."""


class PanelConfigError(PanelError):
    """Invalid or missing configuration."""


class PanelUnknownDeviceError(PanelConfigError):
    """Entity id is not part of the fixed device table."""

    def __init__(self, entity_id: str) -> None:
        self.entity_id = entity_id
        super().__init__(f"Unknown device: {entity_id!r}")


class PanelTransportError(PanelError):
    """Request did not complete (connection failure or timeout)."""

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


class PanelRemoteRejectedError(PanelTransportError):
    """Remote store answered with a status other than 200."""


class PanelMalformedResponseError(PanelError):
    """Response held no usable fields (missing, null, or cut off by truncation).

    Responses larger than the response buffer are truncated rather than
    rejected; fields that did not fit are simply absent.  This error is raised
    only when *nothing* usable was left.
    """

    def __init__(self, message: str, *, endpoint: str = "") -> None:
        self.endpoint = endpoint
        super().__init__(message)


class PanelLockTimeoutError(PanelError):
    """The UI lock could not be acquired within the bounded wait."""

    def __init__(self, timeout: float | None) -> None:
        self.timeout = timeout
        super().__init__(f"UI lock not acquired within {timeout}s")
