"""Custom exception hierarchy for pyvesync_cloud."""

from __future__ import annotations


class VeSyncError(Exception):
    """Base exception for all pyvesync_cloud errors."""


class VeSyncConfigError(VeSyncError):
    """Invalid or missing configuration."""


class VeSyncTransportError(VeSyncError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

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


class VeSyncApiError(VeSyncError):
    """API returned a non-zero code (application-level error)."""

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message)


class VeSyncAuthenticationError(VeSyncApiError):
    """Login failed or the account credentials were rejected."""


class VeSyncTokenExpiredError(VeSyncAuthenticationError):
    """Session token rejected by the server (code ``-11001000``).

    The client only re-authenticates on this error when
    ``VeSyncConfig.reauth_on_token_error`` is set; otherwise the
    session is dropped and the error is surfaced.
    """


class VeSyncFeatureNotSupportedError(VeSyncApiError):
    """Feature unavailable on this device, or in its current mode.

    Raised locally by the capability gate before any request is sent,
    and also for the remote code ``11018000`` so callers see a single
    failure type regardless of where the rejection happened.
    """

    def __init__(
        self,
        message: str,
        *,
        feature: str | None = None,
        mode: str | None = None,
        code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.feature = feature
        self.mode = mode
        super().__init__(message, code=code, endpoint=endpoint)


class VeSyncInvalidArgumentError(VeSyncError, ValueError):
    """Argument outside the device's fixed range or enum.

    Always raised before any network call.
    """


class VeSyncUnrecognizedDeviceError(VeSyncError):
    """Device type has no entry in the variant registry."""

    def __init__(self, message: str, *, device_type: str = "") -> None:
        self.device_type = device_type
        super().__init__(message)


class VeSyncStaleDataError(VeSyncError):
    """Device state did not converge within the allowed poll attempts."""

    def __init__(self, message: str, *, attempts: int = 0) -> None:
        self.attempts = attempts
        super().__init__(message)


class VeSyncCommandUnconfirmedError(VeSyncStaleDataError):
    """Command outcome unknown (remote code ``11000000``).

    The cloud answers some accepted commands with this generic code.
    It is reported as an unconfirmed outcome rather than success;
    callers that need certainty should poll with
    :meth:`VeSyncDevice.wait_for`.
    """

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.code = code
        self.endpoint = endpoint
        super().__init__(message, attempts=0)
