# file: kodysu/errors.py
"""
Error taxonomy for the kody.su client.

Every failure the client reports is one of the exceptions below. Cancellation
is not part of the taxonomy: `asyncio.CancelledError` is always propagated
as-is.
"""

from __future__ import annotations


class KodySuErrorCode:
    """Error codes returned by the API in the `error_code` field."""

    AUTH_REQUIRED = "AUTH_REQUIRED"
    AUTH_FAILED = "AUTH_FAILED"
    LIMIT_EXCEEDED = "LIMIT_EXCEEDED"
    INVALID_PARAMS = "INVALID_PARAMS"

    # Substituted when the API reports a message without a code.
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class KodySuError(Exception):
    """Base class for all kody.su client errors."""


class KodySuConfigurationError(KodySuError):
    """Raised for invalid client configuration or a contract violation by the caller."""


class KodySuHttpError(KodySuError):
    """
    Raised for HTTP-level failures.

    Covers unclassified non-success statuses, empty bodies, malformed JSON and
    `null` bodies. `status_code` is None when no response status is available.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class KodySuAuthenticationError(KodySuError):
    """Raised on HTTP 401/403 or when the API rejects the access key."""


class KodySuValidationError(KodySuError):
    """Raised when the API reports an error code other than an authentication one."""

    def __init__(self, error_code: str, message: str) -> None:
        super().__init__(message)
        self.error_code = error_code
