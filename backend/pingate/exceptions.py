"""Custom exceptions for the PIN gate and its collaborators."""

from typing import Optional


class PinGateError(Exception):
    """Base exception for pingate."""
    kind = "error"


class ValidationError(PinGateError):
    """Invalid input data."""
    kind = "invalid_input"


class InvalidFormatError(ValidationError):
    """PIN is not exactly four ASCII digits."""
    kind = "invalid_format"


class NotConfiguredError(PinGateError):
    """Operation needs a stored PIN but none exists."""
    kind = "not_configured"


class StoreFailureError(PinGateError):
    """Key-value store read or write failed."""
    kind = "store_failure"


class LockedOutError(PinGateError):
    """Verification attempted while the lockout window is active."""
    kind = "locked_out"

    def __init__(self, message: str, seconds_remaining: int = 0):
        super().__init__(message)
        self.seconds_remaining = seconds_remaining


class RemoteServiceError(PinGateError):
    """Remote data service call failed."""
    kind = "remote_failure"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
