"""Standardized UI response helpers."""

from typing import Any, Optional

from .exceptions import InvalidFormatError, LockedOutError, NotConfiguredError, PinGateError, StoreFailureError
from .json_helper import dumps as json_dumps

GENERIC_FAILURE_MESSAGE = "Something went wrong. Please try again."


def success_response(
    data: Optional[dict] = None,
    message: str = "",
    status: str = "ok",
) -> dict[str, Any]:
    """
    Build successful response for the UI layer.

    Args:
        data: Payload for the screen (default: empty)
        message: Alert text to show, empty for silent success
        status: Outcome code (default: "ok")

    Returns:
        Response dict with ok, status, title, message and data

    Example:
        >>> success_response({"enabled": True}, "PIN protection enabled")
        {
            "ok": True,
            "status": "ok",
            "title": "Success",
            "message": "PIN protection enabled",
            "data": {"enabled": True}
        }
    """
    return {
        "ok": True,
        "status": status,
        "title": "Success",
        "message": message,
        "data": dict(data or {}),
    }


def error_response(
    message: str,
    status: str = "error",
    data: Optional[dict] = None,
) -> dict[str, Any]:
    """
    Build error response for the UI layer.

    Args:
        message: Error text shown inline or in an alert
        status: Error kind (e.g. "invalid_format", "locked_out")
        data: Optional payload (e.g. remaining attempts)

    Returns:
        Response dict with ok=False
    """
    return {
        "ok": False,
        "status": status,
        "title": "Error",
        "message": message,
        "data": dict(data or {}),
    }


def to_json(response: dict[str, Any]) -> str:
    """Serialize a response dict."""
    return json_dumps(response)


# Convenience functions for common outcomes

def ok(message: str = "", data: Optional[dict] = None) -> dict[str, Any]:
    return success_response(data, message)


def invalid_format(message: str = "PIN must be exactly 4 digits", data: Optional[dict] = None) -> dict[str, Any]:
    return error_response(message, "invalid_format", data)


def not_configured(message: str = "No PIN is set", data: Optional[dict] = None) -> dict[str, Any]:
    return error_response(message, "not_configured", data)


def denied(message: str = "Incorrect PIN", data: Optional[dict] = None) -> dict[str, Any]:
    return error_response(message, "denied", data)


def locked_out(seconds_remaining: int, data: Optional[dict] = None) -> dict[str, Any]:
    payload = {"seconds_remaining": seconds_remaining, **(data or {})}
    return error_response(
        f"Too many attempts. Try again in {seconds_remaining} seconds.", "locked_out", payload
    )


def try_again(message: str = GENERIC_FAILURE_MESSAGE, data: Optional[dict] = None) -> dict[str, Any]:
    """Generic alert for store failures."""
    return error_response(message, "store_failure", data)


def from_error(error: Optional[PinGateError], fallback_message: str) -> dict[str, Any]:
    """Map a PinGate failure to the response the screen should show."""
    if isinstance(error, InvalidFormatError):
        return invalid_format(str(error))
    if isinstance(error, NotConfiguredError):
        return not_configured(str(error))
    if isinstance(error, LockedOutError):
        return locked_out(error.seconds_remaining)
    if isinstance(error, StoreFailureError):
        return try_again()
    return error_response(fallback_message)
