"""Launch lock screen: keypad entry, verification and lockout messages."""

import logging
from typing import Any, Callable, Optional

from pingate.constants import PIN_LENGTH
from pingate.exceptions import NotConfiguredError, StoreFailureError
from pingate.lockout import LockGuard, LockoutTracker, VerifyOutcome
from pingate.pin_gate import PinGate
from pingate import response

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

KEYPAD_DIGITS = frozenset("0123456789")


class LockScreen:
    """
    Collects a 4-digit PIN and submits it automatically when full.

    The failure counter lives only as long as this screen: presenting a
    new LockScreen starts again from zero.
    """

    def __init__(
        self,
        gate: PinGate,
        tracker: Optional[LockoutTracker] = None,
        on_unlock: Optional[Callable[[], None]] = None,
    ):
        self.guard = LockGuard(gate, tracker, on_lockout_end=self._on_lockout_end)
        self.on_unlock = on_unlock
        self.entered = ""
        self.message = ""
        self.unlocked = False

    @property
    def locked(self) -> bool:
        return self.guard.locked

    def view(self) -> dict[str, Any]:
        """Current screen state for rendering."""
        locked = self.locked
        return {
            "filled": len(self.entered),
            "length": PIN_LENGTH,
            "locked": locked,
            "keypad_enabled": not locked and not self.unlocked,
            "seconds_remaining": self.guard.tracker.seconds_remaining(),
            "attempts_remaining": self.guard.tracker.attempts_remaining,
            "message": self.message,
        }

    def _locked_response(self) -> dict[str, Any]:
        seconds = self.guard.tracker.seconds_remaining()
        result = response.locked_out(seconds)
        self.message = result["message"]
        return result

    async def press_digit(self, digit: str) -> dict[str, Any]:
        """Append a digit; the fourth digit submits."""
        if self.locked:
            return self._locked_response()

        if digit not in KEYPAD_DIGITS:
            return response.invalid_format("Only digits can be entered")

        self.message = ""
        if len(self.entered) < PIN_LENGTH:
            self.entered += digit

        if len(self.entered) == PIN_LENGTH:
            return await self.submit()
        return response.ok(data=self.view())

    def delete(self) -> dict[str, Any]:
        if self.locked:
            return self._locked_response()
        self.entered = self.entered[:-1]
        return response.ok(data=self.view())

    async def submit(self) -> dict[str, Any]:
        """Verify a complete entry. Input is cleared whatever the outcome."""
        if self.locked:
            return self._locked_response()
        if len(self.entered) != PIN_LENGTH:
            return response.invalid_format(f"Enter all {PIN_LENGTH} digits")

        pin, self.entered = self.entered, ""

        outcome = await self.guard.attempt(pin)

        if outcome is VerifyOutcome.LOCKED:
            return self._locked_response()

        if outcome is VerifyOutcome.VERIFIED:
            self.unlocked = True
            self.message = ""
            logger.info("Lock screen unlocked")
            if self.on_unlock:
                self.on_unlock()
            return response.success_response({"unlocked": True}, status="unlocked")

        if self.locked:
            return self._locked_response()

        error = self.guard.last_error
        remaining = self.guard.tracker.attempts_remaining
        if isinstance(error, (StoreFailureError, NotConfiguredError)):
            result = response.from_error(error, "Incorrect PIN")
        else:
            result = response.denied(f"Incorrect PIN. {remaining} attempts remaining.")
        result["data"]["attempts_remaining"] = remaining
        self.message = result["message"]
        return result

    def _on_lockout_end(self) -> None:
        self.entered = ""
        self.message = ""

    def close(self) -> None:
        """Dismiss the screen and cancel any pending lockout timer."""
        self.guard.close()
