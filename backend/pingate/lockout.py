"""Failed-attempt lockout layered on top of PinGate.verify."""

import asyncio
import json
import logging
import math
import time
from enum import Enum
from typing import Callable, Optional

from .constants import PIN_LOCKOUT_SECONDS, PIN_MAX_ATTEMPTS
from .exceptions import LockedOutError, PinGateError
from .pin_gate import PinGate

logger = logging.getLogger(__name__)


class VerifyOutcome(str, Enum):
    VERIFIED = "verified"
    DENIED = "denied"
    LOCKED = "locked"


class LockoutTracker:
    """
    In-memory failure counter with a time-gated lock.

    Nothing here is persisted: a fresh tracker starts at zero failures.
    The lock lifts once ``clock()`` reaches ``locked_until``, which also
    clears the counter.
    """

    def __init__(
        self,
        max_attempts: int = PIN_MAX_ATTEMPTS,
        lockout_seconds: float = PIN_LOCKOUT_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_attempts = max_attempts
        self.lockout_seconds = lockout_seconds
        self.clock = clock
        self.failed_attempts = 0
        self.locked_until: Optional[float] = None

    def is_locked(self) -> bool:
        if self.locked_until is None:
            return False
        if self.clock() >= self.locked_until:
            logger.info("Lockout window elapsed")
            self.reset()
            return False
        return True

    def seconds_remaining(self) -> int:
        if not self.is_locked():
            return 0
        return math.ceil(self.locked_until - self.clock())

    @property
    def attempts_remaining(self) -> int:
        return max(self.max_attempts - self.failed_attempts, 0)

    def ensure_unlocked(self) -> None:
        """
        Raises:
            LockedOutError: If the lockout window is active
        """
        if self.is_locked():
            remaining = self.seconds_remaining()
            raise LockedOutError(f"Too many attempts. Try again in {remaining} seconds.", remaining)

    def record_failure(self) -> bool:
        """Count a failed attempt. Returns True if this failure started a lockout."""
        self.failed_attempts += 1
        if self.failed_attempts >= self.max_attempts:
            self.locked_until = self.clock() + self.lockout_seconds
            return True
        return False

    def record_success(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.failed_attempts = 0
        self.locked_until = None


class LockGuard:
    """
    Rate-limits verification for the launch lock screen.

    Attempts run one at a time, so a burst of submits re-checks the lock
    after each recorded failure. While locked, attempts are rejected
    without touching the store. When a lockout starts, a timer is
    scheduled on the running loop to lift it and fire ``on_lockout_end``.
    Clearing the gate cancels a pending timer.
    """

    def __init__(
        self,
        gate: PinGate,
        tracker: Optional[LockoutTracker] = None,
        on_lockout_end: Optional[Callable[[], None]] = None,
    ):
        self.gate = gate
        self.tracker = tracker or LockoutTracker()
        self.on_lockout_end = on_lockout_end
        self.last_error: Optional[PinGateError] = None
        self._lock = asyncio.Lock()
        self._timer: Optional[asyncio.TimerHandle] = None
        self._generation = 0
        gate.add_reset_listener(self._on_gate_reset)

    @property
    def locked(self) -> bool:
        return self.tracker.is_locked()

    async def attempt(self, pin: str) -> VerifyOutcome:
        async with self._lock:
            self.last_error = None
            try:
                self.tracker.ensure_unlocked()
            except LockedOutError as e:
                logger.warning(f"Verification blocked: {e.seconds_remaining}s of lockout left")
                self.last_error = e
                return VerifyOutcome.LOCKED

            if await self.gate.verify(pin):
                self.tracker.record_success()
                self.cancel()
                return VerifyOutcome.VERIFIED
            self.last_error = self.gate.last_error

            if self.tracker.record_failure():
                logger.warning(json.dumps({
                    "action": "pin_lockout",
                    "failed_attempts": self.tracker.failed_attempts,
                    "lockout_seconds": self.tracker.lockout_seconds,
                }))
                self._schedule_unlock()
            else:
                logger.warning(f"Incorrect PIN, {self.tracker.attempts_remaining} attempts remaining")
            return VerifyOutcome.DENIED

    def _schedule_unlock(self) -> None:
        self.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: the clock check in the tracker still lifts the lock.
            return
        generation = self._generation
        self._timer = loop.call_later(
            self.tracker.lockout_seconds, self._lockout_elapsed, generation
        )

    def _lockout_elapsed(self, generation: int) -> None:
        if generation != self._generation:
            return
        self._timer = None
        self.tracker.reset()
        logger.info("Lockout lifted, input re-enabled")
        if self.on_lockout_end:
            self.on_lockout_end()

    def cancel(self) -> None:
        """Cancel any pending unlock timer; an already-fired stale callback is ignored."""
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_gate_reset(self) -> None:
        self.cancel()
        self.tracker.reset()

    def close(self) -> None:
        self.cancel()
        self.gate.remove_reset_listener(self._on_gate_reset)
