"""Unit tests for lockout tracking and the lock guard - NO MOCKS."""

import asyncio

import pytest
from pingate.exceptions import LockedOutError, StoreFailureError
from pingate.lockout import LockGuard, LockoutTracker, VerifyOutcome
from pingate.pin_gate import PinGate
from pingate.store import MemoryKeyValueStore


class TestLockoutTracker:
    def test_starts_unlocked(self, clock):
        tracker = LockoutTracker(clock=clock)
        assert tracker.is_locked() is False
        assert tracker.failed_attempts == 0
        assert tracker.attempts_remaining == 5

    def test_locks_on_fifth_failure(self, clock):
        tracker = LockoutTracker(clock=clock)

        started = [tracker.record_failure() for _ in range(5)]

        assert started == [False, False, False, False, True]
        assert tracker.is_locked() is True
        assert tracker.locked_until == clock.now + 30

    def test_seconds_remaining_rounds_up(self, clock):
        tracker = LockoutTracker(clock=clock)
        for _ in range(5):
            tracker.record_failure()

        clock.advance(10.2)
        assert tracker.seconds_remaining() == 20

    def test_lock_lifts_after_window(self, clock):
        tracker = LockoutTracker(clock=clock)
        for _ in range(5):
            tracker.record_failure()

        clock.advance(29.5)
        assert tracker.is_locked() is True
        clock.advance(0.5)
        assert tracker.is_locked() is False
        assert tracker.failed_attempts == 0
        assert tracker.seconds_remaining() == 0

    def test_ensure_unlocked_raises(self, clock):
        tracker = LockoutTracker(clock=clock)
        for _ in range(5):
            tracker.record_failure()

        with pytest.raises(LockedOutError, match="Try again in 30 seconds") as exc_info:
            tracker.ensure_unlocked()
        assert exc_info.value.seconds_remaining == 30
        assert exc_info.value.kind == "locked_out"

    def test_success_resets_counter(self, clock):
        tracker = LockoutTracker(clock=clock)
        for _ in range(4):
            tracker.record_failure()

        tracker.record_success()

        assert tracker.failed_attempts == 0
        assert tracker.attempts_remaining == 5

    def test_custom_policy(self, clock):
        tracker = LockoutTracker(max_attempts=2, lockout_seconds=5, clock=clock)
        tracker.record_failure()
        assert tracker.record_failure() is True
        assert tracker.seconds_remaining() == 5


async def configured_gate(store, pin="4321"):
    gate = PinGate(store)
    await gate.set_pin(pin)
    return gate


class TestLockGuard:
    def test_correct_pin_verifies(self, store, clock):
        async def scenario():
            guard = LockGuard(await configured_gate(store), LockoutTracker(clock=clock))
            return await guard.attempt("4321")

        assert asyncio.run(scenario()) is VerifyOutcome.VERIFIED

    def test_wrong_pin_counts(self, store, clock):
        async def scenario():
            guard = LockGuard(await configured_gate(store), LockoutTracker(clock=clock))
            outcome = await guard.attempt("0000")
            return outcome, guard.tracker.failed_attempts

        assert asyncio.run(scenario()) == (VerifyOutcome.DENIED, 1)

    def test_sixth_attempt_rejected_without_store_read(self, store, clock):
        """After five failures even the correct PIN is refused locally."""
        async def scenario():
            guard = LockGuard(await configured_gate(store), LockoutTracker(clock=clock))
            for _ in range(5):
                assert await guard.attempt("0000") is VerifyOutcome.DENIED
            reads_before = store.reads
            outcome = await guard.attempt("4321")
            return outcome, store.reads - reads_before, guard

        outcome, reads, guard = asyncio.run(scenario())
        assert outcome is VerifyOutcome.LOCKED
        assert reads == 0
        assert isinstance(guard.last_error, LockedOutError)

    def test_still_locked_just_before_window_ends(self, store, clock):
        async def scenario():
            guard = LockGuard(await configured_gate(store), LockoutTracker(clock=clock))
            for _ in range(5):
                await guard.attempt("0000")
            clock.advance(29)
            return await guard.attempt("4321")

        assert asyncio.run(scenario()) is VerifyOutcome.LOCKED

    def test_lockout_expiry(self, store, clock):
        """After the window a correct PIN verifies and the counter is zero."""
        async def scenario():
            guard = LockGuard(await configured_gate(store), LockoutTracker(clock=clock))
            for _ in range(5):
                await guard.attempt("0000")
            clock.advance(30)
            outcome = await guard.attempt("4321")
            return outcome, guard.tracker.failed_attempts

        assert asyncio.run(scenario()) == (VerifyOutcome.VERIFIED, 0)

    def test_success_resets_counter(self, store, clock):
        async def scenario():
            guard = LockGuard(await configured_gate(store), LockoutTracker(clock=clock))
            for _ in range(4):
                await guard.attempt("0000")
            await guard.attempt("4321")
            return guard.tracker.failed_attempts

        assert asyncio.run(scenario()) == 0

    def test_timer_lifts_lock_and_notifies(self, store):
        """With a real loop the scheduled timer re-enables input."""
        ended = []

        async def scenario():
            gate = await configured_gate(store)
            tracker = LockoutTracker(lockout_seconds=0.05)
            guard = LockGuard(gate, tracker, on_lockout_end=lambda: ended.append(True))
            for _ in range(5):
                await guard.attempt("0000")
            assert guard.locked is True
            await asyncio.sleep(0.2)
            return guard.tracker.failed_attempts, guard.tracker.locked_until

        assert asyncio.run(scenario()) == (0, None)
        assert ended == [True]

    def test_clear_all_cancels_pending_lockout(self, store):
        ended = []

        async def scenario():
            gate = await configured_gate(store)
            tracker = LockoutTracker(lockout_seconds=0.05)
            guard = LockGuard(gate, tracker, on_lockout_end=lambda: ended.append(True))
            for _ in range(5):
                await guard.attempt("0000")
            await gate.clear_all()
            locked_after_clear = guard.locked
            await asyncio.sleep(0.2)
            return locked_after_clear

        assert asyncio.run(scenario()) is False
        assert ended == []

    def test_stale_timer_callback_ignored(self, store, clock):
        async def scenario():
            guard = LockGuard(await configured_gate(store), LockoutTracker(clock=clock))
            for _ in range(5):
                await guard.attempt("0000")
            stale_generation = guard._generation
            guard.cancel()
            guard._lockout_elapsed(stale_generation)
            return guard.locked

        assert asyncio.run(scenario()) is True

    def test_close_unregisters_listener(self, store, clock):
        async def scenario():
            gate = await configured_gate(store)
            guard = LockGuard(gate, LockoutTracker(clock=clock))
            for _ in range(5):
                await guard.attempt("0000")
            guard.close()
            await gate.clear_all()
            return guard.locked

        assert asyncio.run(scenario()) is True

    def test_store_failure_counts_as_failed_attempt(self, store, clock):
        async def scenario():
            guard = LockGuard(await configured_gate(store), LockoutTracker(clock=clock))
            store.fail = True
            outcome = await guard.attempt("4321")
            return outcome, guard.tracker.failed_attempts

        assert asyncio.run(scenario()) == (VerifyOutcome.DENIED, 1)

    def test_concurrent_attempts_stop_at_lockout(self, clock):
        """A burst of submits cannot push past the attempt limit."""
        class YieldingStore(MemoryKeyValueStore):
            reads = 0

            async def get(self, key):
                self.reads += 1
                await asyncio.sleep(0)
                return await super().get(key)

        store = YieldingStore()

        async def scenario():
            guard = LockGuard(await configured_gate(store), LockoutTracker(clock=clock))
            reads_before = store.reads
            outcomes = await asyncio.gather(*(guard.attempt("0000") for _ in range(8)))
            return outcomes, store.reads - reads_before, guard

        outcomes, reads, guard = asyncio.run(scenario())
        assert outcomes == [VerifyOutcome.DENIED] * 5 + [VerifyOutcome.LOCKED] * 3
        assert reads == 5
        assert guard.tracker.failed_attempts == 5
        assert guard.tracker.attempts_remaining == 0

    def test_denial_keeps_gate_error(self, store, clock):
        async def scenario():
            guard = LockGuard(await configured_gate(store), LockoutTracker(clock=clock))
            store.fail = True
            await guard.attempt("4321")
            return guard.last_error

        assert isinstance(asyncio.run(scenario()), StoreFailureError)
