"""PIN gate: local app-lock configuration and verification."""

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, TypeVar

from .constants import DEFAULT_PIN, LEGACY_PIN_ENABLED_KEY, LEGACY_PIN_KEY, PIN_CONFIG_KEY
from .exceptions import NotConfiguredError, PinGateError, StoreFailureError
from .store import KeyValueStore
from .validation import validate_pin

logger = logging.getLogger(__name__)

T = TypeVar("T")

LEGACY_KEYS = (LEGACY_PIN_KEY, LEGACY_PIN_ENABLED_KEY)


@dataclass(frozen=True)
class PinConfiguration:
    """Persisted gate configuration, written as a single store record."""

    enabled: bool = False
    pin: Optional[str] = None

    @property
    def is_set(self) -> bool:
        return self.pin is not None

    def to_json(self) -> str:
        return json.dumps({"enabled": self.enabled, "pin": self.pin})

    @classmethod
    def from_json(cls, raw: str) -> "PinConfiguration":
        """
        Parse a stored record.

        Raises:
            StoreFailureError: If the record is not a valid configuration
        """
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise StoreFailureError("Stored PIN configuration is not valid JSON") from e

        if not isinstance(data, dict):
            raise StoreFailureError("Stored PIN configuration is not an object")

        pin = data.get("pin")
        if pin is not None and not isinstance(pin, str):
            raise StoreFailureError("Stored PIN has an unexpected type")

        return cls(enabled=data.get("enabled") is True, pin=pin)


DISABLED = PinConfiguration(enabled=False, pin=None)


@dataclass(frozen=True)
class PinStatus:
    enabled: bool
    is_set: bool

    @property
    def has_pin(self) -> bool:
        return self.is_set

    def to_dict(self) -> dict[str, bool]:
        return {"enabled": self.enabled, "isSet": self.is_set, "hasPin": self.is_set}


NO_PIN = PinStatus(enabled=False, is_set=False)


class PinGate:
    """
    Owns the PIN configuration in a key-value store.

    Public operations never raise. Failures are logged, kept in
    ``last_error`` and reported as False (or NO_PIN for status reads).
    Operations run one at a time behind an asyncio lock so concurrent
    submits cannot interleave their store writes.
    """

    def __init__(self, store: KeyValueStore, config_key: str = PIN_CONFIG_KEY):
        self.store = store
        self.config_key = config_key
        self.last_error: Optional[PinGateError] = None
        self._lock = asyncio.Lock()
        self._reset_listeners: list[Callable[[], None]] = []

    def add_reset_listener(self, callback: Callable[[], None]) -> None:
        """Register a callback fired after clear_all succeeds."""
        if callback not in self._reset_listeners:
            self._reset_listeners.append(callback)

    def remove_reset_listener(self, callback: Callable[[], None]) -> None:
        if callback in self._reset_listeners:
            self._reset_listeners.remove(callback)

    async def _load(self) -> PinConfiguration:
        raw = await self.store.get(self.config_key)
        if raw is None:
            return DISABLED
        return PinConfiguration.from_json(raw)

    async def _save(self, config: PinConfiguration) -> None:
        await self.store.set(self.config_key, config.to_json())

    async def _verify(self, pin: Any) -> bool:
        config = await self._load()
        if not config.is_set:
            raise NotConfiguredError("No PIN is configured")
        return pin == config.pin

    async def _run(self, operation: str, action: Callable[[], Awaitable[T]], default: T) -> T:
        async with self._lock:
            self.last_error = None
            try:
                return await action()
            except StoreFailureError as e:
                logger.error(f"{operation} failed: {e}")
                self.last_error = e
            except PinGateError as e:
                logger.warning(f"{operation} rejected: {e}")
                self.last_error = e
            except Exception as e:
                logger.exception(f"Unexpected error in {operation}")
                self.last_error = StoreFailureError(str(e))
        return default

    async def get_status(self) -> PinStatus:
        """
        Read gate status.

        A missing PIN wins over a stale enabled flag. Read errors report
        NO_PIN rather than locking the user out.
        """
        async def action() -> PinStatus:
            config = await self._load()
            return PinStatus(enabled=config.enabled and config.is_set, is_set=config.is_set)

        return await self._run("get_status", action, NO_PIN)

    async def set_pin(self, pin: str) -> bool:
        """Validate and store pin, enabling the gate."""
        async def action() -> bool:
            validate_pin(pin)
            await self._save(PinConfiguration(enabled=True, pin=pin))
            logger.info("PIN set, protection enabled")
            return True

        return await self._run("set_pin", action, False)

    async def verify(self, pin: str) -> bool:
        """Exact, case-sensitive comparison against the stored PIN."""
        async def action() -> bool:
            matched = await self._verify(pin)
            if not matched:
                logger.info("PIN verification failed")
            return matched

        return await self._run("verify", action, False)

    async def change_pin(self, current_pin: str, new_pin: str) -> bool:
        """Replace the PIN if current_pin verifies. Storage is untouched otherwise."""
        async def action() -> bool:
            if not await self._verify(current_pin):
                logger.info("PIN change refused: current PIN incorrect")
                return False
            validate_pin(new_pin)
            await self._save(PinConfiguration(enabled=True, pin=new_pin))
            logger.info("PIN changed")
            return True

        return await self._run("change_pin", action, False)

    async def enable(self) -> bool:
        async def action() -> bool:
            config = await self._load()
            if not config.is_set:
                raise NotConfiguredError("Set a PIN before enabling protection")
            await self._save(PinConfiguration(enabled=True, pin=config.pin))
            logger.info("PIN protection enabled")
            return True

        return await self._run("enable", action, False)

    async def disable(self) -> bool:
        """Turn the gate off. The stored PIN is deleted with it."""
        async def action() -> bool:
            await self._save(DISABLED)
            logger.info("PIN protection disabled, PIN removed")
            return True

        return await self._run("disable", action, False)

    async def reset_to_default(self) -> bool:
        """Recovery path: force the PIN to DEFAULT_PIN and enable the gate."""
        async def action() -> bool:
            await self._save(PinConfiguration(enabled=True, pin=DEFAULT_PIN))
            logger.warning("PIN reset to default")
            return True

        return await self._run("reset_to_default", action, False)

    async def clear_all(self) -> bool:
        """Remove every PIN key, returning the gate to the unconfigured state."""
        async def action() -> bool:
            await self.store.multi_remove([self.config_key, *LEGACY_KEYS])
            logger.warning(json.dumps({"action": "pin_data_cleared", "key": self.config_key}))
            return True

        cleared = await self._run("clear_all", action, False)
        if cleared:
            self._notify_reset()
        return cleared

    def _notify_reset(self) -> None:
        for callback in list(self._reset_listeners):
            try:
                callback()
            except Exception:
                logger.exception("Reset listener failed")

    async def initialize(self) -> PinStatus:
        """
        Bring stored state into a consistent shape at app launch.

        - fresh install: write a disabled configuration
        - legacy two-key layout: migrate when the pin is present and
          enabled is "true", otherwise clear it
        - enabled record without a pin, or an unreadable record: reset
          to disabled
        """
        async def action() -> PinStatus:
            raw = await self.store.get(self.config_key)
            legacy_pin = await self.store.get(LEGACY_PIN_KEY)
            legacy_enabled = await self.store.get(LEGACY_PIN_ENABLED_KEY)
            has_legacy = legacy_pin is not None or legacy_enabled is not None

            if raw is None and has_legacy:
                if legacy_pin and legacy_enabled == "true":
                    logger.info("Migrating legacy PIN keys into a single record")
                    config = PinConfiguration(enabled=True, pin=legacy_pin)
                else:
                    logger.warning("Inconsistent legacy PIN state detected, clearing PIN data")
                    config = DISABLED
                await self._save(config)
            elif raw is None:
                logger.info("Fresh installation detected, PIN protection disabled")
                config = DISABLED
                await self._save(config)
            else:
                try:
                    config = PinConfiguration.from_json(raw)
                except StoreFailureError as e:
                    logger.warning(f"Discarding unreadable PIN configuration: {e}")
                    config = DISABLED
                    await self._save(config)
                if config.enabled and not config.is_set:
                    logger.warning("PIN enabled without a stored PIN, disabling")
                    config = DISABLED
                    await self._save(config)

            if has_legacy:
                await self.store.multi_remove(LEGACY_KEYS)

            return PinStatus(enabled=config.enabled and config.is_set, is_set=config.is_set)

        return await self._run("initialize", action, NO_PIN)
