"""App lifecycle: explicit start-up and the launch gate decision."""

import logging
from typing import Any, Callable, Optional

from pingate.config import build_store, get_log_level
from pingate.exceptions import ValidationError
from pingate.pin_gate import PinGate
from pingate.preferences import FilterPreferenceStore
from pingate.remote import RemoteDataClient
from pingate.session import SessionStore
from pingate.store import KeyValueStore
from pingate import response

from handlers.lock_screen import LockScreen
from handlers.pin_settings import PinSettings

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class AppLifecycle:
    """
    Start-up work happens in initialize(), never at import time.

    After initialize() the caller shows lock_screen() when the response
    data says requires_unlock, and the main UI otherwise.
    """

    def __init__(self, store: Optional[KeyValueStore] = None):
        self._store = store
        self.gate: Optional[PinGate] = None
        self.initialized = False

    async def initialize(self) -> dict[str, Any]:
        logging.getLogger("pingate").setLevel(get_log_level())

        if self.gate is None:
            try:
                store = self._store or build_store()
            except ValidationError as e:
                logger.error(f"Invalid store configuration: {e}")
                return response.error_response(str(e), "invalid_config")
            self.gate = PinGate(store)

        status = await self.gate.initialize()
        self.initialized = True
        logger.info(f"App initialized: requires_unlock={status.enabled}")

        return response.ok(data={"requires_unlock": status.enabled, **status.to_dict()})

    def _require_store(self) -> KeyValueStore:
        return self._require_gate().store

    def _require_gate(self) -> PinGate:
        if self.gate is None:
            raise RuntimeError("AppLifecycle.initialize() has not been called")
        return self.gate

    def lock_screen(self, on_unlock: Optional[Callable[[], None]] = None) -> LockScreen:
        """Fresh lock screen, with a failure counter starting at zero."""
        return LockScreen(self._require_gate(), on_unlock=on_unlock)

    def pin_settings(self) -> PinSettings:
        return PinSettings(self._require_gate())

    def session(self) -> SessionStore:
        return SessionStore(self._require_store())

    def filter_preferences(self, domain: str) -> FilterPreferenceStore:
        return FilterPreferenceStore(self._require_store(), domain)

    def remote_client(self) -> RemoteDataClient:
        return RemoteDataClient()
