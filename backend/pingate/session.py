"""Signed-in session cached in the local key-value store."""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from .constants import (
    AUTH_TOKEN_KEY,
    EMAIL_VERIFICATION_KEY,
    REFRESH_TOKEN_KEY,
    SESSION_KEYS,
    USER_DATA_KEY,
    USER_ID_KEY,
)
from .exceptions import StoreFailureError
from .store import KeyValueStore

logger = logging.getLogger(__name__)


class SessionStore:
    """
    User id, profile and tokens from the sign-in response.

    Writes raise StoreFailureError. Reads log the failure and return None,
    so a broken store looks like a signed-out user.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def _read(self, key: str) -> Optional[str]:
        try:
            return await self.store.get(key)
        except StoreFailureError as e:
            logger.error(f"Failed to read {key}: {e}")
            return None

    async def _read_json(self, key: str) -> Optional[dict[str, Any]]:
        raw = await self._read(key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning(f"Ignoring unreadable {key}")
            return None
        return data if isinstance(data, dict) else None

    async def store_auth_response(self, auth: dict[str, Any], now: Optional[datetime] = None) -> None:
        """
        Persist a successful verification response.

        The user id is taken from ``user.id`` or ``userId``. An access
        token wins over a plain token when both are present.

        Raises:
            StoreFailureError: If a write fails
        """
        user = auth.get("user") if isinstance(auth.get("user"), dict) else None
        user_id = (user or {}).get("id") or auth.get("userId")

        if user:
            await self.store.set(USER_DATA_KEY, json.dumps(user))
        if user_id:
            await self.store.set(USER_ID_KEY, str(user_id))

        token = auth.get("accessToken") or auth.get("token")
        if token:
            await self.store.set(AUTH_TOKEN_KEY, token)
        if auth.get("refreshToken"):
            await self.store.set(REFRESH_TOKEN_KEY, auth["refreshToken"])

        verified_at = (now or datetime.now(timezone.utc)).isoformat()
        status = {"isVerified": True, "email": auth.get("email") or (user or {}).get("email")}
        if user_id:
            status["userId"] = str(user_id)
        status["verifiedAt"] = verified_at
        await self.store.set(EMAIL_VERIFICATION_KEY, json.dumps(status))

        logger.info(json.dumps({"action": "session_stored", "has_user_id": bool(user_id)}))

    async def get_verification_status(self) -> Optional[dict[str, Any]]:
        return await self._read_json(EMAIL_VERIFICATION_KEY)

    async def is_verified(self) -> bool:
        status = await self.get_verification_status()
        return bool(status and status.get("isVerified") is True)

    async def get_user_data(self) -> Optional[dict[str, Any]]:
        return await self._read_json(USER_DATA_KEY)

    async def get_user_id(self) -> Optional[str]:
        """Stored user id, falling back to the one kept with the verification status."""
        user_id = await self._read(USER_ID_KEY)
        if user_id:
            return user_id
        status = await self.get_verification_status()
        if status and status.get("userId"):
            return str(status["userId"])
        return None

    async def get_auth_token(self) -> Optional[str]:
        return await self._read(AUTH_TOKEN_KEY)

    async def get_refresh_token(self) -> Optional[str]:
        return await self._read(REFRESH_TOKEN_KEY)

    async def clear(self) -> None:
        """
        Sign out by removing every session key.

        Raises:
            StoreFailureError: If the store cannot remove the keys
        """
        await self.store.multi_remove(SESSION_KEYS)
        logger.info("Session cleared")
