"""Unit tests for the cached sign-in session - NO MOCKS."""

import asyncio
import json
from datetime import datetime, timezone

import pytest
from pingate.exceptions import StoreFailureError
from pingate.session import SessionStore
from pingate.store import MemoryKeyValueStore

SIGNED_IN_AT = datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)


def run(coro):
    return asyncio.run(coro)


class TestStoreAuthResponse:
    def test_full_response(self, store):
        session = SessionStore(store)
        auth = {
            "user": {"id": "u-42", "email": "sam@example.com", "name": "Sam"},
            "accessToken": "access-1",
            "refreshToken": "refresh-1",
        }

        run(session.store_auth_response(auth, now=SIGNED_IN_AT))

        saved = store.snapshot()
        assert saved["user_id"] == "u-42"
        assert saved["auth_token"] == "access-1"
        assert saved["refresh_token"] == "refresh-1"
        assert json.loads(saved["user_data"])["name"] == "Sam"
        assert json.loads(saved["email_verification_status"]) == {
            "isVerified": True,
            "email": "sam@example.com",
            "userId": "u-42",
            "verifiedAt": "2025-03-01T09:30:00+00:00",
        }

    def test_user_id_field_and_plain_token(self, store):
        session = SessionStore(store)
        run(session.store_auth_response({"userId": 17, "token": "tok", "email": "x@y.io"}))

        assert run(session.get_user_id()) == "17"
        assert run(session.get_auth_token()) == "tok"
        assert run(session.get_refresh_token()) is None
        assert run(session.get_user_data()) is None

    def test_access_token_wins_over_token(self, store):
        session = SessionStore(store)
        run(session.store_auth_response({"token": "plain", "accessToken": "access"}))

        assert run(session.get_auth_token()) == "access"

    def test_write_failure_raises(self, store):
        store.fail = True
        with pytest.raises(StoreFailureError):
            run(SessionStore(store).store_auth_response({"userId": "u-1"}))


class TestReads:
    def test_signed_out(self, store):
        session = SessionStore(store)

        assert run(session.get_user_id()) is None
        assert run(session.is_verified()) is False
        assert run(session.get_verification_status()) is None

    def test_user_id_from_verification_status(self):
        status = json.dumps({"isVerified": True, "email": "a@b.co", "userId": "u-9"})
        session = SessionStore(MemoryKeyValueStore({"email_verification_status": status}))

        assert run(session.get_user_id()) == "u-9"
        assert run(session.is_verified()) is True

    def test_unreadable_status_ignored(self):
        session = SessionStore(MemoryKeyValueStore({"email_verification_status": "{oops"}))

        assert run(session.get_verification_status()) is None
        assert run(session.is_verified()) is False

    def test_read_failure_looks_signed_out(self, store):
        session = SessionStore(store)
        run(session.store_auth_response({"userId": "u-1"}))
        store.fail = True

        assert run(session.get_user_id()) is None
        assert run(session.is_verified()) is False


class TestClear:
    def test_removes_every_session_key(self, store):
        session = SessionStore(store)
        run(store.set("@pin_config", '{"enabled": false, "pin": null}'))
        run(session.store_auth_response(
            {"user": {"id": "u-1"}, "accessToken": "a", "refreshToken": "r"}
        ))

        run(session.clear())

        assert store.snapshot() == {"@pin_config": '{"enabled": false, "pin": null}'}
        assert run(session.get_user_id()) is None
