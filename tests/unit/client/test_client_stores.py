"""Tests for the remembered user and the stored admin session."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from bidsmart.client.admin import ADMIN_SESSION_KEY, AdminSessionStore
from bidsmart.client.storage import LocalStorage
from bidsmart.client.user import DEFAULT_EMAIL, DEFAULT_NAME, USER_STORAGE_KEY, StoredUser, UserStore
from bidsmart.core.exceptions import APIClientError

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "store.json")


class TestUserStore:

    def test_demo_user_when_nothing_stored(self, storage):
        user = UserStore(storage).resolve()

        assert user == StoredUser(email=DEFAULT_EMAIL, name=DEFAULT_NAME)
        assert storage.get_json(USER_STORAGE_KEY) == {"email": DEFAULT_EMAIL, "name": DEFAULT_NAME}

    def test_explicit_email_replaces_stored_user(self, storage):
        store = UserStore(storage)
        store.resolve()

        user = store.resolve(email="pat@example.com")

        assert user == StoredUser(email="pat@example.com", name="pat")
        assert UserStore(storage).resolve() == user

    def test_stored_user_is_reused(self, storage):
        storage.set_json(USER_STORAGE_KEY, {"email": "sam@example.com", "name": "Sam"})

        assert UserStore(storage).resolve() == StoredUser(email="sam@example.com", name="Sam")

    def test_malformed_entry_falls_back_to_demo(self, storage):
        storage.set_item(USER_STORAGE_KEY, '["not", "a", "user"]')

        assert UserStore(storage).resolve().email == DEFAULT_EMAIL

    def test_unwritable_storage(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")
        store = UserStore(LocalStorage(blocker / "store.json"))

        assert store.resolve(email="pat@example.com").email == "pat@example.com"
        assert store.get() is None


class TestAdminSessionStore:

    def _store(self, storage):
        return AdminSessionStore(storage, now=lambda: NOW)

    def test_stored_session(self, storage):
        store = self._store(storage)
        store.save("tok", (NOW + timedelta(hours=1)).isoformat(), {"email": "ops@theswitchison.org"})

        assert store.get() == {"email": "ops@theswitchison.org", "session_token": "tok"}

    def test_expired_session_is_removed(self, storage):
        store = self._store(storage)
        store.save("tok", (NOW - timedelta(seconds=1)).isoformat(), {"email": "ops@theswitchison.org"})

        assert store.get() is None
        assert storage.get_item(ADMIN_SESSION_KEY) is None

    def test_zulu_timestamp(self, storage):
        store = self._store(storage)
        store.save("tok", "2026-10-19T13:00:00Z", {})

        assert store.get() == {"session_token": "tok"}

    def test_unreadable_session_is_removed(self, storage):
        storage.set_json(ADMIN_SESSION_KEY, {"token": "tok", "expires_at": "tomorrow"})

        assert self._store(storage).get() is None
        assert storage.get_item(ADMIN_SESSION_KEY) is None

    def test_clear(self, storage):
        store = self._store(storage)
        store.save("tok", (NOW + timedelta(hours=1)).isoformat(), {})

        store.clear()

        assert store.get() is None

    async def test_login_stores_session(self, storage):
        api = MagicMock()
        api.admin_login = AsyncMock(return_value={
            "session_token": "tok",
            "expires_at": (NOW + timedelta(hours=24)).isoformat(),
            "admin": {"id": "a-1", "email": "ops@theswitchison.org", "name": "Ops", "is_super_admin": True},
        })
        store = self._store(storage)

        admin = await store.login(api, "ops@theswitchison.org", "hunter2")

        assert admin["session_token"] == "tok"
        assert store.get()["email"] == "ops@theswitchison.org"
        assert storage.get_json(ADMIN_SESSION_KEY)["token"] == "tok"

    async def test_rejected_login_stores_nothing(self, storage):
        api = MagicMock()
        api.admin_login = AsyncMock(side_effect=APIClientError("401: Invalid email or password"))
        store = self._store(storage)

        with pytest.raises(APIClientError):
            await store.login(api, "ops@theswitchison.org", "wrong")

        assert storage.get_item(ADMIN_SESSION_KEY) is None
