"""
Shared fixtures: an in-memory record store and a fake Supabase Auth provider,
injected into the app through dependency overrides.
"""

from __future__ import annotations

import itertools
from typing import Any

import pytest
from fastapi.testclient import TestClient

import main
from core.dependencies import get_identity_provider, get_kv_store
from core.kv_store import MemoryKVStore
from core.supabase import SupabaseError

PREFIX = main.prefix


class FakeIdentityProvider:
    """Mimics the subset of SupabaseAuth the handlers use."""

    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.tokens: dict[str, str] = {}
        self.calls: list[str] = []
        self.create_error: SupabaseError | None = None
        self._ids = itertools.count(1)

    def add_user(self, *, email: str, token: str | None = None, **metadata: Any) -> dict[str, Any]:
        user_id = f"00000000-0000-0000-0000-{next(self._ids):012d}"
        user = {"id": user_id, "email": email, "user_metadata": dict(metadata)}
        self.users[user_id] = user
        if token:
            self.tokens[token] = user_id
        return user

    async def get_user(self, access_token: str) -> dict[str, Any]:
        self.calls.append("get_user")
        user_id = self.tokens.get(access_token)
        if user_id is None:
            raise SupabaseError("invalid JWT", status_code=401)
        return self.users[user_id]

    async def list_users(self, *, per_page: int = 1000) -> list[dict[str, Any]]:
        self.calls.append("list_users")
        return list(self.users.values())

    async def create_user(
        self,
        *,
        email: str,
        password: str,
        user_metadata: dict[str, Any] | None = None,
        email_confirm: bool = True,
    ) -> dict[str, Any]:
        self.calls.append("create_user")
        if self.create_error is not None:
            raise self.create_error
        return self.add_user(email=email, **(user_metadata or {}))

    async def get_user_by_id(self, user_id: str) -> dict[str, Any]:
        self.calls.append("get_user_by_id")
        if user_id not in self.users:
            raise SupabaseError("User not found", status_code=404)
        return self.users[user_id]

    async def aclose(self) -> None:
        return None


@pytest.fixture
def store() -> MemoryKVStore:
    return MemoryKVStore()


@pytest.fixture
def provider() -> FakeIdentityProvider:
    return FakeIdentityProvider()


@pytest.fixture
def client(store: MemoryKVStore, provider: FakeIdentityProvider):
    main.app.dependency_overrides[get_kv_store] = lambda: store
    main.app.dependency_overrides[get_identity_provider] = lambda: provider
    try:
        yield TestClient(main.app)
    finally:
        main.app.dependency_overrides.clear()


@pytest.fixture
def rider(provider: FakeIdentityProvider) -> dict[str, Any]:
    return provider.add_user(email="rider@example.edu", token="rider-token", name="Asha", role="student")


@pytest.fixture
def auth_headers(rider: dict[str, Any]) -> dict[str, str]:
    return {"Authorization": "Bearer rider-token"}
