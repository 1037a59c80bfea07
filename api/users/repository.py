"""
Per-user record persistence.

Each (user, kind) pair maps to exactly one key, built from the caller's
verified id, so a user can only ever address their own records.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from core import keys
from core.kv_store import MISSING, KVStore


async def save_record(store: KVStore, user_id: str, kind: keys.UserRecord, value: Any) -> None:
    await store.set(keys.user_key(user_id, kind), value)


async def get_record(store: KVStore, user_id: str, kind: keys.UserRecord) -> Any | None:
    value = await store.get(keys.user_key(user_id, kind))
    return None if value is MISSING else value


async def get_records(
    store: KVStore,
    user_id: str,
    kinds: Iterable[keys.UserRecord],
) -> dict[keys.UserRecord, Any | None]:
    by_key = {keys.user_key(user_id, kind): kind for kind in kinds}
    found = await store.get_many(by_key)
    return {kind: found.get(key) for key, kind in by_key.items()}
