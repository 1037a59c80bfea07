"""
Feedback persistence. Records are append-only: one key per submission.
"""

from __future__ import annotations

from typing import Any

from core import keys
from core.kv_store import KVStore


async def insert_feedback(
    store: KVStore,
    *,
    driver_id: str,
    author_id: str,
    created_ms: int,
    record: dict[str, Any],
) -> str:
    key = keys.feedback_key(driver_id, created_ms, author_id)
    await store.set(key, record)
    return key


async def list_feedback_for_driver(store: KVStore, driver_id: str) -> list[Any]:
    return await store.scan(keys.feedback_prefix(driver_id))
