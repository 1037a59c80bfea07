"""
University reference data.

Universities live in the record store under `university:<id>`. Nothing in this
API writes them; until they are provisioned the listing is empty.
"""

from __future__ import annotations

from core import keys
from core.kv_store import KVStore


async def list_universities(store: KVStore) -> dict:
    rows = await store.scan(keys.university_prefix())
    return {"universities": rows}
