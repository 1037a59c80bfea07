"""
Key-value record store.

Values are arbitrary JSON documents addressed by an opaque string key. The
store has no notion of namespaces or schemas; key discipline lives in
`core/keys.py`.

Operations:
- set(key, value)     overwrite, last writer wins
- get(key)            value, or MISSING when the key was never written
- get_many(keys)      {key: value} for the keys that exist
- scan(prefix)        values of every key starting with `prefix` (unordered)
- delete(key)         True when a row was removed

Backends:
- PostgresKVStore: one `key TEXT PRIMARY KEY, value JSONB` table via asyncpg
- MemoryKVStore: process-local dict, for development and tests

Backend failures are raised as StorageError. Nothing is retried here.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from typing import Any, Protocol

import asyncpg

logger = logging.getLogger(__name__)

_TABLE_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")


class StorageError(RuntimeError):
    pass


class _Missing:
    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


# Returned by get() for keys that were never written. A stored JSON null is None.
MISSING: Any = _Missing()


class KVStore(Protocol):
    async def set(self, key: str, value: Any) -> None: ...

    async def get(self, key: str) -> Any: ...

    async def get_many(self, keys: Iterable[str]) -> dict[str, Any]: ...

    async def scan(self, prefix: str) -> list[Any]: ...

    async def delete(self, key: str) -> bool: ...

    async def close(self) -> None: ...


def encode_value(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=True, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise StorageError(f"Value is not JSON-serializable: {exc}") from exc


def decode_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise StorageError(f"Stored value is not valid JSON: {exc}") from exc


def escape_like(prefix: str) -> str:
    """
    Escape LIKE wildcards so a prefix is matched literally (ESCAPE '\\').
    """
    return prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def validate_table_name(name: str) -> str:
    if not _TABLE_NAME_RE.match(name or ""):
        raise ValueError(f"Invalid KV table name: {name!r}")
    return name


@contextmanager
def _backend_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as exc:
        logger.error("kv_backend_error operation=%s error=%s", operation, exc)
        raise StorageError(f"KV {operation} failed.") from exc


class PostgresKVStore:
    """
    Store backed by one `key TEXT PRIMARY KEY, value JSONB` table. Owns its
    asyncpg pool: build it with `connect()` on startup and `close()` it on
    shutdown. asyncpg returns JSONB columns as text, decoded here.
    """

    def __init__(self, pool: asyncpg.Pool, table: str) -> None:
        self.table = validate_table_name(table)
        self._pool = pool

    @classmethod
    async def connect(
        cls,
        dsn: str,
        table: str,
        *,
        min_size: int = 1,
        max_size: int = 5,
        command_timeout: float = 30,
    ) -> PostgresKVStore:
        validate_table_name(table)
        with _backend_errors("connect"):
            pool = await asyncpg.create_pool(
                dsn=dsn,
                min_size=min_size,
                max_size=max_size,
                command_timeout=command_timeout,
            )
        return cls(pool, table)

    async def close(self) -> None:
        await self._pool.close()

    async def ensure_table(self) -> None:
        with _backend_errors("ensure_table"):
            await self._pool.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    key TEXT NOT NULL PRIMARY KEY,
                    value JSONB NOT NULL
                )
                """
            )

    async def set(self, key: str, value: Any) -> None:
        payload = encode_value(value)
        with _backend_errors("set"):
            await self._pool.execute(
                f"""
                INSERT INTO {self.table} (key, value)
                VALUES ($1, $2::jsonb)
                ON CONFLICT (key) DO UPDATE
                SET value = EXCLUDED.value
                """,
                key,
                payload,
            )

    async def get(self, key: str) -> Any:
        with _backend_errors("get"):
            raw = await self._pool.fetchval(
                f"""
                SELECT value
                FROM {self.table}
                WHERE key = $1
                """,
                key,
            )
        # The column is NOT NULL, so None only means "no row"; JSON null comes back as 'null'.
        if raw is None:
            return MISSING
        return decode_value(raw)

    async def get_many(self, keys: Iterable[str]) -> dict[str, Any]:
        wanted = list(dict.fromkeys(keys))
        if not wanted:
            return {}
        with _backend_errors("get_many"):
            rows = await self._pool.fetch(
                f"""
                SELECT key, value
                FROM {self.table}
                WHERE key = ANY($1::text[])
                """,
                wanted,
            )
        return {str(row["key"]): decode_value(row["value"]) for row in rows}

    async def scan(self, prefix: str) -> list[Any]:
        with _backend_errors("scan"):
            rows = await self._pool.fetch(
                f"""
                SELECT key, value
                FROM {self.table}
                WHERE key LIKE $1 || '%' ESCAPE '\\'
                ORDER BY key
                """,
                escape_like(prefix),
            )
        return [decode_value(row["value"]) for row in rows]

    async def delete(self, key: str) -> bool:
        with _backend_errors("delete"):
            status = await self._pool.execute(
                f"""
                DELETE FROM {self.table}
                WHERE key = $1
                """,
                key,
            )
        # asyncpg status tag: "DELETE <count>"
        return str(status).strip() == "DELETE 1"


class MemoryKVStore:
    """
    Process-local store. Values are kept JSON-encoded so callers never share
    mutable state with the store, and unserializable values fail like they
    would against Postgres. No operation awaits between reading and writing
    the dict, so a single event loop needs no lock.
    """

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = encode_value(value)

    async def get(self, key: str) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return MISSING
        return decode_value(raw)

    async def get_many(self, keys: Iterable[str]) -> dict[str, Any]:
        return {key: decode_value(self._data[key]) for key in keys if key in self._data}

    async def scan(self, prefix: str) -> list[Any]:
        return [decode_value(raw) for key, raw in sorted(self._data.items()) if key.startswith(prefix)]

    async def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def close(self) -> None:
        return None

    def __len__(self) -> int:
        return len(self._data)
