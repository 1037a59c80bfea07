"""
Environment-driven settings.

Values are read lazily on each call so tests can monkeypatch the environment.
"""

from __future__ import annotations

import os
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

DEFAULT_API_PREFIX = "/make-server-8828d0dd"
DEFAULT_KV_TABLE = "kv_store_8828d0dd"


def _env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw in {"1", "true", "yes", "on"}


def api_prefix() -> str:
    prefix = _env_str("API_PREFIX", DEFAULT_API_PREFIX).rstrip("/")
    if prefix and not prefix.startswith("/"):
        prefix = "/" + prefix
    return prefix


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()


def _sanitize_database_url(url: str) -> str:
    # asyncpg rejects libpq-only options such as sslmode.
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = [(k, v) for (k, v) in parse_qsl(parts.query, keep_blank_values=True) if k != "sslmode"]
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(params), parts.fragment))


def database_url() -> str:
    url = _env_str("DATABASE_URL")
    if not url:
        raise RuntimeError("DATABASE_URL is not set.")
    return _sanitize_database_url(url)


def kv_backend() -> str:
    return _env_str("KV_BACKEND", "postgres").lower()


def kv_table() -> str:
    return _env_str("KV_TABLE", DEFAULT_KV_TABLE)


def kv_auto_create() -> bool:
    return _env_bool("KV_AUTO_CREATE", True)


def supabase_url() -> str:
    url = _env_str("SUPABASE_URL")
    if not url:
        raise RuntimeError("SUPABASE_URL is not set.")
    return url.rstrip("/")


def supabase_service_key() -> str:
    key = _env_str("SUPABASE_SERVICE_ROLE_KEY")
    if not key:
        raise RuntimeError("SUPABASE_SERVICE_ROLE_KEY is not set.")
    return key


def supabase_timeout_s() -> float:
    return _env_float("SUPABASE_TIMEOUT_S", 10.0)
