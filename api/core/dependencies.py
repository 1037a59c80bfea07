"""
FastAPI dependencies for the shared collaborators.

The app lifespan stores the record store and the identity provider client on
`app.state`; routes receive them through these functions so tests can swap
in fakes with `app.dependency_overrides`.
"""

from __future__ import annotations

from fastapi import Request

from .kv_store import KVStore
from .supabase import SupabaseAuth


def get_kv_store(request: Request) -> KVStore:
    store = getattr(request.app.state, "kv_store", None)
    if store is None:
        raise RuntimeError("KV store is not initialized. Check the app lifespan.")
    return store


def get_identity_provider(request: Request) -> SupabaseAuth:
    provider = getattr(request.app.state, "identity_provider", None)
    if provider is None:
        raise RuntimeError("Identity provider is not initialized. Check the app lifespan.")
    return provider
