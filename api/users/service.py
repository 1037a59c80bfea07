"""
Per-user preferences: university, home location, pickup route, profile.
"""

from __future__ import annotations

from datetime import datetime, timezone

from auth.schemas import Identity
from core.keys import UserRecord
from core.kv_store import KVStore
from core.supabase import SupabaseAuth

from . import repository, schemas


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _saved(thing: str) -> dict:
    return {"success": True, "message": f"{thing} saved successfully"}


async def save_university(
    store: KVStore,
    identity: Identity,
    payload: schemas.SaveUniversityRequest,
) -> dict:
    await repository.save_record(store, identity.id, UserRecord.UNIVERSITY, payload.university_id)
    return _saved("University")


async def save_location(
    store: KVStore,
    identity: Identity,
    payload: schemas.SaveLocationRequest,
) -> dict:
    await repository.save_record(
        store,
        identity.id,
        UserRecord.LOCATION,
        {
            "latitude": payload.latitude,
            "longitude": payload.longitude,
            "address": payload.address or None,
            "updated_at": _utc_now_iso(),
        },
    )
    return _saved("Location")


async def save_pickup_route(
    store: KVStore,
    identity: Identity,
    payload: schemas.SavePickupRouteRequest,
) -> dict:
    await repository.save_record(
        store,
        identity.id,
        UserRecord.PICKUP_ROUTE,
        {
            "bus_id": payload.bus_id,
            "pickup_latitude": payload.pickup_latitude,
            "pickup_longitude": payload.pickup_longitude,
            "created_at": _utc_now_iso(),
        },
    )
    return _saved("Pickup route")


async def get_pickup_route(store: KVStore, identity: Identity) -> dict:
    route = await repository.get_record(store, identity.id, UserRecord.PICKUP_ROUTE)
    return {"pickup_route": route}


async def get_profile(store: KVStore, provider: SupabaseAuth, identity: Identity) -> dict:
    """
    Identity fields come from the provider, preferences from the store.
    Preferences the user never saved are null.
    """
    user = await provider.get_user_by_id(identity.id)
    metadata = user.get("user_metadata") or {}

    records = await repository.get_records(
        store,
        identity.id,
        [UserRecord.UNIVERSITY, UserRecord.LOCATION],
    )
    return {
        "user": {
            "id": identity.id,
            "email": identity.email,
            "name": metadata.get("name"),
            "role": metadata.get("role"),
        },
        "university": records[UserRecord.UNIVERSITY],
        "location": records[UserRecord.LOCATION],
    }
