"""
Per-user preference endpoints. All routes require a bearer token.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from auth.schemas import Identity
from core.dependencies import get_identity_provider, get_kv_store
from core.kv_store import KVStore
from core.supabase import SupabaseAuth

from . import schemas, service

router = APIRouter()


@router.post("/user/university")
async def save_university(
    request: schemas.SaveUniversityRequest,
    current_user: Identity = Depends(auth_dependencies.get_current_identity),
    store: KVStore = Depends(get_kv_store),
) -> dict:
    return await service.save_university(store, current_user, request)


@router.post("/user/location")
async def save_location(
    request: schemas.SaveLocationRequest,
    current_user: Identity = Depends(auth_dependencies.get_current_identity),
    store: KVStore = Depends(get_kv_store),
) -> dict:
    return await service.save_location(store, current_user, request)


@router.get("/user/profile")
async def get_profile(
    current_user: Identity = Depends(auth_dependencies.get_current_identity),
    store: KVStore = Depends(get_kv_store),
    provider: SupabaseAuth = Depends(get_identity_provider),
) -> dict:
    return await service.get_profile(store, provider, current_user)


@router.post("/user/pickup-route")
async def save_pickup_route(
    request: schemas.SavePickupRouteRequest,
    current_user: Identity = Depends(auth_dependencies.get_current_identity),
    store: KVStore = Depends(get_kv_store),
) -> dict:
    return await service.save_pickup_route(store, current_user, request)


@router.get("/user/pickup-route")
async def get_pickup_route(
    current_user: Identity = Depends(auth_dependencies.get_current_identity),
    store: KVStore = Depends(get_kv_store),
) -> dict:
    return await service.get_pickup_route(store, current_user)
