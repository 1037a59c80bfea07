"""
University listing endpoint (public).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from core.dependencies import get_kv_store
from core.kv_store import KVStore

from . import service

router = APIRouter()


@router.get("/universities")
async def list_universities(store: KVStore = Depends(get_kv_store)) -> dict:
    return await service.list_universities(store)
