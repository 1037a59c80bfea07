"""
Driver feedback endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from auth import dependencies as auth_dependencies
from auth.schemas import Identity
from core.dependencies import get_kv_store
from core.kv_store import KVStore

from . import schemas, service

router = APIRouter()


@router.post("/feedback")
async def submit_feedback(
    request: schemas.SubmitFeedbackRequest,
    current_user: Identity = Depends(auth_dependencies.get_current_identity),
    store: KVStore = Depends(get_kv_store),
) -> dict:
    return await service.submit_feedback(store, current_user, request)


@router.get("/drivers/{driver_id}/feedback")
async def list_driver_feedback(
    driver_id: str,
    store: KVStore = Depends(get_kv_store),
) -> dict:
    """
    Public: every feedback record for one driver, possibly none.
    """
    return await service.list_driver_feedback(store, driver_id)
