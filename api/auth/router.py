"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from core.dependencies import get_identity_provider
from core.supabase import SupabaseAuth

from . import schemas, service

router = APIRouter()


@router.post("/auth/signup")
async def signup(
    request: schemas.SignupRequest,
    provider: SupabaseAuth = Depends(get_identity_provider),
) -> dict:
    """
    Create an account. Does not log the caller in.
    """
    result = await service.signup(provider, request)
    return result.model_dump()
