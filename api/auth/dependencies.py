"""
Auth dependencies for protected FastAPI routes.
"""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, status

from core.dependencies import get_identity_provider
from core.supabase import SupabaseAuth

from . import schemas, service


async def get_current_identity(
    authorization: str | None = Header(default=None),
    provider: SupabaseAuth = Depends(get_identity_provider),
) -> schemas.Identity:
    identity = await service.verify_authorization(provider, authorization)
    if identity is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=service.UNAUTHORIZED_DETAIL,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return identity
