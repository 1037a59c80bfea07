"""
Auth business logic: bearer-token verification and account signup.

Sessions, passwords, and user records are owned by Supabase Auth; this module
only calls it.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from core.supabase import SupabaseAuth, SupabaseError

from . import schemas

logger = logging.getLogger(__name__)

UNAUTHORIZED_DETAIL = "Unauthorized - Please login with your credentials"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def extract_bearer_token(authorization: str | None) -> str | None:
    """
    Return the token of an `Authorization: Bearer <token>` header, or None when
    the header is absent or malformed.
    """
    raw = (authorization or "").strip()
    parts = raw.split(" ", 1)
    if len(parts) != 2:
        return None

    scheme, token = parts[0].strip().lower(), parts[1].strip()
    if scheme != "bearer" or not token:
        return None
    # Header values arrive latin-1 decoded; real session tokens are ASCII.
    if not token.isascii():
        return None
    return token


async def verify_authorization(
    provider: SupabaseAuth,
    authorization: str | None,
) -> schemas.Identity | None:
    """
    Resolve an Authorization header to the caller's identity.

    Every failure (missing header, bad scheme, expired/revoked/unknown token,
    provider outage) collapses to None; callers only ever see "unauthenticated".
    """
    token = extract_bearer_token(authorization)
    if token is None:
        return None

    try:
        user = await provider.get_user(token)
    except SupabaseError as exc:
        logger.info("token_rejected status=%s", exc.status_code)
        return None

    user_id = str(user.get("id") or "").strip()
    if not user_id:
        return None
    return schemas.Identity(id=user_id, email=str(user.get("email") or ""))


async def email_exists(provider: SupabaseAuth, email: str) -> bool:
    # Linear scan over every identity; the provider offers no lookup by email.
    wanted = normalize_email(email)
    users = await provider.list_users()
    return any(normalize_email(str(u.get("email") or "")) == wanted for u in users)


async def signup(provider: SupabaseAuth, payload: schemas.SignupRequest) -> schemas.SignupResponse:
    email = payload.email.strip()
    if await email_exists(provider, email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="An account with this email already exists",
        )

    try:
        user = await provider.create_user(
            email=email,
            password=payload.password,
            email_confirm=True,
            user_metadata={
                "name": payload.name,
                "role": payload.role,
                "roll_number": payload.roll_number or None,
                "phone_number": payload.phone_number or None,
                "emergency_phone": payload.emergency_phone or None,
            },
        )
    except SupabaseError as exc:
        if not exc.is_client_error:
            raise
        logger.warning("signup_rejected status=%s error=%s", exc.status_code, exc)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc) or "Failed to create account",
        ) from exc

    logger.info("signup_created user_id=%s role=%s", user["id"], payload.role)
    return schemas.SignupResponse(
        user=schemas.SignupUser(
            id=str(user["id"]),
            email=str(user.get("email") or email),
            name=payload.name,
            role=payload.role,
            roll_number=payload.roll_number,
            phone_number=payload.phone_number,
            emergency_phone=payload.emergency_phone,
        ),
    )
