"""
Gahoi Sathi - Auth API

Registration, login and logout.  Login returns an opaque bearer token
that every other endpoint expects in the ``Authorization`` header.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_auth_service, get_bearer_token
from app.database import get_db
from app.schemas.auth import AuthResponse, LoginRequest, LogoutResponse
from app.schemas.user import MeResponse, UserCreate

logger = structlog.get_logger("sathi.api.auth")

router = APIRouter()


# ──────────────────────────────────────────────────────────────────────────────
# POST /register - Create an account
# ──────────────────────────────────────────────────────────────────────────────

@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new member",
)
async def register(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    user, token, session = await get_auth_service().register(payload.model_dump(), db)
    return AuthResponse(
        token=token,
        expires_at=session.expires_at,
        user=MeResponse.model_validate(user),
    )


# ──────────────────────────────────────────────────────────────────────────────
# POST /login - Exchange credentials for a session token
# ──────────────────────────────────────────────────────────────────────────────

@router.post("/login", response_model=AuthResponse, summary="Log in")
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
) -> AuthResponse:
    user, token, session = await get_auth_service().login(
        payload.identifier, payload.password, db
    )
    return AuthResponse(
        token=token,
        expires_at=session.expires_at,
        user=MeResponse.model_validate(user),
    )


# ──────────────────────────────────────────────────────────────────────────────
# POST /logout - End the current session
# ──────────────────────────────────────────────────────────────────────────────

@router.post("/logout", response_model=LogoutResponse, summary="Log out")
async def logout(
    token: str = Depends(get_bearer_token),
    db: AsyncSession = Depends(get_db),
) -> LogoutResponse:
    await get_auth_service().logout(token, db)
    return LogoutResponse(status="logged_out")
