from __future__ import annotations

import logging
from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_api.core.deps import get_current_active_user
from carwash_api.core.logging import username_var
from carwash_api.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    verify_password,
)
from carwash_api.db.base import utcnow
from carwash_api.db.models.security import User
from carwash_api.db.session import get_async_session
from carwash_api.repositories.security import UserRepository
from carwash_api.schemas.auth import RefreshRequest, TokenPair, UserRead
from carwash_api.schemas.common import MessageResponse
from carwash_api.services.usage import is_expired, reset_if_new_period

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _issue_tokens(user: User) -> TokenPair:
    access = create_access_token(subject=str(user.id), role=user.role, username=user.username)
    refresh = create_refresh_token(subject=str(user.id))
    return TokenPair(access_token=access, refresh_token=refresh)


def _ensure_can_sign_in(user: User) -> None:
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cuenta inactiva")
    if user.is_blocked:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cuenta bloqueada")
    if is_expired(user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cuenta expirada")


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=TokenPair,
    summary="Login",
    description="Authenticate using OAuth2 password form and receive access/refresh tokens.",
)
async def login_for_tokens(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_async_session),
) -> TokenPair:
    """
    Authenticate a user and issue tokens.

    A wrong password increments failed_login_attempts. A successful login clears
    it, records last_login and resets the monthly usage counter when a new
    usage period has started.
    """
    repo = UserRepository(session)
    user = await repo.get_user_by_username(form_data.username)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Usuario o contraseña incorrectos")
    if not verify_password(form_data.password, user.hashed_password):
        user.failed_login_attempts += 1
        await repo.commit()
        logger.warning("Failed login for %s (%d attempts)", user.username, user.failed_login_attempts)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Usuario o contraseña incorrectos")

    _ensure_can_sign_in(user)

    now = utcnow()
    if reset_if_new_period(user, now):
        logger.info("Monthly usage counter reset for %s", user.username)
    user.last_login = now
    user.failed_login_attempts = 0
    await repo.commit()

    username_var.set(user.username)
    logger.info("User logged in")
    return _issue_tokens(user)


# PUBLIC_INTERFACE
@router.post(
    "/refresh",
    response_model=TokenPair,
    summary="Refresh access token",
    description="Issue a new token pair from a valid refresh token.",
)
async def refresh_token(
    payload: RefreshRequest,
    session: AsyncSession = Depends(get_async_session),
) -> TokenPair:
    """Validate refresh token and issue a new access token pair."""
    try:
        claims: Dict[str, Any] = decode_token(payload.refresh_token)
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    if claims.get("type") != "refresh":
        raise HTTPException(status_code=401, detail="Invalid token type")

    try:
        user_id = UUID(str(claims.get("sub")))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    user = await UserRepository(session).get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    _ensure_can_sign_in(user)
    return _issue_tokens(user)


# PUBLIC_INTERFACE
@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout",
    description="Stateless logout. Clients should discard tokens. No server state maintained.",
)
async def logout(user: User = Depends(get_current_active_user)) -> MessageResponse:
    """Acknowledge logout in stateless JWT systems."""
    logger.info("User logged out")
    return MessageResponse(message="Sesión cerrada")


# PUBLIC_INTERFACE
@router.get(
    "/me",
    response_model=UserRead,
    summary="Read current user",
    description="Return the current authenticated user.",
)
async def read_current_user(user: User = Depends(get_current_active_user)) -> UserRead:
    """Return current user profile."""
    return UserRead.model_validate(user)
