from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_api.core.deps import ADMIN_ONLY, get_current_active_user, require_roles
from carwash_api.core.security import get_password_hash, verify_password
from carwash_api.db.models.security import User
from carwash_api.db.session import get_async_session
from carwash_api.repositories.security import UserRepository
from carwash_api.schemas.auth import ChangePasswordRequest, UserCreate, UserRead, UserUpdate
from carwash_api.schemas.common import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


async def _get_or_404(repo: UserRepository, user_id: UUID) -> User:
    user = await repo.get_user_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="Usuario no encontrado")
    return user


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[UserRead],
    summary="List users",
    dependencies=[Depends(require_roles(*ADMIN_ONLY))],
)
async def list_users(
    session: AsyncSession = Depends(get_async_session),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[UserRead]:
    users = await UserRepository(session).list_users(limit=limit, offset=offset)
    return [UserRead.model_validate(u) for u in users]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    description="Create an operator account. Usernames are unique.",
    dependencies=[Depends(require_roles(*ADMIN_ONLY))],
)
async def create_user(
    payload: UserCreate,
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    repo = UserRepository(session)
    if await repo.get_user_by_username(payload.username):
        raise HTTPException(status_code=400, detail="El nombre de usuario ya existe")

    data = payload.model_dump(exclude={"password"})
    user = User(**data, hashed_password=get_password_hash(payload.password))
    await repo.add(user)
    await repo.commit()
    logger.info("Created user %s with role %s", user.username, user.role)
    return UserRead.model_validate(user)


# PUBLIC_INTERFACE
@router.get(
    "/{user_id}",
    response_model=UserRead,
    summary="Get user",
    dependencies=[Depends(require_roles(*ADMIN_ONLY))],
)
async def get_user(
    user_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    return UserRead.model_validate(await _get_or_404(UserRepository(session), user_id))


# PUBLIC_INTERFACE
@router.patch(
    "/{user_id}",
    response_model=UserRead,
    summary="Update user",
    description="Partial update. A new password is hashed; a changed username must stay unique.",
    dependencies=[Depends(require_roles(*ADMIN_ONLY))],
)
async def update_user(
    payload: UserUpdate,
    user_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    repo = UserRepository(session)
    user = await _get_or_404(repo, user_id)
    changes = payload.model_dump(exclude_unset=True)

    new_username = changes.get("username")
    if new_username and new_username != user.username:
        if await repo.get_user_by_username(new_username):
            raise HTTPException(status_code=400, detail="El nombre de usuario ya existe")

    password = changes.pop("password", None)
    if password:
        user.hashed_password = get_password_hash(password)
    for key, value in changes.items():
        setattr(user, key, value)
    if changes.get("is_blocked") is False:
        user.failed_login_attempts = 0
    await repo.commit()
    return UserRead.model_validate(user)


# PUBLIC_INTERFACE
@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Delete user",
    description="Delete an account. Administrators cannot delete their own account.",
)
async def delete_user(
    user_id: UUID = Path(...),
    current: User = Depends(require_roles(*ADMIN_ONLY)),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    if user_id == current.id:
        raise HTTPException(status_code=400, detail="No puede eliminar su propia cuenta")
    repo = UserRepository(session)
    user = await _get_or_404(repo, user_id)
    await repo.delete(user)
    await repo.commit()
    logger.info("Deleted user %s", user.username)
    return MessageResponse(message="Usuario eliminado")


# PUBLIC_INTERFACE
@router.post(
    "/{user_id}/change-password",
    response_model=MessageResponse,
    summary="Change password",
    description=(
        "Users may change their own password by providing current_password. "
        "Administrators may change any user's password without it."
    ),
)
async def change_password(
    payload: ChangePasswordRequest,
    user_id: UUID = Path(...),
    current: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    is_admin = current.role == "admin"
    if user_id != current.id and not is_admin:
        raise HTTPException(status_code=403, detail="Insufficient role")

    repo = UserRepository(session)
    user = await _get_or_404(repo, user_id)
    if not is_admin:
        if not payload.current_password or not verify_password(payload.current_password, user.hashed_password):
            raise HTTPException(status_code=400, detail="La contraseña actual es incorrecta")

    user.hashed_password = get_password_hash(payload.new_password)
    await repo.commit()
    return MessageResponse(message="Contraseña actualizada")
