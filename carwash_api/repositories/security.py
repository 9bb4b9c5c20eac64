from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select

from carwash_api.db.models.security import User
from .base import BaseRepository


class UserRepository(BaseRepository):
    """Repository for operator accounts."""

    async def get_user_by_username(self, username: str) -> Optional[User]:
        stmt = select(User).where(User.username == username)
        return await self.scalar_one_or_none(stmt)

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        return await self.scalar_one_or_none(stmt)

    async def count_users(self) -> int:
        stmt = select(func.count(User.id))
        result = await self.execute(stmt)
        return int(result.scalar_one())

    async def list_users(self, limit: int = 100, offset: int = 0) -> List[User]:
        stmt = select(User).order_by(User.created_at.desc()).offset(offset).limit(limit)
        result = await self.scalars(stmt)
        return list(result)

    async def list_all_users(self) -> List[User]:
        result = await self.scalars(select(User).order_by(User.username))
        return list(result)
