from __future__ import annotations

from typing import Optional

from sqlalchemy import select

from carwash_api.db.models.company import CompanyConfig, DnitConfig
from .base import BaseRepository


class CompanyRepository(BaseRepository):
    """Single-row fiscal and DNIT configuration."""

    async def get_company_config(self) -> Optional[CompanyConfig]:
        stmt = select(CompanyConfig).order_by(CompanyConfig.created_at).limit(1)
        return await self.scalar_one_or_none(stmt)

    async def get_dnit_config(self) -> Optional[DnitConfig]:
        stmt = select(DnitConfig).order_by(DnitConfig.created_at).limit(1)
        return await self.scalar_one_or_none(stmt)
