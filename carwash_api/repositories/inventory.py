from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select

from carwash_api.db.models.inventory import InventoryItem
from .base import BaseRepository


class InventoryRepository(BaseRepository):
    """Repository for stock items."""

    async def list_items(self, *, limit: int = 100, offset: int = 0) -> List[InventoryItem]:
        stmt = select(InventoryItem).order_by(InventoryItem.nombre).offset(offset).limit(limit)
        res = await self.scalars(stmt)
        return list(res)

    async def list_alerts(self) -> List[InventoryItem]:
        stmt = (
            select(InventoryItem)
            .where(InventoryItem.estado_alerta.in_(["bajo", "critico"]))
            .order_by(InventoryItem.stock_actual, InventoryItem.nombre)
        )
        res = await self.scalars(stmt)
        return list(res)

    async def get_item(self, item_id: UUID) -> Optional[InventoryItem]:
        return await self.scalar_one_or_none(select(InventoryItem).where(InventoryItem.id == item_id))
