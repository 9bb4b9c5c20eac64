from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func, select

from carwash_api.db.models.work_orders import WorkOrder, WorkOrderItem
from .base import BaseRepository


class WorkOrderRepository(BaseRepository):
    """Repository for work orders and their lines."""

    async def list_work_orders(
        self,
        *,
        estado: Optional[str] = None,
        customer_id: Optional[UUID] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[WorkOrder]:
        stmt = select(WorkOrder)
        if estado:
            stmt = stmt.where(WorkOrder.estado == estado)
        if customer_id:
            stmt = stmt.where(WorkOrder.customer_id == customer_id)
        stmt = stmt.order_by(WorkOrder.numero.desc()).offset(offset).limit(limit)
        res = await self.scalars(stmt)
        return list(res)

    async def get_work_order(self, work_order_id: UUID) -> Optional[WorkOrder]:
        """Load an order with its lines, customer and vehicle, refreshing any cached instance."""
        stmt = (
            select(WorkOrder)
            .where(WorkOrder.id == work_order_id)
            .execution_options(populate_existing=True)
        )
        return await self.scalar_one_or_none(stmt)

    async def get_item(self, work_order_id: UUID, item_id: UUID) -> Optional[WorkOrderItem]:
        stmt = select(WorkOrderItem).where(
            WorkOrderItem.id == item_id, WorkOrderItem.work_order_id == work_order_id
        )
        return await self.scalar_one_or_none(stmt)

    async def next_number(self) -> int:
        result = await self.execute(select(func.coalesce(func.max(WorkOrder.numero), 0)))
        return int(result.scalar_one()) + 1
