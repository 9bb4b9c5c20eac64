from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select

from carwash_api.db.models.sales import Sale
from .base import BaseRepository


class SaleRepository(BaseRepository):
    """Repository for invoices."""

    async def list_sales(
        self,
        *,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Sale]:
        stmt = select(Sale)
        if date_from:
            stmt = stmt.where(Sale.fecha >= date_from)
        if date_to:
            stmt = stmt.where(Sale.fecha < date_to)
        stmt = stmt.order_by(Sale.fecha.desc()).offset(offset).limit(limit)
        res = await self.scalars(stmt)
        return list(res)

    async def get_sale(self, sale_id: UUID) -> Optional[Sale]:
        stmt = select(Sale).where(Sale.id == sale_id).execution_options(populate_existing=True)
        return await self.scalar_one_or_none(stmt)

    async def invoice_numbers_with_prefix(self, prefix: str) -> List[str]:
        """Every numero_factura issued under an EEE-PPP- prefix."""
        stmt = select(Sale.numero_factura).where(Sale.numero_factura.like(f"{prefix}%"))
        res = await self.scalars(stmt)
        return list(res)
