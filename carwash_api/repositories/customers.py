from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import exists, func, or_, select

from carwash_api.db.models.customers import Customer, Vehicle
from carwash_api.db.models.sales import Sale
from carwash_api.db.models.work_orders import WorkOrder
from .base import BaseRepository


class CustomerRepository(BaseRepository):
    """Repository for customers."""

    async def list_customers(
        self, *, search: Optional[str] = None, limit: int = 100, offset: int = 0
    ) -> List[Customer]:
        stmt = select(Customer)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(
                    func.lower(Customer.nombre).like(pattern),
                    func.lower(Customer.doc_numero).like(pattern),
                    func.lower(Customer.email).like(pattern),
                    Customer.telefono.like(f"%{search}%"),
                )
            )
        stmt = stmt.order_by(Customer.nombre).offset(offset).limit(limit)
        res = await self.scalars(stmt)
        return list(res)

    async def get_customer(self, customer_id: UUID) -> Optional[Customer]:
        return await self.scalar_one_or_none(select(Customer).where(Customer.id == customer_id))

    async def is_referenced(self, customer_id: UUID) -> bool:
        """True when work orders or sales point at the customer."""
        stmt = select(
            or_(
                exists().where(WorkOrder.customer_id == customer_id),
                exists().where(Sale.customer_id == customer_id),
            )
        )
        result = await self.execute(stmt)
        return bool(result.scalar())


class VehicleRepository(BaseRepository):
    """Repository for vehicles."""

    async def list_vehicles(
        self, *, customer_id: Optional[UUID] = None, limit: int = 100, offset: int = 0
    ) -> List[Vehicle]:
        stmt = select(Vehicle)
        if customer_id:
            stmt = stmt.where(Vehicle.customer_id == customer_id)
        stmt = stmt.order_by(Vehicle.placa).offset(offset).limit(limit)
        res = await self.scalars(stmt)
        return list(res)

    async def get_vehicle(self, vehicle_id: UUID) -> Optional[Vehicle]:
        return await self.scalar_one_or_none(select(Vehicle).where(Vehicle.id == vehicle_id))

    async def is_referenced(self, vehicle_id: UUID) -> bool:
        result = await self.execute(select(exists().where(WorkOrder.vehicle_id == vehicle_id)))
        return bool(result.scalar())
