from __future__ import annotations

from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, select

from carwash_api.db.models.catalog import Category, Service, ServiceCombo, ServiceComboItem
from .base import BaseRepository


class CategoryRepository(BaseRepository):
    """Repository for catalog categories."""

    async def list_categories(
        self, *, only_active: bool = False, tipo: Optional[str] = None
    ) -> List[Category]:
        stmt = select(Category)
        if only_active:
            stmt = stmt.where(Category.activa.is_(True))
        if tipo:
            stmt = stmt.where(Category.tipo.in_([tipo, "ambos"]))
        res = await self.scalars(stmt.order_by(Category.nombre))
        return list(res)

    async def get_category(self, category_id: UUID) -> Optional[Category]:
        return await self.scalar_one_or_none(select(Category).where(Category.id == category_id))


class ServiceRepository(BaseRepository):
    """Repository for washing services."""

    async def list_services(self, *, only_active: bool = False) -> List[Service]:
        stmt = select(Service)
        if only_active:
            stmt = stmt.where(Service.activo.is_(True))
        res = await self.scalars(stmt.order_by(Service.nombre))
        return list(res)

    async def get_service(self, service_id: UUID) -> Optional[Service]:
        return await self.scalar_one_or_none(select(Service).where(Service.id == service_id))

    async def get_services(self, service_ids: Sequence[UUID]) -> List[Service]:
        if not service_ids:
            return []
        res = await self.scalars(select(Service).where(Service.id.in_(list(service_ids))))
        return list(res)


class ServiceComboRepository(BaseRepository):
    """Repository for service combos and their membership rows."""

    async def list_combos(self, *, only_active: bool = False) -> List[ServiceCombo]:
        stmt = select(ServiceCombo)
        if only_active:
            stmt = stmt.where(ServiceCombo.activo.is_(True))
        res = await self.scalars(stmt.order_by(ServiceCombo.nombre))
        return list(res)

    async def get_combo(self, combo_id: UUID) -> Optional[ServiceCombo]:
        stmt = (
            select(ServiceCombo)
            .where(ServiceCombo.id == combo_id)
            .execution_options(populate_existing=True)
        )
        return await self.scalar_one_or_none(stmt)

    async def replace_services(self, combo_id: UUID, service_ids: Sequence[UUID]) -> None:
        await self.execute(delete(ServiceComboItem).where(ServiceComboItem.combo_id == combo_id))
        await self.add_all(ServiceComboItem(combo_id=combo_id, service_id=sid) for sid in service_ids)
        await self.flush()

    async def active_combos_with_service(self, service_id: UUID) -> List[ServiceCombo]:
        stmt = (
            select(ServiceCombo)
            .join(ServiceComboItem, ServiceComboItem.combo_id == ServiceCombo.id)
            .where(ServiceComboItem.service_id == service_id, ServiceCombo.activo.is_(True))
            .order_by(ServiceCombo.nombre)
        )
        res = await self.scalars(stmt)
        return list(res)
