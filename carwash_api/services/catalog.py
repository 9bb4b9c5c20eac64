from __future__ import annotations

from typing import List, Optional, Sequence
from uuid import UUID

from carwash_api.db.models.catalog import Category, Service, ServiceCombo
from carwash_api.repositories.catalog import CategoryRepository, ServiceComboRepository, ServiceRepository
from carwash_api.schemas.catalog import (
    CategoryCreate,
    CategoryUpdate,
    ServiceComboCreate,
    ServiceComboUpdate,
    ServiceCreate,
    ServiceUpdate,
)
from carwash_api.services.base import BaseService
from carwash_api.services.errors import BusinessRuleError, ConflictError, NotFoundError

CATEGORY_REQUIRED = ("nombre", "tipo", "activa")
SERVICE_REQUIRED = ("nombre", "precio", "activo")
COMBO_REQUIRED = ("nombre", "precio_total", "activo")


def _reject_nulls(changes: dict, required: Sequence[str]) -> None:
    for key in required:
        if key in changes and changes[key] is None:
            raise BusinessRuleError(f"El campo {key} no puede ser nulo", details={"field": key})


class CatalogService(BaseService):
    """Categories, services and service combos."""

    def __init__(self, session) -> None:
        super().__init__(session)
        self.categories = CategoryRepository(session)
        self.services = ServiceRepository(session)
        self.combos = ServiceComboRepository(session)

    # Categories
    async def get_category(self, category_id: UUID) -> Category:
        category = await self.categories.get_category(category_id)
        if not category:
            raise NotFoundError("Categoría no encontrada")
        return category

    async def list_categories(self, *, only_active: bool = False, tipo: Optional[str] = None) -> List[Category]:
        return await self.categories.list_categories(only_active=only_active, tipo=tipo)

    async def create_category(self, payload: CategoryCreate) -> Category:
        category = Category(**payload.model_dump())
        await self.categories.add(category)
        await self.commit()
        return category

    async def update_category(self, category_id: UUID, payload: CategoryUpdate) -> Category:
        category = await self.get_category(category_id)
        changes = payload.model_dump(exclude_unset=True)
        _reject_nulls(changes, CATEGORY_REQUIRED)
        for key, value in changes.items():
            setattr(category, key, value)
        await self.commit()
        return category

    async def delete_category(self, category_id: UUID) -> None:
        category = await self.get_category(category_id)
        await self.categories.delete(category)
        await self.commit()

    # Services
    async def get_service(self, service_id: UUID) -> Service:
        service = await self.services.get_service(service_id)
        if not service:
            raise NotFoundError("Servicio no encontrado")
        return service

    async def list_services(self, *, only_active: bool = False) -> List[Service]:
        return await self.services.list_services(only_active=only_active)

    async def create_service(self, payload: ServiceCreate) -> Service:
        service = Service(**payload.model_dump())
        await self.services.add(service)
        await self.commit()
        return service

    async def update_service(self, service_id: UUID, payload: ServiceUpdate) -> Service:
        service = await self.get_service(service_id)
        changes = payload.model_dump(exclude_unset=True)
        _reject_nulls(changes, SERVICE_REQUIRED)
        for key, value in changes.items():
            setattr(service, key, value)
        await self.commit()
        return service

    async def delete_service(self, service_id: UUID) -> None:
        service = await self.get_service(service_id)
        combos = await self.combos.active_combos_with_service(service_id)
        if combos:
            raise ConflictError(
                "No se puede eliminar el servicio: forma parte de combos activos",
                details={"combos": [c.nombre for c in combos]},
            )
        await self.services.delete(service)
        await self.commit()

    # Combos
    async def get_combo(self, combo_id: UUID) -> ServiceCombo:
        combo = await self.combos.get_combo(combo_id)
        if not combo:
            raise NotFoundError("Combo no encontrado")
        return combo

    async def list_combos(self, *, only_active: bool = False) -> List[ServiceCombo]:
        return await self.combos.list_combos(only_active=only_active)

    async def _validated_service_ids(self, service_ids: Sequence[UUID]) -> List[UUID]:
        unique = list(dict.fromkeys(service_ids))
        if len(unique) < 2:
            raise BusinessRuleError("Un combo debe incluir al menos 2 servicios distintos")
        found = {s.id for s in await self.services.get_services(unique)}
        missing = [str(sid) for sid in unique if sid not in found]
        if missing:
            raise BusinessRuleError("Servicios no encontrados", details={"service_ids": missing})
        return unique

    # PUBLIC_INTERFACE
    async def create_combo(self, payload: ServiceComboCreate) -> ServiceCombo:
        """Create a combo from at least two distinct existing services."""
        service_ids = await self._validated_service_ids(payload.service_ids)
        combo = ServiceCombo(**payload.model_dump(exclude={"service_ids"}))
        await self.combos.add(combo)
        await self.combos.flush()
        await self.combos.replace_services(combo.id, service_ids)
        await self.commit()
        return await self.get_combo(combo.id)

    # PUBLIC_INTERFACE
    async def update_combo(self, combo_id: UUID, payload: ServiceComboUpdate) -> ServiceCombo:
        combo = await self.get_combo(combo_id)
        values = payload.model_dump(exclude_unset=True, exclude={"service_ids"})
        _reject_nulls(values, COMBO_REQUIRED)
        for key, value in values.items():
            setattr(combo, key, value)
        if payload.service_ids is not None:
            service_ids = await self._validated_service_ids(payload.service_ids)
            await self.combos.replace_services(combo.id, service_ids)
        elif combo.activo and len(combo.services) < 2:
            # members may have been removed while the combo was inactive
            raise BusinessRuleError("Un combo debe incluir al menos 2 servicios distintos")
        await self.commit()
        return await self.get_combo(combo.id)

    # PUBLIC_INTERFACE
    async def deactivate_combo(self, combo_id: UUID) -> ServiceCombo:
        """Combos are never hard-deleted; past invoices keep referring to them."""
        combo = await self.get_combo(combo_id)
        combo.activo = False
        await self.commit()
        return combo
