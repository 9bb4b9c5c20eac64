from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from carwash_api.db.models.inventory import InventoryItem
from carwash_api.repositories.inventory import InventoryRepository
from carwash_api.schemas.inventory import InventoryItemCreate, InventoryItemUpdate, StockAdjustment
from carwash_api.services import fiscal
from carwash_api.services.base import BaseService
from carwash_api.services.dashboard import publish_dashboard_snapshot
from carwash_api.services.errors import BusinessRuleError, NotFoundError

logger = logging.getLogger(__name__)


def refresh_alert(item: InventoryItem) -> None:
    item.estado_alerta = fiscal.inventory_alert_state(item.stock_actual, item.stock_minimo)


# PUBLIC_INTERFACE
def consume_stock(item: InventoryItem, quantity: int) -> None:
    """
    Take units out of stock.

    Raises:
        BusinessRuleError: not enough units on hand.
    """
    if quantity > item.stock_actual:
        raise BusinessRuleError(
            f"Stock insuficiente para {item.nombre}: disponible {item.stock_actual}, solicitado {quantity}",
            details={"inventory_item_id": str(item.id), "stock_actual": item.stock_actual, "requested": quantity},
        )
    item.stock_actual -= quantity
    refresh_alert(item)


# PUBLIC_INTERFACE
def restore_stock(item: InventoryItem, quantity: int) -> None:
    item.stock_actual += quantity
    refresh_alert(item)


class InventoryService(BaseService):
    """Stock items and their alert levels."""

    def __init__(self, session) -> None:
        super().__init__(session)
        self.repo = InventoryRepository(session)

    async def list_items(self, *, limit: int = 100, offset: int = 0) -> List[InventoryItem]:
        return await self.repo.list_items(limit=limit, offset=offset)

    async def list_alerts(self) -> List[InventoryItem]:
        return await self.repo.list_alerts()

    async def get_item(self, item_id: UUID) -> InventoryItem:
        item = await self.repo.get_item(item_id)
        if not item:
            raise NotFoundError("Producto de inventario no encontrado")
        return item

    async def create_item(self, payload: InventoryItemCreate) -> InventoryItem:
        item = InventoryItem(**payload.model_dump())
        refresh_alert(item)
        await self.repo.add(item)
        await self.commit()
        await publish_dashboard_snapshot(self.session)
        return item

    async def update_item(self, item_id: UUID, payload: InventoryItemUpdate) -> InventoryItem:
        item = await self.get_item(item_id)
        for key, value in payload.model_dump(exclude_unset=True).items():
            if value is None and key in ("nombre", "precio", "stock_actual", "stock_minimo", "unidad_medida", "activo"):
                raise BusinessRuleError(f"El campo {key} no puede ser nulo")
            setattr(item, key, value)
        refresh_alert(item)
        await self.commit()
        await publish_dashboard_snapshot(self.session)
        return item

    # PUBLIC_INTERFACE
    async def adjust_stock(self, item_id: UUID, adjustment: StockAdjustment) -> InventoryItem:
        """Add or remove units; removing more than is on hand is rejected."""
        item = await self.get_item(item_id)
        if adjustment.action == "add":
            restore_stock(item, adjustment.quantity)
        else:
            consume_stock(item, adjustment.quantity)
        await self.commit()
        logger.info("Stock of %s %s %d -> %d", item.nombre, adjustment.action, adjustment.quantity, item.stock_actual)
        await publish_dashboard_snapshot(self.session)
        return item

    async def delete_item(self, item_id: UUID) -> None:
        item = await self.get_item(item_id)
        await self.repo.delete(item)
        await self.commit()
        await publish_dashboard_snapshot(self.session)
