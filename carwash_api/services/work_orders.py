"""
Work order lifecycle.

Orders move forward recibido -> en_proceso -> terminado -> entregado and may be
cancelled from any non-terminal status. entregado and cancelado are terminal.
Entering a status stamps its date.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, FrozenSet, List, Optional
from uuid import UUID

from carwash_api.db.base import utcnow
from carwash_api.db.models.work_orders import WorkOrder, WorkOrderItem
from carwash_api.repositories.catalog import ServiceComboRepository, ServiceRepository
from carwash_api.repositories.customers import CustomerRepository, VehicleRepository
from carwash_api.repositories.work_orders import WorkOrderRepository
from carwash_api.schemas.work_orders import WorkOrderCreate, WorkOrderItemInput, WorkOrderUpdate
from carwash_api.services.base import BaseService
from carwash_api.services.dashboard import publish_dashboard_snapshot
from carwash_api.services.errors import BusinessRuleError, NotFoundError

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    "recibido": frozenset({"en_proceso", "cancelado"}),
    "en_proceso": frozenset({"terminado", "cancelado"}),
    "terminado": frozenset({"entregado", "cancelado"}),
    "entregado": frozenset(),
    "cancelado": frozenset(),
}

STATUS_DATE_FIELD = {
    "en_proceso": "fecha_inicio",
    "terminado": "fecha_fin",
    "entregado": "fecha_entrega",
}


# PUBLIC_INTERFACE
def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def order_total(items: List[WorkOrderItem]) -> Decimal:
    return sum((Decimal(item.precio) * item.cantidad for item in items), Decimal("0"))


class WorkOrderService(BaseService):
    """Numbering, lines, totals and status transitions of work orders."""

    def __init__(self, session) -> None:
        super().__init__(session)
        self.repo = WorkOrderRepository(session)
        self.customers = CustomerRepository(session)
        self.vehicles = VehicleRepository(session)
        self.services = ServiceRepository(session)
        self.combos = ServiceComboRepository(session)

    async def list_work_orders(
        self, *, estado: Optional[str] = None, customer_id: Optional[UUID] = None, limit: int = 100, offset: int = 0
    ) -> List[WorkOrder]:
        return await self.repo.list_work_orders(estado=estado, customer_id=customer_id, limit=limit, offset=offset)

    async def get_work_order(self, work_order_id: UUID) -> WorkOrder:
        order = await self.repo.get_work_order(work_order_id)
        if not order:
            raise NotFoundError("Orden de trabajo no encontrada")
        return order

    async def next_number(self) -> int:
        return await self.repo.next_number()

    async def _check_customer_vehicle(self, customer_id: UUID, vehicle_id: UUID) -> None:
        if not await self.customers.get_customer(customer_id):
            raise BusinessRuleError("El cliente indicado no existe")
        vehicle = await self.vehicles.get_vehicle(vehicle_id)
        if not vehicle:
            raise BusinessRuleError("El vehículo indicado no existe")
        if vehicle.customer_id != customer_id:
            raise BusinessRuleError("El vehículo no pertenece al cliente indicado")

    async def _build_item(self, data: WorkOrderItemInput) -> WorkOrderItem:
        """Resolve a line against the catalog; explicit nombre/precio override catalog values."""
        if data.service_id and data.combo_id:
            raise BusinessRuleError("Una línea no puede referir a un servicio y a un combo a la vez")
        nombre, precio = data.nombre, data.precio
        if data.service_id:
            service = await self.services.get_service(data.service_id)
            if not service:
                raise BusinessRuleError("Servicio no encontrado", details={"service_id": str(data.service_id)})
            nombre = nombre or service.nombre
            precio = precio if precio is not None else service.precio
        elif data.combo_id:
            combo = await self.combos.get_combo(data.combo_id)
            if not combo:
                raise BusinessRuleError("Combo no encontrado", details={"combo_id": str(data.combo_id)})
            nombre = nombre or combo.nombre
            precio = precio if precio is not None else combo.precio_total
        if not nombre or precio is None:
            raise BusinessRuleError("Cada línea debe indicar servicio, combo o nombre y precio")
        return WorkOrderItem(
            service_id=data.service_id,
            combo_id=data.combo_id,
            nombre=nombre,
            precio=precio,
            cantidad=data.cantidad,
        )

    # PUBLIC_INTERFACE
    async def create_work_order(self, payload: WorkOrderCreate) -> WorkOrder:
        """
        Open a work order in status 'recibido' with the next sequential number.

        Returns:
            The order reloaded with its lines, customer and vehicle.
        """
        await self._check_customer_vehicle(payload.customer_id, payload.vehicle_id)
        items = [await self._build_item(i) for i in payload.items]
        order = WorkOrder(
            numero=await self.repo.next_number(),
            customer_id=payload.customer_id,
            vehicle_id=payload.vehicle_id,
            estado="recibido",
            fecha_entrada=utcnow(),
            observaciones=payload.observaciones,
            items=items,
            total=order_total(items),
        )
        await self.repo.add(order)
        await self.commit()
        logger.info("Work order #%s created", order.numero)
        await publish_dashboard_snapshot(self.session)
        return await self.get_work_order(order.id)

    # PUBLIC_INTERFACE
    async def update_work_order(self, work_order_id: UUID, payload: WorkOrderUpdate) -> WorkOrder:
        """Update header fields; status and lines have their own operations."""
        order = await self.get_work_order(work_order_id)
        changes = payload.model_dump(exclude_unset=True)
        customer_id = changes.get("customer_id") or order.customer_id
        vehicle_id = changes.get("vehicle_id") or order.vehicle_id
        if "customer_id" in changes or "vehicle_id" in changes:
            await self._check_customer_vehicle(customer_id, vehicle_id)
        order.customer_id = customer_id
        order.vehicle_id = vehicle_id
        if "observaciones" in changes:
            order.observaciones = changes["observaciones"]
        await self.commit()
        return await self.get_work_order(order.id)

    # PUBLIC_INTERFACE
    async def change_status(self, work_order_id: UUID, estado: str) -> WorkOrder:
        """
        Move an order to a new status.

        Raises:
            BusinessRuleError: the transition is not allowed from the current status.
        """
        order = await self.get_work_order(work_order_id)
        if not can_transition(order.estado, estado):
            raise BusinessRuleError(
                f"Transición de estado no permitida: {order.estado} → {estado}",
                details={"from": order.estado, "to": estado, "allowed": sorted(ALLOWED_TRANSITIONS.get(order.estado, ()))},
            )
        self._apply_status(order, estado)
        await self.commit()
        logger.info("Work order #%s moved to %s", order.numero, estado)
        await publish_dashboard_snapshot(self.session)
        return await self.get_work_order(order.id)

    @staticmethod
    def _apply_status(order: WorkOrder, estado: str) -> None:
        order.estado = estado
        field = STATUS_DATE_FIELD.get(estado)
        if field:
            setattr(order, field, utcnow())

    # PUBLIC_INTERFACE
    def mark_delivered(self, order: WorkOrder) -> None:
        """Deliver an order being invoiced. Cancelled or delivered orders are rejected."""
        if order.estado in ("cancelado", "entregado"):
            raise BusinessRuleError(
                f"No se puede facturar una orden en estado {order.estado}", details={"estado": order.estado}
            )
        self._apply_status(order, "entregado")

    # PUBLIC_INTERFACE
    @staticmethod
    def revert_to_finished(order: WorkOrder) -> None:
        """Undo delivery when the invoice that delivered the order is deleted."""
        if order.estado == "entregado":
            order.estado = "terminado"
            order.fecha_entrega = None

    # PUBLIC_INTERFACE
    async def add_item(self, work_order_id: UUID, data: WorkOrderItemInput) -> WorkOrder:
        order = await self.get_work_order(work_order_id)
        self._ensure_editable(order)
        order.items.append(await self._build_item(data))
        order.total = order_total(order.items)
        await self.commit()
        return await self.get_work_order(order.id)

    # PUBLIC_INTERFACE
    async def remove_item(self, work_order_id: UUID, item_id: UUID) -> WorkOrder:
        order = await self.get_work_order(work_order_id)
        self._ensure_editable(order)
        item = next((i for i in order.items if i.id == item_id), None)
        if item is None:
            raise NotFoundError("Línea de orden no encontrada")
        order.items.remove(item)
        order.total = order_total(order.items)
        await self.commit()
        return await self.get_work_order(order.id)

    @staticmethod
    def _ensure_editable(order: WorkOrder) -> None:
        if order.estado in ("entregado", "cancelado"):
            raise BusinessRuleError(f"La orden está {order.estado} y no admite cambios")

    # PUBLIC_INTERFACE
    async def delete_work_order(self, work_order_id: UUID) -> None:
        order = await self.get_work_order(work_order_id)
        await self.repo.delete(order)
        await self.commit()
        await publish_dashboard_snapshot(self.session)
