"""
Invoicing.

A sale is a fiscal invoice numbered EEE-PPP-NNNNNNN under the active timbrado.
Totals are always computed here; tourism-regime customers are IVA-exempt.
Issued invoices may be edited or deleted by an administrator only within the
fiscal modification window.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence
from uuid import UUID

from carwash_api.core.logging import audit
from carwash_api.core.settings import get_app_settings
from carwash_api.db.base import utcnow
from carwash_api.db.models.company import CompanyConfig
from carwash_api.db.models.customers import Customer
from carwash_api.db.models.sales import Sale, SaleItem
from carwash_api.db.models.security import User
from carwash_api.db.models.work_orders import WorkOrder
from carwash_api.repositories.catalog import ServiceComboRepository, ServiceRepository
from carwash_api.repositories.customers import CustomerRepository
from carwash_api.repositories.inventory import InventoryRepository
from carwash_api.repositories.sales import SaleRepository
from carwash_api.repositories.security import UserRepository
from carwash_api.repositories.work_orders import WorkOrderRepository
from carwash_api.schemas.sales import SaleCreate, SaleFromOrderCreate, SaleItemInput, SaleUpdate
from carwash_api.services import fiscal
from carwash_api.services.base import BaseService
from carwash_api.services.company import CompanyService
from carwash_api.services.dashboard import publish_dashboard_snapshot
from carwash_api.services.errors import BusinessRuleError, NotFoundError
from carwash_api.services.inventory import consume_stock, restore_stock
from carwash_api.services.usage import UsageService, in_current_period
from carwash_api.services.work_orders import WorkOrderService

logger = logging.getLogger(__name__)


@dataclass
class SaleChange:
    """Outcome of an edit or deletion inside the modification window."""
    sale: Optional[Sale]
    numero_factura: str
    hours_elapsed: int
    username: str


class SaleService(BaseService):
    """Issue, edit and delete invoices."""

    def __init__(self, session) -> None:
        super().__init__(session)
        self.repo = SaleRepository(session)
        self.customers = CustomerRepository(session)
        self.inventory = InventoryRepository(session)
        self.services = ServiceRepository(session)
        self.combos = ServiceComboRepository(session)
        self.work_orders = WorkOrderRepository(session)
        self.usage = UsageService(session)
        self.company = CompanyService(session)

    async def list_sales(
        self, *, date_from: Optional[datetime] = None, date_to: Optional[datetime] = None, limit: int = 100, offset: int = 0
    ) -> List[Sale]:
        return await self.repo.list_sales(date_from=date_from, date_to=date_to, limit=limit, offset=offset)

    async def get_sale(self, sale_id: UUID) -> Sale:
        sale = await self.repo.get_sale(sale_id)
        if not sale:
            raise NotFoundError("Venta no encontrada")
        return sale

    async def next_invoice_number(self, config: CompanyConfig) -> str:
        """Next number for the configured establecimiento and punto de expedición."""
        prefix = f"{config.establecimiento}-{config.punto_expedicion}-"
        numbers = await self.repo.invoice_numbers_with_prefix(prefix)
        last = max((fiscal.parse_invoice_sequence(n) for n in numbers), default=0)
        return fiscal.format_invoice_number(config.establecimiento, config.punto_expedicion, last + 1)

    async def _build_lines(self, items: Sequence[SaleItemInput]) -> List[SaleItem]:
        """Turn input lines into SaleItem rows, taking inventory lines out of stock."""
        lines: List[SaleItem] = []
        for data in items:
            if data.service_id and not await self.services.get_service(data.service_id):
                raise BusinessRuleError("Servicio no encontrado", details={"service_id": str(data.service_id)})
            if data.combo_id and not await self.combos.get_combo(data.combo_id):
                raise BusinessRuleError("Combo no encontrado", details={"combo_id": str(data.combo_id)})
            if data.inventory_item_id:
                stock_item = await self.inventory.get_item(data.inventory_item_id)
                if not stock_item:
                    raise BusinessRuleError(
                        "Producto de inventario no encontrado",
                        details={"inventory_item_id": str(data.inventory_item_id)},
                    )
                consume_stock(stock_item, data.cantidad)
            lines.append(
                SaleItem(
                    service_id=data.service_id,
                    combo_id=data.combo_id,
                    inventory_item_id=data.inventory_item_id,
                    nombre=data.nombre,
                    cantidad=data.cantidad,
                    precio_unitario=data.precio_unitario,
                    subtotal=data.precio_unitario * data.cantidad,
                )
            )
        return lines

    async def _restore_lines(self, lines: Sequence[SaleItem]) -> None:
        for line in lines:
            if line.inventory_item_id:
                stock_item = await self.inventory.get_item(line.inventory_item_id)
                if stock_item:
                    restore_stock(stock_item, line.cantidad)

    @staticmethod
    def _totals(lines: Sequence[SaleItem], regimen_turismo: bool) -> fiscal.SaleTotals:
        subtotal = sum((Decimal(line.subtotal) for line in lines), Decimal("0"))
        return fiscal.calculate_sale_totals(subtotal, regimen_turismo, Decimal(str(get_app_settings().TAX_RATE)))

    @staticmethod
    def _check_client_totals(
        computed: fiscal.SaleTotals,
        subtotal: Optional[Decimal],
        impuestos: Optional[Decimal],
        total: Optional[Decimal],
    ) -> None:
        sent = {"subtotal": subtotal, "impuestos": impuestos, "total": total}
        expected = {"subtotal": computed.subtotal, "impuestos": computed.impuestos, "total": computed.total}
        mismatched = [k for k, v in sent.items() if v is not None and Decimal(v) != expected[k]]
        if mismatched:
            raise BusinessRuleError(
                "Los totales enviados no coinciden con los calculados por el sistema",
                details={
                    "fields": mismatched,
                    "expected": {k: str(v) for k, v in expected.items()},
                    "received": {k: str(v) for k, v in sent.items() if v is not None},
                },
            )

    async def _issue(
        self,
        *,
        user: User,
        items: Sequence[SaleItemInput],
        medio_pago: str,
        customer_id: Optional[UUID],
        work_order: Optional[WorkOrder] = None,
        fecha: Optional[datetime] = None,
        subtotal: Optional[Decimal] = None,
        impuestos: Optional[Decimal] = None,
        total: Optional[Decimal] = None,
    ) -> Sale:
        await self.usage.ensure_can_create_invoice(user)
        config = await self.company.require_active_timbrado()
        if not items:
            raise BusinessRuleError("La venta debe tener al menos un ítem")

        customer: Optional[Customer] = None
        if customer_id:
            customer = await self.customers.get_customer(customer_id)
            if not customer:
                raise BusinessRuleError("El cliente indicado no existe")
        regimen_turismo = bool(customer and customer.regimen_turismo)

        lines = await self._build_lines(items)
        totals = self._totals(lines, regimen_turismo)
        self._check_client_totals(totals, subtotal, impuestos, total)

        if work_order is not None:
            WorkOrderService(self.session).mark_delivered(work_order)

        sale = Sale(
            numero_factura=await self.next_invoice_number(config),
            customer_id=customer_id,
            work_order_id=work_order.id if work_order else None,
            fecha=fecha or utcnow(),
            subtotal=totals.subtotal,
            impuestos=totals.impuestos,
            total=totals.total,
            medio_pago=medio_pago,
            regimen_turismo=regimen_turismo,
            timbrado_usado=config.timbrado_numero,
            created_by=user.id,
            items=lines,
        )
        await self.repo.add(sale)
        UsageService.increment(user)
        await self.commit()

        audit(
            "SALE_CREATED",
            sale_id=sale.id,
            invoice_number=sale.numero_factura,
            total=sale.total,
            regimen_turismo=regimen_turismo,
            timbrado=sale.timbrado_usado,
            user_id=user.id,
            username=user.username,
        )
        await publish_dashboard_snapshot(self.session)
        return await self.get_sale(sale.id)

    # PUBLIC_INTERFACE
    async def create_sale(self, payload: SaleCreate, user: User) -> Sale:
        """
        Issue an invoice.

        Order of checks: usage quota, active timbrado, at least one line, then
        server-side totals (cross-checked against any totals the client sent)
        and stock.
        """
        work_order = None
        if payload.work_order_id:
            work_order = await self.work_orders.get_work_order(payload.work_order_id)
            if not work_order:
                raise BusinessRuleError("La orden de trabajo indicada no existe")
        return await self._issue(
            user=user,
            items=payload.items,
            medio_pago=payload.medio_pago,
            customer_id=payload.customer_id or (work_order.customer_id if work_order else None),
            work_order=work_order,
            fecha=payload.fecha,
            subtotal=payload.subtotal,
            impuestos=payload.impuestos,
            total=payload.total,
        )

    # PUBLIC_INTERFACE
    async def create_from_work_order(self, payload: SaleFromOrderCreate, user: User) -> Sale:
        """Invoice a work order and deliver it. Lines default to the order's lines."""
        order = await self.work_orders.get_work_order(payload.work_order_id)
        if not order:
            raise NotFoundError("Orden de trabajo no encontrada")
        if order.estado in ("cancelado", "entregado"):
            raise BusinessRuleError(
                f"No se puede facturar una orden en estado {order.estado}", details={"estado": order.estado}
            )
        items = payload.items
        if items is None:
            items = [
                SaleItemInput(
                    service_id=i.service_id,
                    combo_id=i.combo_id,
                    nombre=i.nombre,
                    cantidad=i.cantidad,
                    precio_unitario=i.precio,
                )
                for i in order.items
            ]
        return await self._issue(
            user=user,
            items=items,
            medio_pago=payload.medio_pago,
            customer_id=order.customer_id,
            work_order=order,
        )

    def _window(self, sale: Sale) -> float:
        return fiscal.check_sale_modification_window(
            sale.created_at, max_hours=get_app_settings().SALE_MODIFICATION_WINDOW_HOURS
        )

    # PUBLIC_INTERFACE
    async def update_sale(self, sale_id: UUID, payload: SaleUpdate, user: User) -> SaleChange:
        """
        Edit an invoice inside the modification window.

        Replacing the lines restores the stock of the old lines, consumes the new
        ones and recomputes totals with the sale's original tax regime.
        """
        sale = await self.get_sale(sale_id)
        elapsed = self._window(sale)
        changes = payload.model_dump(exclude_unset=True)

        if changes.get("medio_pago"):
            sale.medio_pago = payload.medio_pago
        if changes.get("fecha"):
            sale.fecha = payload.fecha
        if payload.items is not None:
            if not payload.items:
                raise BusinessRuleError("La venta debe tener al menos un ítem")
            await self._restore_lines(sale.items)
            sale.items.clear()
            await self.repo.flush()
            lines = await self._build_lines(payload.items)
            sale.items.extend(lines)
            totals = self._totals(lines, sale.regimen_turismo)
            sale.subtotal, sale.impuestos, sale.total = totals.subtotal, totals.impuestos, totals.total
        await self.commit()

        audit(
            "SALE_UPDATED",
            sale_id=sale.id,
            invoice_number=sale.numero_factura,
            changes=sorted(changes),
            hours_elapsed=round(elapsed, 2),
            user_id=user.id,
            username=user.username,
        )
        await publish_dashboard_snapshot(self.session)
        return SaleChange(await self.get_sale(sale.id), sale.numero_factura, round(elapsed), user.username)

    # PUBLIC_INTERFACE
    async def delete_sale(self, sale_id: UUID, user: User) -> SaleChange:
        """
        Delete an invoice inside the modification window.

        Side effects: stock of inventory lines is restored, the creator's usage
        counter is decremented when the sale belongs to the current usage period
        and a work order delivered by this sale goes back to 'terminado'.
        """
        sale = await self.get_sale(sale_id)
        elapsed = self._window(sale)

        await self._restore_lines(sale.items)
        if sale.created_by:
            creator = await UserRepository(self.session).get_user_by_id(sale.created_by)
            if creator and in_current_period(creator, sale.created_at):
                UsageService.decrement(creator)
        if sale.work_order_id:
            order = await self.work_orders.get_work_order(sale.work_order_id)
            if order:
                WorkOrderService.revert_to_finished(order)

        numero = sale.numero_factura
        await self.repo.delete(sale)
        await self.commit()

        audit(
            "SALE_DELETED",
            sale_id=sale_id,
            invoice_number=numero,
            total=sale.total,
            hours_elapsed=round(elapsed, 2),
            user_id=user.id,
            username=user.username,
        )
        await publish_dashboard_snapshot(self.session)
        return SaleChange(None, numero, round(elapsed), user.username)
