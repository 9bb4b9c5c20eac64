from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select

from carwash_api.core.clock import business_date, business_day_bounds, business_today, to_business_time
from carwash_api.db.models.catalog import Service, ServiceCombo
from carwash_api.db.models.customers import Customer
from carwash_api.db.models.sales import Sale, SaleItem
from carwash_api.schemas.reports import CustomerPurchases, DailySales, SalesReport, ServicePopularity
from carwash_api.services.base import BaseService
from carwash_api.services.errors import BusinessRuleError

PERIODS = ("day", "week", "month", "quarter", "year", "custom")


# PUBLIC_INTERFACE
def resolve_period(
    period: str,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    today: Optional[date] = None,
) -> Tuple[date, date]:
    """
    Inclusive date range of a report period.

      - day: today
      - week: the last 7 days
      - month, quarter, year: from the start of the current calendar period
      - custom: date_from..date_to, both required
    """
    today = today or business_today()
    if period == "day":
        return today, today
    if period == "week":
        return today - timedelta(days=6), today
    if period == "month":
        return today.replace(day=1), today
    if period == "quarter":
        first_month = 3 * ((today.month - 1) // 3) + 1
        return today.replace(month=first_month, day=1), today
    if period == "year":
        return today.replace(month=1, day=1), today
    if period == "custom":
        if not date_from or not date_to:
            raise BusinessRuleError("El período personalizado requiere date_from y date_to")
        if date_to < date_from:
            raise BusinessRuleError("date_to debe ser posterior o igual a date_from")
        return date_from, date_to
    raise BusinessRuleError(f"Período no válido: {period}", details={"allowed": list(PERIODS)})


def _money(value: Any) -> Decimal:
    return Decimal(str(value or 0))


class ReportService(BaseService):
    """Aggregates for the reports screen and their tabular exports."""

    async def _sales_between(self, start: date, end: date) -> List[Sale]:
        lo, hi = business_day_bounds(start, end)
        res = await self.session.execute(
            select(Sale).where(Sale.fecha >= lo, Sale.fecha < hi).order_by(Sale.fecha)
        )
        return list(res.scalars())

    # PUBLIC_INTERFACE
    async def sales_report(self, period: str, start: date, end: date) -> SalesReport:
        """Daily amount and invoice count for every day of the range, plus totals and average ticket."""
        per_day: Dict[date, List[Decimal]] = defaultdict(list)
        for sale in await self._sales_between(start, end):
            per_day[business_date(sale.fecha)].append(_money(sale.total))

        daily: List[DailySales] = []
        day = start
        while day <= end:
            amounts = per_day.get(day, [])
            daily.append(DailySales(date=day, amount=sum(amounts, Decimal("0")), orders=len(amounts)))
            day += timedelta(days=1)

        total_amount = sum((d.amount for d in daily), Decimal("0"))
        total_orders = sum(d.orders for d in daily)
        average = (total_amount / total_orders).quantize(Decimal("1")) if total_orders else Decimal("0")
        return SalesReport(
            period=period,
            date_from=start,
            date_to=end,
            daily=daily,
            total_amount=total_amount,
            total_orders=total_orders,
            average_ticket=average,
        )

    # PUBLIC_INTERFACE
    async def sales_rows(self, start: date, end: date) -> List[Dict[str, Any]]:
        """One row per invoice, for CSV/XLSX/PDF export."""
        rows = []
        for sale in await self._sales_between(start, end):
            rows.append(
                {
                    "numero_factura": sale.numero_factura,
                    "fecha": to_business_time(sale.fecha).replace(tzinfo=None),
                    "cliente": sale.customer.nombre if sale.customer else "Consumidor Final",
                    "medio_pago": sale.medio_pago,
                    "regimen_turismo": sale.regimen_turismo,
                    "subtotal": float(sale.subtotal),
                    "impuestos": float(sale.impuestos),
                    "total": float(sale.total),
                    "timbrado": sale.timbrado_usado,
                }
            )
        return rows

    # PUBLIC_INTERFACE
    async def service_popularity(self, start: date, end: date) -> List[ServicePopularity]:
        """Units sold and revenue per service and per combo, most sold first."""
        lo, hi = business_day_bounds(start, end)
        result: List[ServicePopularity] = []
        for tipo, ref_col, model, name_col in (
            ("servicio", SaleItem.service_id, Service, Service.nombre),
            ("combo", SaleItem.combo_id, ServiceCombo, ServiceCombo.nombre),
        ):
            stmt = (
                select(
                    ref_col,
                    func.coalesce(name_col, func.max(SaleItem.nombre)),
                    func.sum(SaleItem.cantidad),
                    func.sum(SaleItem.subtotal),
                )
                .join(Sale, Sale.id == SaleItem.sale_id)
                .outerjoin(model, model.id == ref_col)
                .where(ref_col.is_not(None), Sale.fecha >= lo, Sale.fecha < hi)
                .group_by(ref_col, name_col)
            )
            res = await self.session.execute(stmt)
            for item_id, nombre, count, revenue in res.all():
                result.append(
                    ServicePopularity(tipo=tipo, item_id=item_id, nombre=nombre, count=int(count or 0), revenue=_money(revenue))
                )
        result.sort(key=lambda r: (-r.count, -r.revenue, r.nombre))
        return result

    # PUBLIC_INTERFACE
    async def customer_purchases(self, start: date, end: date) -> List[CustomerPurchases]:
        """Invoice count and amount per customer, best customers first."""
        lo, hi = business_day_bounds(start, end)
        stmt = (
            select(
                Customer.id,
                Customer.nombre,
                Customer.doc_numero,
                func.count(Sale.id),
                func.coalesce(func.sum(Sale.total), 0),
            )
            .join(Sale, Sale.customer_id == Customer.id)
            .where(Sale.fecha >= lo, Sale.fecha < hi)
            .group_by(Customer.id, Customer.nombre, Customer.doc_numero)
        )
        res = await self.session.execute(stmt)
        rows = [
            CustomerPurchases(customer_id=cid, nombre=nombre, documento=doc, purchases=int(count), total=_money(total))
            for cid, nombre, doc, count, total in res.all()
        ]
        rows.sort(key=lambda r: (-r.total, r.nombre))
        return rows
