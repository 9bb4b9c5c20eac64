from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_api.core.clock import business_day_bounds, business_today
from carwash_api.core.settings import get_app_settings
from carwash_api.db.models.inventory import InventoryItem
from carwash_api.db.models.sales import Sale
from carwash_api.db.models.work_orders import WorkOrder
from carwash_api.repositories.company import CompanyRepository
from carwash_api.schemas.realtime import DashboardMetrics
from carwash_api.services import fiscal
from carwash_api.services.base import BaseService
from carwash_api.services.realtime import broadcast_manager

logger = logging.getLogger(__name__)

TERMINAL_STATES = ("entregado", "cancelado")


class DashboardService(BaseService):
    """Today's figures for the live dashboard."""

    # PUBLIC_INTERFACE
    async def compute_metrics(self, today: Optional[date] = None) -> DashboardMetrics:
        """
        Compute the dashboard snapshot.

        Calculations:
          - sales count and revenue where fecha falls today
          - work orders created (fecha_entrada) and delivered (fecha_entrega) today
          - active orders: every order not entregado/cancelado
          - inventory alerts grouped by estado_alerta
        """
        today = today or business_today()
        start, end = business_day_bounds(today)

        sales_res = await self.session.execute(
            select(func.count(Sale.id), func.coalesce(func.sum(Sale.total), 0)).where(
                Sale.fecha >= start, Sale.fecha < end
            )
        )
        sales_count, revenue = sales_res.one()

        created_today = await self._count(
            select(func.count(WorkOrder.id)).where(WorkOrder.fecha_entrada >= start, WorkOrder.fecha_entrada < end)
        )
        delivered_today = await self._count(
            select(func.count(WorkOrder.id)).where(WorkOrder.fecha_entrega >= start, WorkOrder.fecha_entrega < end)
        )
        active = await self._count(
            select(func.count(WorkOrder.id)).where(WorkOrder.estado.not_in(TERMINAL_STATES))
        )

        alerts_res = await self.session.execute(
            select(InventoryItem.estado_alerta, func.count(InventoryItem.id))
            .where(InventoryItem.activo.is_(True))
            .group_by(InventoryItem.estado_alerta)
        )
        alerts = {estado: int(count) for estado, count in alerts_res.all()}

        timbrado_status = None
        timbrado_days = None
        config = await CompanyRepository(self.session).get_company_config()
        if config and config.timbrado_hasta:
            st = fiscal.get_timbrado_status(
                config.timbrado_hasta, today, warning_days=get_app_settings().TIMBRADO_WARNING_DAYS
            )
            timbrado_status, timbrado_days = st.status, st.days_until_expiration

        return DashboardMetrics(
            ventas_hoy=int(sales_count or 0),
            ingresos_hoy=Decimal(str(revenue or 0)),
            ordenes_creadas_hoy=created_today,
            ordenes_entregadas_hoy=delivered_today,
            ordenes_activas=active,
            inventario_bajo=alerts.get("bajo", 0),
            inventario_critico=alerts.get("critico", 0),
            timbrado_status=timbrado_status,
            timbrado_dias_restantes=timbrado_days,
        )

    async def _count(self, stmt) -> int:
        res = await self.session.execute(stmt)
        return int(res.scalar_one() or 0)


# PUBLIC_INTERFACE
async def publish_dashboard_snapshot(session: AsyncSession) -> None:
    """Push fresh metrics to dashboard subscribers; failures are logged, never raised."""
    if broadcast_manager.subscriber_count() == 0:
        return
    try:
        snapshot = await DashboardService(session).compute_metrics()
        await broadcast_manager.publish_metrics_snapshot(snapshot)
    except Exception:
        logger.exception("Failed to publish dashboard snapshot")
