from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_api.core.deps import ANY_ROLE, require_roles
from carwash_api.db.session import get_async_session
from carwash_api.schemas.realtime import DashboardMetrics
from carwash_api.services.dashboard import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


# PUBLIC_INTERFACE
@router.get(
    "/metrics",
    response_model=DashboardMetrics,
    summary="Dashboard metrics",
    description=(
        "Today's sales and revenue, work orders created, delivered and active, "
        "inventory alerts and timbrado status. The same snapshot is pushed on /ws/dashboard."
    ),
    dependencies=[Depends(require_roles(*ANY_ROLE))],
)
async def dashboard_metrics(session: AsyncSession = Depends(get_async_session)) -> DashboardMetrics:
    return await DashboardService(session).compute_metrics()
