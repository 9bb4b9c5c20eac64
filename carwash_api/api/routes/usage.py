from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_api.core.deps import ADMIN_ONLY, get_current_active_user, require_roles
from carwash_api.db.models.security import User
from carwash_api.db.session import get_async_session
from carwash_api.schemas.usage import InvoicePermission, UsageStats, UsageWarnings
from carwash_api.services.usage import UsageService

router = APIRouter(prefix="/usage", tags=["Usage"])


# PUBLIC_INTERFACE
@router.get(
    "/stats",
    response_model=UsageStats,
    summary="Usage of the current account",
    description="Invoices issued this period, remaining quota and account status.",
)
async def usage_stats(
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> UsageStats:
    return UsageService(session).stats(user)


# PUBLIC_INTERFACE
@router.get(
    "/can-create-invoice",
    response_model=InvoicePermission,
    summary="Check invoice quota",
    description="Whether the current account may issue another invoice now, and why not otherwise.",
)
async def can_create_invoice(
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> InvoicePermission:
    return await UsageService(session).can_create_invoice(user)


# PUBLIC_INTERFACE
@router.get(
    "/warnings",
    response_model=UsageWarnings,
    summary="Usage warnings",
    description="Accounts near or over their quota and accounts expiring soon or expired.",
    dependencies=[Depends(require_roles(*ADMIN_ONLY))],
)
async def usage_warnings(session: AsyncSession = Depends(get_async_session)) -> UsageWarnings:
    return await UsageService(session).warnings()
