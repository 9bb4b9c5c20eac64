from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_api.core.deps import ADMIN_ONLY, require_roles
from carwash_api.db.base import utcnow
from carwash_api.db.models.security import User
from carwash_api.db.session import get_async_session
from carwash_api.schemas.common import SystemResetResponse
from carwash_api.services.admin import AdminService

router = APIRouter(prefix="/admin", tags=["System"])


# PUBLIC_INTERFACE
@router.post(
    "/reset-system",
    response_model=SystemResetResponse,
    summary="Reset business data",
    description=(
        "Delete every sale, work order, vehicle, customer, combo, service, category and "
        "inventory item. Users and the company and DNIT configuration are kept."
    ),
)
async def reset_system(
    user: User = Depends(require_roles(*ADMIN_ONLY)),
    session: AsyncSession = Depends(get_async_session),
) -> SystemResetResponse:
    deleted = await AdminService(session).reset_system(user)
    return SystemResetResponse(message="Sistema reseteado exitosamente", timestamp=utcnow(), deleted=deleted)
