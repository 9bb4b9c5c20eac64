from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_api.core.deps import ADMIN_ONLY, require_roles
from carwash_api.db.session import get_async_session
from carwash_api.schemas.common import MessageResponse
from carwash_api.schemas.company import DnitConfigSafe, DnitConfigUpsert, DnitConnectionResult
from carwash_api.services.company import DnitService

router = APIRouter(
    prefix="/dnit-config",
    tags=["DNIT"],
    dependencies=[Depends(require_roles(*ADMIN_ONLY))],
)


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=Optional[DnitConfigSafe],
    summary="Get DNIT configuration",
    description="Safe view of the DNIT settings. Secrets are reported only as has_* flags.",
)
async def get_dnit_config(session: AsyncSession = Depends(get_async_session)) -> Optional[DnitConfigSafe]:
    return await DnitService(session).get_safe()


# PUBLIC_INTERFACE
@router.put(
    "",
    response_model=DnitConfigSafe,
    summary="Save DNIT configuration",
    description="Secrets are encrypted at rest. Placeholder values ('••••') keep the stored secret.",
)
async def save_dnit_config(
    payload: DnitConfigUpsert,
    session: AsyncSession = Depends(get_async_session),
) -> DnitConfigSafe:
    return await DnitService(session).save(payload)


# PUBLIC_INTERFACE
@router.delete("", response_model=MessageResponse, summary="Delete DNIT configuration")
async def delete_dnit_config(session: AsyncSession = Depends(get_async_session)) -> MessageResponse:
    await DnitService(session).delete()
    return MessageResponse(message="Configuración DNIT eliminada")


# PUBLIC_INTERFACE
@router.post(
    "/test-connection",
    response_model=DnitConnectionResult,
    summary="Test DNIT connection",
    description="Call the configured endpoint with the stored token and record the outcome.",
)
async def test_dnit_connection(session: AsyncSession = Depends(get_async_session)) -> DnitConnectionResult:
    return await DnitService(session).test_connection()
