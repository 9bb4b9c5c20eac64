from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_api.core.deps import ADMIN_ONLY, ANY_ROLE, require_roles
from carwash_api.db.session import get_async_session
from carwash_api.schemas.company import CompanyConfigRead, CompanyConfigSaved, CompanyConfigUpsert, TimbradoStatusResponse
from carwash_api.services.company import CompanyService

router = APIRouter(tags=["Company"])


# PUBLIC_INTERFACE
@router.get(
    "/company-config",
    response_model=Optional[CompanyConfigRead],
    summary="Get company configuration",
    description="Fiscal identity and timbrado of the business, or null when not configured yet.",
    dependencies=[Depends(require_roles(*ANY_ROLE))],
)
async def get_company_config(session: AsyncSession = Depends(get_async_session)) -> Optional[CompanyConfigRead]:
    config = await CompanyService(session).get_config()
    return CompanyConfigRead.model_validate(config) if config else None


# PUBLIC_INTERFACE
@router.put(
    "/company-config",
    response_model=CompanyConfigSaved,
    summary="Save company configuration",
    description=(
        "Create or replace the company configuration. The RUC check digit and the "
        "timbrado validity window are validated; a timbrado close to expiry is saved with a warning."
    ),
    dependencies=[Depends(require_roles(*ADMIN_ONLY))],
)
async def save_company_config(
    payload: CompanyConfigUpsert,
    session: AsyncSession = Depends(get_async_session),
) -> CompanyConfigSaved:
    config, warning = await CompanyService(session).save_config(payload)
    return CompanyConfigSaved(config=CompanyConfigRead.model_validate(config), warning=warning)


# PUBLIC_INTERFACE
@router.get(
    "/timbrado/status",
    response_model=TimbradoStatusResponse,
    summary="Timbrado status",
    description="Whether the configured timbrado currently allows issuing invoices.",
    dependencies=[Depends(require_roles(*ANY_ROLE))],
)
async def timbrado_status(session: AsyncSession = Depends(get_async_session)) -> TimbradoStatusResponse:
    return await CompanyService(session).timbrado_status()
