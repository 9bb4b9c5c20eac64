from __future__ import annotations

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_api.core.clock import business_day_bounds
from carwash_api.core.deps import ADMIN_ONLY, ANY_ROLE, WRITE_ROLES, require_roles
from carwash_api.db.models.security import User
from carwash_api.db.session import get_async_session
from carwash_api.schemas.sales import (
    SaleCreate,
    SaleCreatedResponse,
    SaleDeletedResponse,
    SaleDetail,
    SaleFromOrderCreate,
    SaleUpdate,
    SaleUpdatedResponse,
)
from carwash_api.services.sales import SaleService

router = APIRouter(prefix="/sales", tags=["Sales"])


def _created(sale) -> SaleCreatedResponse:
    return SaleCreatedResponse(
        sale=SaleDetail.model_validate(sale),
        invoice_number=sale.numero_factura,
        timbrado=sale.timbrado_usado,
    )


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[SaleDetail],
    summary="List sales",
    description="Invoices, most recent first. date_from and date_to are inclusive calendar days.",
    dependencies=[Depends(require_roles(*ANY_ROLE))],
)
async def list_sales(
    session: AsyncSession = Depends(get_async_session),
    date_from: Optional[date] = Query(None, description="First day (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(None, description="Last day (YYYY-MM-DD)"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[SaleDetail]:
    start = business_day_bounds(date_from)[0] if date_from else None
    end = business_day_bounds(date_to)[1] if date_to else None
    sales = await SaleService(session).list_sales(date_from=start, date_to=end, limit=limit, offset=offset)
    return [SaleDetail.model_validate(s) for s in sales]


# PUBLIC_INTERFACE
@router.get(
    "/{sale_id}",
    response_model=SaleDetail,
    summary="Get sale",
    description="Invoice with its lines and customer.",
    dependencies=[Depends(require_roles(*ANY_ROLE))],
)
async def get_sale(
    sale_id: UUID = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> SaleDetail:
    return SaleDetail.model_validate(await SaleService(session).get_sale(sale_id))


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=SaleCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create sale",
    description=(
        "Issue an invoice under the active timbrado. Checks the user's invoice quota and the "
        "timbrado first, then computes totals on the server (IVA exempt for tourism-regime "
        "customers). Client totals, when sent, must match."
    ),
)
async def create_sale(
    payload: SaleCreate,
    user: User = Depends(require_roles(*WRITE_ROLES)),
    session: AsyncSession = Depends(get_async_session),
) -> SaleCreatedResponse:
    return _created(await SaleService(session).create_sale(payload, user))


# PUBLIC_INTERFACE
@router.post(
    "/create-from-order",
    response_model=SaleCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invoice a work order",
    description="Lines default to the order's lines; the order is delivered on success.",
)
async def create_sale_from_order(
    payload: SaleFromOrderCreate,
    user: User = Depends(require_roles(*WRITE_ROLES)),
    session: AsyncSession = Depends(get_async_session),
) -> SaleCreatedResponse:
    return _created(await SaleService(session).create_from_work_order(payload, user))


# PUBLIC_INTERFACE
@router.put(
    "/{sale_id}",
    response_model=SaleUpdatedResponse,
    summary="Update sale",
    description="Only within the fiscal modification window after creation.",
)
async def update_sale(
    payload: SaleUpdate,
    sale_id: UUID = Path(...),
    user: User = Depends(require_roles(*ADMIN_ONLY)),
    session: AsyncSession = Depends(get_async_session),
) -> SaleUpdatedResponse:
    change = await SaleService(session).update_sale(sale_id, payload, user)
    return SaleUpdatedResponse(
        message="Venta actualizada",
        sale=SaleDetail.model_validate(change.sale),
        hours_elapsed=change.hours_elapsed,
        modified_by=change.username,
    )


# PUBLIC_INTERFACE
@router.delete(
    "/{sale_id}",
    response_model=SaleDeletedResponse,
    summary="Delete sale",
    description=(
        "Only within the fiscal modification window. Restores stock, gives the invoice back to "
        "the creator's quota and returns a delivered work order to 'terminado'."
    ),
)
async def delete_sale(
    sale_id: UUID = Path(...),
    user: User = Depends(require_roles(*ADMIN_ONLY)),
    session: AsyncSession = Depends(get_async_session),
) -> SaleDeletedResponse:
    change = await SaleService(session).delete_sale(sale_id, user)
    return SaleDeletedResponse(
        message="Venta eliminada",
        deleted_invoice=change.numero_factura,
        hours_elapsed=change.hours_elapsed,
        deleted_by=change.username,
    )
