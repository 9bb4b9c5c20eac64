from __future__ import annotations

import io
from typing import Literal, Union
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_api.core.deps import ANY_ROLE, require_roles
from carwash_api.db.session import get_async_session
from carwash_api.schemas.printing import InvoicePrintData, WorkOrderPrintData
from carwash_api.services.printing import PrintService, render_invoice_pdf, render_work_order_pdf

router = APIRouter(
    prefix="/print",
    tags=["Print"],
    dependencies=[Depends(require_roles(*ANY_ROLE))],
)

PrintFormat = Literal["json", "pdf"]
PaperSize = Literal["a4", "80mm"]


def _pdf_response(content: bytes, filename: str) -> StreamingResponse:
    headers = {"Content-Disposition": f'inline; filename="{filename}.pdf"'}
    return StreamingResponse(io.BytesIO(content), media_type="application/pdf", headers=headers)


# PUBLIC_INTERFACE
@router.get(
    "/invoices/{sale_id}",
    response_model=InvoicePrintData,
    summary="Invoice print preview",
    description=(
        "Print data for an invoice (company, timbrado, customer, lines, totals and amount in words). "
        "Requires an active timbrado. format=pdf renders the ORIGINAL and DUPLICADO copies."
    ),
    response_description="JSON print data or a PDF stream",
)
async def print_invoice(
    sale_id: UUID = Path(...),
    format: PrintFormat = Query("json", description="json | pdf"),
    size: PaperSize = Query("a4", description="a4 | 80mm (thermal roll)"),
    session: AsyncSession = Depends(get_async_session),
) -> Union[InvoicePrintData, StreamingResponse]:
    data = await PrintService(session).invoice_data(sale_id)
    if format == "pdf":
        return _pdf_response(render_invoice_pdf(data, size=size), f"factura_{data.numero_factura}")
    return data


# PUBLIC_INTERFACE
@router.get(
    "/work-orders/{work_order_id}",
    response_model=WorkOrderPrintData,
    summary="Work order print preview",
    description="Print data for a work order. format=pdf renders it.",
    response_description="JSON print data or a PDF stream",
)
async def print_work_order(
    work_order_id: UUID = Path(...),
    format: PrintFormat = Query("json", description="json | pdf"),
    size: PaperSize = Query("a4", description="a4 | 80mm (thermal roll)"),
    session: AsyncSession = Depends(get_async_session),
) -> Union[WorkOrderPrintData, StreamingResponse]:
    data = await PrintService(session).work_order_data(work_order_id)
    if format == "pdf":
        return _pdf_response(render_work_order_pdf(data, size=size), f"orden_{data.numero}")
    return data
