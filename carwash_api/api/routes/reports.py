from __future__ import annotations

import io
from datetime import date, datetime, timezone
from typing import List, Literal, Optional, Union

import pandas as pd
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from carwash_api.core.deps import ANY_ROLE, require_roles
from carwash_api.db.session import get_async_session
from carwash_api.schemas.reports import CustomerPurchases, SalesReport, ServicePopularity
from carwash_api.services.reports import ReportService, resolve_period

# PUBLIC_INTERFACE
router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    dependencies=[Depends(require_roles(*ANY_ROLE))],
)

Period = Literal["day", "week", "month", "quarter", "year", "custom"]
ExportFormat = Literal["json", "csv", "xlsx", "pdf"]


def _export_dataframe(
    df: pd.DataFrame,
    filename_base: str,
    export_format: str,
) -> StreamingResponse:
    """
    Convert DataFrame to the requested format and return a StreamingResponse.

    Supported formats:
      - csv: text/csv
      - xlsx: application/vnd.openxmlformats-officedocument.spreadsheetml.sheet
      - pdf: application/pdf (simple tabular rendering)
    """
    export_format = (export_format or "csv").lower()
    if export_format == "xlsx":
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Reporte")
        buffer.seek(0)
        headers = {"Content-Disposition": f'attachment; filename="{filename_base}.xlsx"'}
        return StreamingResponse(
            buffer,
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            headers=headers,
        )

    if export_format == "pdf":
        from reportlab.lib import colors
        from reportlab.lib.pagesizes import A4, landscape
        from reportlab.lib.styles import getSampleStyleSheet
        from reportlab.platypus import Paragraph, SimpleDocTemplate, Table, TableStyle

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer, pagesize=landscape(A4), leftMargin=18, rightMargin=18, topMargin=18, bottomMargin=18
        )
        styles = getSampleStyleSheet()
        generated = datetime.now(tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
        elements: list = [Paragraph(f"{filename_base.replace('_', ' ').title()} ({generated})", styles["Title"])]

        data = [list(df.columns)] + df.astype(str).values.tolist()
        table = Table(data, repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                    ("TEXTCOLOR", (0, 0), (-1, 0), colors.black),
                    ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 8),
                    ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
                    ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ]
            )
        )
        elements.append(table)
        doc.build(elements)
        buffer.seek(0)
        headers = {"Content-Disposition": f'attachment; filename="{filename_base}.pdf"'}
        return StreamingResponse(buffer, media_type="application/pdf", headers=headers)

    buffer = io.StringIO()
    df.to_csv(buffer, index=False)
    buffer.seek(0)
    headers = {"Content-Disposition": f'attachment; filename="{filename_base}.csv"'}
    return StreamingResponse(buffer, media_type="text/csv", headers=headers)


def _filename(base: str, start: date, end: date) -> str:
    return f"{base}_{start.isoformat()}_{end.isoformat()}"


# PUBLIC_INTERFACE
@router.get(
    "/sales",
    response_model=SalesReport,
    summary="Sales report",
    description=(
        "Daily sales for the period. format=json returns daily aggregates with totals and "
        "average ticket; csv, xlsx and pdf export one row per invoice."
    ),
    response_description="JSON report or file stream (CSV/XLSX/PDF)",
)
async def sales_report(
    session: AsyncSession = Depends(get_async_session),
    period: Period = Query("week", description="day | week | month | quarter | year | custom"),
    date_from: Optional[date] = Query(None, description="First day for period=custom"),
    date_to: Optional[date] = Query(None, description="Last day for period=custom"),
    format: ExportFormat = Query("json", description="json | csv | xlsx | pdf"),
) -> Union[SalesReport, StreamingResponse]:
    start, end = resolve_period(period, date_from, date_to)
    svc = ReportService(session)
    if format == "json":
        return await svc.sales_report(period, start, end)

    rows = await svc.sales_rows(start, end)
    df = pd.DataFrame(
        rows,
        columns=[
            "numero_factura",
            "fecha",
            "cliente",
            "medio_pago",
            "regimen_turismo",
            "subtotal",
            "impuestos",
            "total",
            "timbrado",
        ],
    )
    return _export_dataframe(df, _filename("ventas", start, end), format)


# PUBLIC_INTERFACE
@router.get(
    "/services",
    response_model=List[ServicePopularity],
    summary="Service popularity report",
    description="Units sold and revenue per service and per combo in the period, most sold first.",
    response_description="JSON report or file stream (CSV/XLSX/PDF)",
)
async def services_report(
    session: AsyncSession = Depends(get_async_session),
    period: Period = Query("month", description="day | week | month | quarter | year | custom"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    format: ExportFormat = Query("json", description="json | csv | xlsx | pdf"),
) -> Union[List[ServicePopularity], StreamingResponse]:
    start, end = resolve_period(period, date_from, date_to)
    rows = await ReportService(session).service_popularity(start, end)
    if format == "json":
        return rows

    df = pd.DataFrame(
        [
            {"tipo": r.tipo, "nombre": r.nombre, "cantidad": r.count, "ingresos": float(r.revenue)}
            for r in rows
        ],
        columns=["tipo", "nombre", "cantidad", "ingresos"],
    )
    return _export_dataframe(df, _filename("servicios", start, end), format)


# PUBLIC_INTERFACE
@router.get(
    "/customers",
    response_model=List[CustomerPurchases],
    summary="Customer purchases report",
    description="Invoice count and total per customer in the period, best customers first.",
    response_description="JSON report or file stream (CSV/XLSX/PDF)",
)
async def customers_report(
    session: AsyncSession = Depends(get_async_session),
    period: Period = Query("month", description="day | week | month | quarter | year | custom"),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    format: ExportFormat = Query("json", description="json | csv | xlsx | pdf"),
) -> Union[List[CustomerPurchases], StreamingResponse]:
    start, end = resolve_period(period, date_from, date_to)
    rows = await ReportService(session).customer_purchases(start, end)
    if format == "json":
        return rows

    df = pd.DataFrame(
        [
            {"cliente": r.nombre, "documento": r.documento, "compras": r.purchases, "total": float(r.total)}
            for r in rows
        ],
        columns=["cliente", "documento", "compras", "total"],
    )
    return _export_dataframe(df, _filename("clientes", start, end), format)
