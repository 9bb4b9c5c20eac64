"""
Printable invoice and work-order documents.

The print data is a plain structure the desktop client lays out itself; the
same data can be rendered server-side to PDF with reportlab, on A4 or on an
80 mm thermal roll.
"""

from __future__ import annotations

import io
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from carwash_api.core.clock import to_business_time
from carwash_api.core.settings import get_app_settings
from carwash_api.db.models.company import CompanyConfig
from carwash_api.db.models.customers import Customer
from carwash_api.repositories.company import CompanyRepository
from carwash_api.schemas.printing import (
    InvoicePrintData,
    PrintCompany,
    PrintCustomer,
    PrintLine,
    PrintTimbrado,
    PrintVehicle,
    WorkOrderPrintData,
)
from carwash_api.services import fiscal
from carwash_api.services.base import BaseService
from carwash_api.services.company import CompanyService
from carwash_api.services.numerals import amount_in_words
from carwash_api.services.sales import SaleService
from carwash_api.services.work_orders import WorkOrderService

PAYMENT_LABELS = {
    "efectivo": "Efectivo",
    "tarjeta_credito": "Tarjeta de Crédito",
    "tarjeta_debito": "Tarjeta de Débito",
    "transferencia": "Transferencia",
    "cheque": "Cheque",
}

STATUS_LABELS = {
    "recibido": "Recibido",
    "en_proceso": "En Proceso",
    "terminado": "Listo",
    "entregado": "Entregado",
    "cancelado": "Cancelado",
}

TOURISM_CONDITION = "RÉGIMEN DE TURISMO"
ROLL_WIDTH = 80 * mm


def format_guaranies(amount: Decimal) -> str:
    """Gs. with dot thousands separators, e.g. 'Gs. 110.000'."""
    whole = int(fiscal.round_guaranies(amount))
    return "Gs. " + f"{whole:,}".replace(",", ".")


def format_date(moment: date | datetime, with_time: bool = False) -> str:
    """Day (and local business time) as printed on documents."""
    if isinstance(moment, datetime):
        moment = to_business_time(moment)
    if with_time and isinstance(moment, datetime):
        return moment.strftime("%d/%m/%Y %H:%M")
    return moment.strftime("%d/%m/%Y")


def _company_block(config: CompanyConfig) -> PrintCompany:
    return PrintCompany(
        nombre=config.nombre_fantasia or config.razon_social,
        razon_social=config.razon_social,
        ruc=config.ruc,
        direccion=config.direccion,
        ciudad=config.ciudad,
        telefono=config.telefono,
        email=config.email,
    )


def _customer_block(customer: Optional[Customer]) -> PrintCustomer:
    if customer is None:
        return PrintCustomer(nombre="Consumidor Final")
    documento = f"{customer.doc_tipo}: {customer.doc_numero}" if customer.doc_numero else None
    return PrintCustomer(
        nombre=customer.nombre,
        documento=documento,
        telefono=customer.telefono,
        regimen_turismo=customer.regimen_turismo,
        pais=customer.pais,
        pasaporte=customer.pasaporte,
    )


class PrintService(BaseService):
    """Builds print data for invoices and work orders."""

    # PUBLIC_INTERFACE
    async def invoice_data(self, sale_id: UUID) -> InvoicePrintData:
        """
        Assemble the invoice document.

        Raises:
            TimbradoInvalidError: invoices cannot be printed without an active timbrado.
            NotFoundError: unknown sale.
        """
        config = await CompanyService(self.session).require_active_timbrado()
        sale = await SaleService(self.session).get_sale(sale_id)

        work_order_number = None
        if sale.work_order_id:
            order = await WorkOrderService(self.session).repo.get_work_order(sale.work_order_id)
            work_order_number = order.numero if order else None

        status = fiscal.get_timbrado_status(
            config.timbrado_hasta, warning_days=get_app_settings().TIMBRADO_WARNING_DAYS
        )
        tax_pct = int(round(get_app_settings().TAX_RATE * 100))
        return InvoicePrintData(
            company=_company_block(config),
            timbrado=PrintTimbrado(
                numero=sale.timbrado_usado,
                valido_hasta=config.timbrado_hasta,
                establecimiento=config.establecimiento,
                punto_expedicion=config.punto_expedicion,
            ),
            numero_factura=sale.numero_factura,
            fecha=sale.fecha,
            customer=_customer_block(sale.customer),
            condicion=TOURISM_CONDITION if sale.regimen_turismo else None,
            orden_trabajo=work_order_number,
            items=[
                PrintLine(
                    descripcion=i.nombre,
                    cantidad=i.cantidad,
                    precio_unitario=i.precio_unitario,
                    subtotal=i.subtotal,
                )
                for i in sale.items
            ],
            subtotal=sale.subtotal,
            iva_label="IVA (Exento - Turismo)" if sale.regimen_turismo else f"IVA ({tax_pct}%)",
            impuestos=sale.impuestos,
            total=sale.total,
            total_en_letras=amount_in_words(sale.total),
            medio_pago=PAYMENT_LABELS.get(sale.medio_pago, sale.medio_pago),
            timbrado_status=status.status,
        )

    # PUBLIC_INTERFACE
    async def work_order_data(self, work_order_id: UUID) -> WorkOrderPrintData:
        order = await WorkOrderService(self.session).get_work_order(work_order_id)
        config = await CompanyRepository(self.session).get_company_config()
        vehicle = order.vehicle
        return WorkOrderPrintData(
            company=_company_block(config) if config else None,
            numero=order.numero,
            estado=STATUS_LABELS.get(order.estado, order.estado),
            fecha_entrada=order.fecha_entrada,
            fecha_inicio=order.fecha_inicio,
            fecha_fin=order.fecha_fin,
            fecha_entrega=order.fecha_entrega,
            observaciones=order.observaciones,
            customer=_customer_block(order.customer),
            vehicle=PrintVehicle(placa=vehicle.placa, marca=vehicle.marca, modelo=vehicle.modelo, color=vehicle.color),
            items=[
                PrintLine(descripcion=i.nombre, cantidad=i.cantidad, precio_unitario=i.precio, subtotal=i.precio * i.cantidad)
                for i in order.items
            ],
            total=order.total,
        )


def _doc(buffer: io.BytesIO, size: str, content_height: float) -> SimpleDocTemplate:
    if size == "80mm":
        return SimpleDocTemplate(
            buffer,
            pagesize=(ROLL_WIDTH, max(content_height, 120 * mm)),
            leftMargin=3 * mm,
            rightMargin=3 * mm,
            topMargin=4 * mm,
            bottomMargin=4 * mm,
        )
    return SimpleDocTemplate(buffer, pagesize=A4, leftMargin=18 * mm, rightMargin=18 * mm, topMargin=15 * mm, bottomMargin=15 * mm)


def _styles(size: str) -> dict:
    base = getSampleStyleSheet()
    small = size == "80mm"
    body = ParagraphStyle("body", parent=base["Normal"], fontSize=7 if small else 9, leading=9 if small else 12)
    return {
        "title": ParagraphStyle("title", parent=base["Title"], fontSize=11 if small else 16, spaceAfter=4),
        "heading": ParagraphStyle("heading", parent=base["Heading3"], fontSize=8 if small else 11, spaceAfter=2),
        "body": body,
        "center": ParagraphStyle("center", parent=body, alignment=1),
        "bold": ParagraphStyle("bold", parent=body, fontName="Helvetica-Bold"),
    }


def _para(text: str, style: ParagraphStyle) -> Paragraph:
    # Paragraph parses inline markup; customer data is plain text
    return Paragraph(escape(text), style)


def _lines_table(rows: List[List[str]], size: str) -> Table:
    widths = [34 * mm, 8 * mm, 14 * mm, 16 * mm] if size == "80mm" else [85 * mm, 15 * mm, 34 * mm, 40 * mm]
    table = Table(rows, colWidths=widths, repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 6.5 if size == "80mm" else 9),
                ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
                ("LINEBELOW", (0, 0), (-1, 0), 0.5, colors.black),
                ("BACKGROUND", (0, 0), (-1, 0), colors.whitesmoke),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 2),
                ("TOPPADDING", (0, 0), (-1, -1), 2),
            ]
        )
    )
    return table


def _invoice_copy(data: InvoicePrintData, copy_label: str, st: dict, size: str) -> list:
    company = data.company
    elements: list = [
        _para(company.nombre, st["title"]),
        _para(company.razon_social, st["center"]),
        _para(f"RUC: {company.ruc}", st["center"]),
        _para(f"{company.direccion} - {company.ciudad}", st["center"]),
    ]
    if company.telefono:
        elements.append(_para(f"Tel: {company.telefono}", st["center"]))
    elements += [
        Spacer(1, 4),
        _para(f"{data.titulo} - {copy_label}", st["heading"]),
        _para(f"Timbrado N°: {data.timbrado.numero}", st["body"]),
        _para(f"Válido hasta: {format_date(data.timbrado.valido_hasta)}", st["body"]),
        _para(f"Establecimiento: {data.timbrado.establecimiento}", st["body"]),
        _para(f"Punto Expedición: {data.timbrado.punto_expedicion}", st["body"]),
        _para(f"N° {data.numero_factura}", st["bold"]),
        Spacer(1, 4),
        _para(f"Fecha: {format_date(data.fecha, with_time=True)}", st["body"]),
        _para(f"Cliente: {data.customer.nombre}", st["body"]),
    ]
    if data.customer.documento:
        elements.append(_para(f"Documento: {data.customer.documento}", st["body"]))
    if data.condicion:
        elements.append(_para(f"Condición: {data.condicion}", st["bold"]))
    if data.orden_trabajo:
        elements.append(_para(f"Orden de Trabajo: #{data.orden_trabajo}", st["body"]))
    elements.append(Spacer(1, 4))

    rows = [["Descripción", "Cant.", "P. Unit.", "Subtotal"]]
    rows += [
        [line.descripcion, str(line.cantidad), format_guaranies(line.precio_unitario), format_guaranies(line.subtotal)]
        for line in data.items
    ]
    elements.append(_lines_table(rows, size))
    elements += [
        Spacer(1, 4),
        _para(f"Subtotal: {format_guaranies(data.subtotal)}", st["body"]),
        _para(f"{data.iva_label}: {format_guaranies(data.impuestos)}", st["body"]),
        _para(f"TOTAL: {format_guaranies(data.total)}", st["bold"]),
        _para(f"Son: {data.total_en_letras}", st["body"]),
        _para(f"Forma de Pago: {data.medio_pago}", st["body"]),
    ]
    return elements


# PUBLIC_INTERFACE
def render_invoice_pdf(data: InvoicePrintData, size: str = "a4") -> bytes:
    """Render every copy (ORIGINAL, DUPLICADO) of an invoice, one per page."""
    buffer = io.BytesIO()
    st = _styles(size)
    elements: list = []
    for index, copy_label in enumerate(data.copias):
        if index:
            elements.append(PageBreak())
        elements += _invoice_copy(data, copy_label, st, size)
    doc = _doc(buffer, size, content_height=(150 + 12 * len(data.items)) * mm)
    doc.build(elements)
    return buffer.getvalue()


# PUBLIC_INTERFACE
def render_work_order_pdf(data: WorkOrderPrintData, size: str = "a4") -> bytes:
    buffer = io.BytesIO()
    st = _styles(size)
    elements: list = []
    if data.company:
        elements += [
            _para(data.company.nombre, st["title"]),
            _para(f"RUC: {data.company.ruc}", st["center"]),
            _para(f"{data.company.direccion} - {data.company.ciudad}", st["center"]),
        ]
    elements += [
        Spacer(1, 4),
        _para(f"{data.titulo} #{data.numero}", st["heading"]),
        _para(f"Estado: {data.estado}", st["bold"]),
        _para(f"Entrada: {format_date(data.fecha_entrada, with_time=True)}", st["body"]),
    ]
    for label, moment in (("Inicio", data.fecha_inicio), ("Fin", data.fecha_fin), ("Entrega", data.fecha_entrega)):
        if moment:
            elements.append(_para(f"{label}: {format_date(moment, with_time=True)}", st["body"]))
    elements += [
        Spacer(1, 4),
        _para(f"Cliente: {data.customer.nombre}", st["body"]),
    ]
    if data.customer.documento:
        elements.append(_para(f"Documento: {data.customer.documento}", st["body"]))
    if data.customer.telefono:
        elements.append(_para(f"Tel: {data.customer.telefono}", st["body"]))
    vehicle = data.vehicle
    elements.append(
        _para(
            f"Vehículo: {vehicle.marca} {vehicle.modelo} - {vehicle.placa}" + (f" ({vehicle.color})" if vehicle.color else ""),
            st["body"],
        )
    )
    elements.append(Spacer(1, 4))
    rows = [["Servicio", "Cant.", "Precio", "Subtotal"]]
    rows += [
        [line.descripcion, str(line.cantidad), format_guaranies(line.precio_unitario), format_guaranies(line.subtotal)]
        for line in data.items
    ]
    elements.append(_lines_table(rows, size))
    elements += [
        Spacer(1, 4),
        _para(f"TOTAL: {format_guaranies(data.total)}", st["bold"]),
    ]
    if data.observaciones:
        elements.append(_para(f"Observaciones: {data.observaciones}", st["body"]))
    doc = _doc(buffer, size, content_height=(110 + 10 * len(data.items)) * mm)
    doc.build(elements)
    return buffer.getvalue()
