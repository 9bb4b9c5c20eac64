from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class PrintCompany(BaseModel):
    nombre: str = Field(..., description="Trade name, or razón social when there is none")
    razon_social: str
    ruc: str
    direccion: str
    ciudad: str
    telefono: Optional[str] = None
    email: Optional[str] = None


class PrintTimbrado(BaseModel):
    numero: str
    valido_hasta: date
    establecimiento: str
    punto_expedicion: str


class PrintCustomer(BaseModel):
    nombre: str
    documento: Optional[str] = None
    telefono: Optional[str] = None
    regimen_turismo: bool = False
    pais: Optional[str] = None
    pasaporte: Optional[str] = None


class PrintLine(BaseModel):
    descripcion: str
    cantidad: int
    precio_unitario: Decimal
    subtotal: Decimal


class InvoicePrintData(BaseModel):
    """Everything the invoice layout needs, ready to render."""
    titulo: str = "FACTURA"
    company: PrintCompany
    timbrado: PrintTimbrado
    numero_factura: str
    fecha: datetime
    customer: PrintCustomer
    condicion: Optional[str] = Field(default=None, description="'RÉGIMEN DE TURISMO' for exempt sales")
    orden_trabajo: Optional[int] = None
    items: List[PrintLine]
    subtotal: Decimal
    iva_label: str
    impuestos: Decimal
    total: Decimal
    total_en_letras: str
    medio_pago: str
    copias: List[str] = Field(default_factory=lambda: ["ORIGINAL", "DUPLICADO"])
    timbrado_status: str


class PrintVehicle(BaseModel):
    placa: str
    marca: str
    modelo: str
    color: Optional[str] = None


class WorkOrderPrintData(BaseModel):
    """Work order sheet handed to the washer and to the customer."""
    titulo: str = "ORDEN DE TRABAJO"
    company: Optional[PrintCompany] = None
    numero: int
    estado: str
    fecha_entrada: datetime
    fecha_inicio: Optional[datetime] = None
    fecha_fin: Optional[datetime] = None
    fecha_entrega: Optional[datetime] = None
    observaciones: Optional[str] = None
    customer: PrintCustomer
    vehicle: PrintVehicle
    items: List[PrintLine]
    total: Decimal
