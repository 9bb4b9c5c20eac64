from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from .customers import CustomerRead

PaymentMethod = Literal["efectivo", "tarjeta_credito", "tarjeta_debito", "transferencia", "cheque"]


class SaleItemInput(BaseModel):
    """Invoice line. At most one of service_id, combo_id or inventory_item_id may be set."""
    service_id: Optional[UUID] = None
    combo_id: Optional[UUID] = None
    inventory_item_id: Optional[UUID] = None
    nombre: str = Field(..., min_length=1, max_length=255)
    cantidad: int = Field(default=1, ge=1)
    precio_unitario: Decimal = Field(..., gt=0)

    @model_validator(mode="after")
    def _single_reference(self) -> "SaleItemInput":
        refs = [r for r in (self.service_id, self.combo_id, self.inventory_item_id) if r is not None]
        if len(refs) > 1:
            raise ValueError("Only one of service_id, combo_id or inventory_item_id may be set")
        return self


class SaleCreate(BaseModel):
    """
    New invoice.

    Totals are computed on the server; subtotal, impuestos and total may be sent
    to cross-check what the cashier saw and are rejected when they differ.
    """
    customer_id: Optional[UUID] = None
    work_order_id: Optional[UUID] = None
    medio_pago: PaymentMethod
    fecha: Optional[datetime] = None
    items: List[SaleItemInput] = Field(default_factory=list)
    subtotal: Optional[Decimal] = None
    impuestos: Optional[Decimal] = None
    total: Optional[Decimal] = None


class SaleFromOrderCreate(BaseModel):
    """Invoice a work order; lines default to the order's lines."""
    work_order_id: UUID
    medio_pago: PaymentMethod
    items: Optional[List[SaleItemInput]] = None


class SaleUpdate(BaseModel):
    medio_pago: Optional[PaymentMethod] = None
    fecha: Optional[datetime] = None
    items: Optional[List[SaleItemInput]] = Field(default=None, description="Replaces every line when given")


class SaleItemRead(BaseModel):
    id: UUID
    sale_id: UUID
    service_id: Optional[UUID] = None
    combo_id: Optional[UUID] = None
    inventory_item_id: Optional[UUID] = None
    nombre: str
    cantidad: int
    precio_unitario: Decimal
    subtotal: Decimal

    class Config:
        from_attributes = True


class SaleRead(BaseModel):
    """Read model for an invoice."""
    id: UUID
    numero_factura: str
    customer_id: Optional[UUID] = None
    work_order_id: Optional[UUID] = None
    fecha: datetime
    subtotal: Decimal
    impuestos: Decimal
    total: Decimal
    medio_pago: str
    regimen_turismo: bool
    timbrado_usado: str
    created_by: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SaleDetail(SaleRead):
    items: List[SaleItemRead] = Field(default_factory=list)
    customer: Optional[CustomerRead] = None


class SaleCreatedResponse(BaseModel):
    sale: SaleDetail
    invoice_number: str
    timbrado: str


class SaleUpdatedResponse(BaseModel):
    message: str
    sale: SaleDetail
    hours_elapsed: int
    modified_by: str


class SaleDeletedResponse(BaseModel):
    message: str
    deleted_invoice: str
    hours_elapsed: int
    deleted_by: str
