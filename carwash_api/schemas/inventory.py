from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class InventoryItemCreate(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=255, description="Item name")
    descripcion: Optional[str] = None
    precio: Decimal = Field(..., gt=0, description="Unit sale price")
    stock_actual: int = Field(default=0, ge=0)
    stock_minimo: int = Field(default=0, ge=0)
    unidad_medida: str = Field(default="unidad", max_length=50)
    proveedor: Optional[str] = None
    ultimo_pedido: Optional[date] = None
    categoria: Optional[str] = None
    activo: bool = True


class InventoryItemUpdate(BaseModel):
    nombre: Optional[str] = Field(default=None, min_length=1, max_length=255)
    descripcion: Optional[str] = None
    precio: Optional[Decimal] = Field(default=None, gt=0)
    stock_actual: Optional[int] = Field(default=None, ge=0)
    stock_minimo: Optional[int] = Field(default=None, ge=0)
    unidad_medida: Optional[str] = Field(default=None, max_length=50)
    proveedor: Optional[str] = None
    ultimo_pedido: Optional[date] = None
    categoria: Optional[str] = None
    activo: Optional[bool] = None


class StockAdjustment(BaseModel):
    """Add or remove units from stock."""
    action: Literal["add", "remove"] = Field(..., description="add | remove")
    quantity: int = Field(..., gt=0, description="Units to add or remove")


class InventoryItemRead(BaseModel):
    """Read model for an inventory item."""
    id: UUID = Field(..., description="Item ID")
    nombre: str
    descripcion: Optional[str] = None
    precio: Decimal
    stock_actual: int
    stock_minimo: int
    unidad_medida: str
    proveedor: Optional[str] = None
    ultimo_pedido: Optional[date] = None
    categoria: Optional[str] = None
    activo: bool
    estado_alerta: str = Field(..., description="normal | bajo | critico")
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
