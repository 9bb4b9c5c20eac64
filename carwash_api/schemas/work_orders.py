from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from .customers import CustomerRead, VehicleRead

WorkOrderStatus = Literal["recibido", "en_proceso", "terminado", "entregado", "cancelado"]


class WorkOrderItemInput(BaseModel):
    """Line to add to a work order; nombre and precio are taken from the service or combo when omitted."""
    service_id: Optional[UUID] = None
    combo_id: Optional[UUID] = None
    nombre: Optional[str] = Field(default=None, min_length=1, max_length=255)
    precio: Optional[Decimal] = Field(default=None, gt=0)
    cantidad: int = Field(default=1, ge=1)


class WorkOrderItemRead(BaseModel):
    id: UUID
    work_order_id: UUID
    service_id: Optional[UUID] = None
    combo_id: Optional[UUID] = None
    nombre: str
    precio: Decimal
    cantidad: int
    created_at: datetime

    class Config:
        from_attributes = True


class WorkOrderCreate(BaseModel):
    customer_id: UUID = Field(..., description="Customer ID")
    vehicle_id: UUID = Field(..., description="Vehicle ID (must belong to the customer)")
    observaciones: Optional[str] = None
    items: List[WorkOrderItemInput] = Field(default_factory=list)


class WorkOrderUpdate(BaseModel):
    """Header fields only; status changes go through the status endpoint."""
    customer_id: Optional[UUID] = None
    vehicle_id: Optional[UUID] = None
    observaciones: Optional[str] = None


class WorkOrderStatusUpdate(BaseModel):
    estado: WorkOrderStatus = Field(..., description="Target status")


class WorkOrderRead(BaseModel):
    """Read model for a work order."""
    id: UUID
    numero: int
    customer_id: UUID
    vehicle_id: UUID
    estado: str
    fecha_entrada: datetime
    fecha_inicio: Optional[datetime] = None
    fecha_fin: Optional[datetime] = None
    fecha_entrega: Optional[datetime] = None
    observaciones: Optional[str] = None
    total: Decimal
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class WorkOrderDetail(WorkOrderRead):
    """Work order with its lines, customer and vehicle."""
    items: List[WorkOrderItemRead] = Field(default_factory=list)
    customer: Optional[CustomerRead] = None
    vehicle: Optional[VehicleRead] = None


class NextWorkOrderNumber(BaseModel):
    numero: int
