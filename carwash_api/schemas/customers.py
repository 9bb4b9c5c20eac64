from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

DocType = Literal["CI", "Pasaporte", "RUC", "Extranjero"]


class CustomerCreate(BaseModel):
    """
    Customer data.

    Tourism-regime customers must provide pais, pasaporte and fecha_ingreso;
    RUC documents must carry a valid check digit.
    """
    nombre: str = Field(..., min_length=1, max_length=255, description="Full name or business name")
    doc_tipo: DocType = Field(default="CI", description="Document type")
    doc_numero: str = Field(..., min_length=1, max_length=50, description="Document number")
    email: Optional[EmailStr] = None
    telefono: Optional[str] = None
    direccion: Optional[str] = None
    regimen_turismo: bool = Field(default=False, description="IVA-exempt tourism regime")
    pais: Optional[str] = None
    pasaporte: Optional[str] = None
    fecha_ingreso: Optional[date] = Field(default=None, description="Date of entry into the country")


class CustomerUpdate(BaseModel):
    nombre: Optional[str] = Field(default=None, min_length=1, max_length=255)
    doc_tipo: Optional[DocType] = None
    doc_numero: Optional[str] = Field(default=None, min_length=1, max_length=50)
    email: Optional[EmailStr] = None
    telefono: Optional[str] = None
    direccion: Optional[str] = None
    regimen_turismo: Optional[bool] = None
    pais: Optional[str] = None
    pasaporte: Optional[str] = None
    fecha_ingreso: Optional[date] = None


class CustomerRead(BaseModel):
    """Read model for a customer."""
    id: UUID
    nombre: str
    doc_tipo: str
    doc_numero: Optional[str] = None
    email: Optional[str] = None
    telefono: Optional[str] = None
    direccion: Optional[str] = None
    regimen_turismo: bool
    pais: Optional[str] = None
    pasaporte: Optional[str] = None
    fecha_ingreso: Optional[date] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VehicleCreate(BaseModel):
    customer_id: UUID = Field(..., description="Owner")
    placa: str = Field(..., min_length=1, max_length=20, description="License plate")
    marca: str = Field(..., min_length=1, max_length=50)
    modelo: str = Field(..., min_length=1, max_length=50)
    color: Optional[str] = Field(default=None, max_length=30)
    observaciones: Optional[str] = None


class VehicleUpdate(BaseModel):
    customer_id: Optional[UUID] = None
    placa: Optional[str] = Field(default=None, min_length=1, max_length=20)
    marca: Optional[str] = Field(default=None, min_length=1, max_length=50)
    modelo: Optional[str] = Field(default=None, min_length=1, max_length=50)
    color: Optional[str] = Field(default=None, max_length=30)
    observaciones: Optional[str] = None


class VehicleRead(BaseModel):
    """Read model for a vehicle."""
    id: UUID
    customer_id: UUID
    placa: str
    marca: str
    modelo: str
    color: Optional[str] = None
    observaciones: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
