from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

CategoryType = Literal["servicios", "productos", "ambos"]


class CategoryCreate(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=255)
    descripcion: Optional[str] = None
    tipo: CategoryType = "ambos"
    color: Optional[str] = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$", description="Hex color #RRGGBB")
    activa: bool = True

    @field_validator("color")
    @classmethod
    def _upper_color(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v


class CategoryUpdate(BaseModel):
    nombre: Optional[str] = Field(default=None, min_length=1, max_length=255)
    descripcion: Optional[str] = None
    tipo: Optional[CategoryType] = None
    color: Optional[str] = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
    activa: Optional[bool] = None

    @field_validator("color")
    @classmethod
    def _upper_color(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v


class CategoryRead(BaseModel):
    """Read model for a catalog category."""
    id: UUID
    nombre: str
    descripcion: Optional[str] = None
    tipo: str
    color: Optional[str] = None
    activa: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ServiceCreate(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=255, description="Service name")
    descripcion: Optional[str] = None
    precio: Decimal = Field(..., gt=0, description="Price in guaraníes")
    duracion_min: Optional[int] = Field(default=None, gt=0, description="Estimated duration in minutes")
    categoria: Optional[str] = None
    activo: bool = True


class ServiceUpdate(BaseModel):
    nombre: Optional[str] = Field(default=None, min_length=1, max_length=255)
    descripcion: Optional[str] = None
    precio: Optional[Decimal] = Field(default=None, gt=0)
    duracion_min: Optional[int] = Field(default=None, gt=0)
    categoria: Optional[str] = None
    activo: Optional[bool] = None


class ServiceRead(BaseModel):
    """Read model for a washing service."""
    id: UUID
    nombre: str
    descripcion: Optional[str] = None
    precio: Decimal
    duracion_min: Optional[int] = None
    categoria: Optional[str] = None
    activo: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ServiceComboCreate(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=255, description="Combo name")
    descripcion: Optional[str] = None
    precio_total: Decimal = Field(..., gt=0, description="Combined price")
    activo: bool = True
    service_ids: List[UUID] = Field(..., description="Services included (at least two distinct)")


class ServiceComboUpdate(BaseModel):
    nombre: Optional[str] = Field(default=None, min_length=1, max_length=255)
    descripcion: Optional[str] = None
    precio_total: Optional[Decimal] = Field(default=None, gt=0)
    activo: Optional[bool] = None
    service_ids: Optional[List[UUID]] = Field(default=None, description="Replaces the combo services when given")


class ServiceComboRead(BaseModel):
    """Read model for a combo, with its services."""
    id: UUID
    nombre: str
    descripcion: Optional[str] = None
    precio_total: Decimal
    activo: bool
    services: List[ServiceRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
