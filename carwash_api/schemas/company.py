from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class CompanyConfigUpsert(BaseModel):
    """Fiscal identity and timbrado of the business."""
    ruc: str = Field(..., min_length=1, description="RUC in NNNNNNNN-D format")
    razon_social: str = Field(..., min_length=1, description="Registered business name")
    nombre_fantasia: Optional[str] = Field(default=None, description="Trade name printed on invoices")
    timbrado_numero: str = Field(..., min_length=1, max_length=20, description="Timbrado number")
    timbrado_desde: date = Field(..., description="Timbrado valid from")
    timbrado_hasta: date = Field(..., description="Timbrado valid until")
    establecimiento: str = Field(default="001", pattern=r"^\d{3}$", description="Establishment code")
    punto_expedicion: str = Field(default="001", pattern=r"^\d{3}$", description="Issuing point code")
    direccion: str = Field(..., min_length=1, description="Fiscal address")
    ciudad: str = Field(default="Asunción")
    telefono: Optional[str] = None
    email: Optional[EmailStr] = None
    logo_path: Optional[str] = None
    moneda: str = Field(default="GS", max_length=3)


class CompanyConfigRead(BaseModel):
    """Read model for the company configuration."""
    id: UUID
    ruc: str
    razon_social: str
    nombre_fantasia: Optional[str] = None
    timbrado_numero: str
    timbrado_desde: date
    timbrado_hasta: date
    establecimiento: str
    punto_expedicion: str
    direccion: str
    ciudad: str
    telefono: Optional[str] = None
    email: Optional[str] = None
    logo_path: Optional[str] = None
    moneda: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CompanyConfigSaved(BaseModel):
    """Result of saving the company configuration."""
    config: CompanyConfigRead
    warning: Optional[str] = Field(default=None, description="Non-blocking timbrado warning")


class TimbradoStatusInfo(BaseModel):
    status: str = Field(..., description="valid | warning | expired")
    color: str
    message: str
    days_until_expiration: int


class TimbradoStatusResponse(BaseModel):
    """Whether invoices can be issued with the configured timbrado."""
    configured: bool
    is_valid: bool
    blocks_invoicing: bool
    error: Optional[str] = None
    status: Optional[TimbradoStatusInfo] = None
    timbrado_numero: Optional[str] = None
    timbrado_hasta: Optional[date] = None


class DnitConfigUpsert(BaseModel):
    """
    DNIT electronic invoicing settings.

    Sending a value made only of '•' characters for a secret keeps the stored one.
    """
    endpoint_url: str = Field(..., pattern=r"^https?://", description="DNIT service URL")
    auth_token: str = Field(..., min_length=1, description="Bearer token for the DNIT service")
    certificate_data: Optional[str] = Field(default=None, description="Base64 certificate")
    certificate_password: Optional[str] = None
    operation_mode: Literal["testing", "production"] = "testing"
    is_active: bool = False


class DnitConfigSafe(BaseModel):
    """DNIT configuration without secrets."""
    id: UUID
    endpoint_url: str
    operation_mode: str
    is_active: bool
    has_auth_token: bool
    has_certificate: bool
    has_certificate_password: bool
    last_connection_test: Optional[datetime] = None
    last_connection_status: Optional[str] = None
    last_connection_error: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class DnitConnectionResult(BaseModel):
    success: bool
    error: Optional[str] = None
    status_code: Optional[int] = Field(default=None, description="HTTP status returned by the endpoint")
