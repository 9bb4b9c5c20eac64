from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from carwash_api.db.base import Base, TimestampMixin, UUIDPkMixin


class CompanyConfig(UUIDPkMixin, TimestampMixin, Base):
    """Fiscal identity of the business and its current timbrado (single row)."""
    __tablename__ = "company_configs"

    ruc: Mapped[str] = mapped_column(String(20), nullable=False)
    razon_social: Mapped[str] = mapped_column(String(255), nullable=False)
    nombre_fantasia: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    timbrado_numero: Mapped[str] = mapped_column(String(20), nullable=False)
    timbrado_desde: Mapped[date] = mapped_column(Date, nullable=False)
    timbrado_hasta: Mapped[date] = mapped_column(Date, nullable=False)
    establecimiento: Mapped[str] = mapped_column(String(3), nullable=False, default="001", server_default="001")
    punto_expedicion: Mapped[str] = mapped_column(String(3), nullable=False, default="001", server_default="001")
    direccion: Mapped[str] = mapped_column(Text, nullable=False)
    ciudad: Mapped[str] = mapped_column(String(100), nullable=False, default="Asunción")
    telefono: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    logo_path: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    moneda: Mapped[str] = mapped_column(String(3), nullable=False, default="GS", server_default="GS")


class DnitConfig(UUIDPkMixin, TimestampMixin, Base):
    """Electronic invoicing endpoint and credentials (secrets stored encrypted)."""
    __tablename__ = "dnit_configs"

    endpoint_url: Mapped[str] = mapped_column(Text, nullable=False)
    auth_token: Mapped[str] = mapped_column(Text, nullable=False)
    certificate_data: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    certificate_password: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    operation_mode: Mapped[str] = mapped_column(
        String(20), nullable=False, default="testing", server_default="testing"
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")
    last_connection_test: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    last_connection_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    last_connection_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
