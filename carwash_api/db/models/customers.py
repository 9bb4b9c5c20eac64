from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, Date, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carwash_api.db.base import Base, TimestampMixin, UUIDPkMixin


class Customer(UUIDPkMixin, TimestampMixin, Base):
    """Customer master, including tourism-regime data for tax exemption."""
    __tablename__ = "customers"

    nombre: Mapped[str] = mapped_column(String(255), nullable=False)
    doc_tipo: Mapped[str] = mapped_column(String(20), nullable=False, default="CI", server_default="CI")
    doc_numero: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    telefono: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    direccion: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    regimen_turismo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")
    pais: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    pasaporte: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    fecha_ingreso: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    vehicles: Mapped[list["Vehicle"]] = relationship(
        "Vehicle", back_populates="customer", cascade="all, delete-orphan", passive_deletes=True
    )


class Vehicle(UUIDPkMixin, TimestampMixin, Base):
    """Vehicle owned by a customer."""
    __tablename__ = "vehicles"

    customer_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    placa: Mapped[str] = mapped_column(String(20), nullable=False)
    marca: Mapped[str] = mapped_column(String(50), nullable=False)
    modelo: Mapped[str] = mapped_column(String(50), nullable=False)
    color: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    observaciones: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    customer: Mapped["Customer"] = relationship("Customer", back_populates="vehicles")
