from __future__ import annotations

from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carwash_api.db.base import Base, TimestampMixin, UUIDPkMixin


class Category(UUIDPkMixin, TimestampMixin, Base):
    """Grouping for services and products, with a display color."""
    __tablename__ = "categories"

    nombre: Mapped[str] = mapped_column(String(255), nullable=False)
    descripcion: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tipo: Mapped[str] = mapped_column(String(20), nullable=False, default="ambos", server_default="ambos")
    color: Mapped[Optional[str]] = mapped_column(String(7), nullable=True)
    activa: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")


class Service(UUIDPkMixin, TimestampMixin, Base):
    """Washing service offered at a fixed price."""
    __tablename__ = "services"

    nombre: Mapped[str] = mapped_column(String(255), nullable=False)
    descripcion: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    precio: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    duracion_min: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    categoria: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    activo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")


class ServiceCombo(UUIDPkMixin, TimestampMixin, Base):
    """Bundle of two or more services sold at a combined price."""
    __tablename__ = "service_combos"

    nombre: Mapped[str] = mapped_column(String(255), nullable=False)
    descripcion: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    precio_total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    activo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")

    services: Mapped[list["Service"]] = relationship(
        "Service",
        secondary="service_combo_items",
        lazy="selectin",
        viewonly=True,
        order_by="Service.nombre",
    )


class ServiceComboItem(UUIDPkMixin, Base):
    """Association between a combo and one of its services."""
    __tablename__ = "service_combo_items"
    __table_args__ = (
        UniqueConstraint("combo_id", "service_id", name="uq_service_combo_items_combo_service"),
    )

    combo_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("service_combos.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("services.id", ondelete="CASCADE"), nullable=False
    )
