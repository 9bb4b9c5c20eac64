from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carwash_api.db.base import Base, TimestampMixin, UUIDPkMixin, utcnow


class WorkOrder(UUIDPkMixin, TimestampMixin, Base):
    """Work order for a vehicle, moving through recibido → en_proceso → terminado → entregado."""
    __tablename__ = "work_orders"

    numero: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    customer_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("customers.id"), nullable=False, index=True
    )
    vehicle_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("vehicles.id"), nullable=False, index=True
    )
    estado: Mapped[str] = mapped_column(String(20), nullable=False, default="recibido", server_default="recibido")
    fecha_entrada: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    fecha_inicio: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    fecha_fin: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    fecha_entrega: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    observaciones: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))

    items: Mapped[list["WorkOrderItem"]] = relationship(
        "WorkOrderItem",
        back_populates="work_order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="WorkOrderItem.created_at",
    )
    customer: Mapped["Customer"] = relationship("Customer", lazy="selectin")
    vehicle: Mapped["Vehicle"] = relationship("Vehicle", lazy="selectin")


class WorkOrderItem(UUIDPkMixin, TimestampMixin, Base):
    """Service or combo line on a work order."""
    __tablename__ = "work_order_items"

    work_order_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("work_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("services.id", ondelete="SET NULL"), nullable=True
    )
    combo_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("service_combos.id", ondelete="SET NULL"), nullable=True
    )
    nombre: Mapped[str] = mapped_column(String(255), nullable=False)
    precio: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    cantidad: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    work_order: Mapped["WorkOrder"] = relationship("WorkOrder", back_populates="items")
