from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from carwash_api.db.base import Base, TimestampMixin, UUIDPkMixin, utcnow


class Sale(UUIDPkMixin, TimestampMixin, Base):
    """Fiscal invoice header numbered under the active timbrado."""
    __tablename__ = "sales"

    numero_factura: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    customer_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("customers.id"), nullable=True, index=True
    )
    work_order_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("work_orders.id", ondelete="SET NULL"), nullable=True
    )
    fecha: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    impuestos: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    medio_pago: Mapped[str] = mapped_column(String(20), nullable=False)
    regimen_turismo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")
    timbrado_usado: Mapped[str] = mapped_column(String(20), nullable=False)
    created_by: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    items: Mapped[list["SaleItem"]] = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="SaleItem.created_at",
    )
    customer: Mapped[Optional["Customer"]] = relationship("Customer", lazy="selectin")


class SaleItem(UUIDPkMixin, TimestampMixin, Base):
    """Invoice line referencing a service, combo or inventory item."""
    __tablename__ = "sale_items"

    sale_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True
    )
    service_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("services.id", ondelete="SET NULL"), nullable=True
    )
    combo_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("service_combos.id", ondelete="SET NULL"), nullable=True
    )
    inventory_item_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("inventory_items.id", ondelete="SET NULL"), nullable=True
    )
    nombre: Mapped[str] = mapped_column(String(255), nullable=False)
    cantidad: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    precio_unitario: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    sale: Mapped["Sale"] = relationship("Sale", back_populates="items")
