from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Date, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from carwash_api.db.base import Base, TimestampMixin, UUIDPkMixin


class InventoryItem(UUIDPkMixin, TimestampMixin, Base):
    """Product or supply kept in stock, with a derived alert level."""
    __tablename__ = "inventory_items"

    nombre: Mapped[str] = mapped_column(String(255), nullable=False)
    descripcion: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    precio: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    stock_actual: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    stock_minimo: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    unidad_medida: Mapped[str] = mapped_column(String(50), nullable=False, default="unidad", server_default="unidad")
    proveedor: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ultimo_pedido: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    categoria: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    activo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")
    estado_alerta: Mapped[str] = mapped_column(String(10), nullable=False, default="normal", server_default="normal")
