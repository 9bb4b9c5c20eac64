from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from carwash_api.db.base import Base, TimestampMixin, UUIDPkMixin, utcnow


class User(UUIDPkMixin, TimestampMixin, Base):
    """Operator account with role and subscription usage counters."""
    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    hashed_password: Mapped[str] = mapped_column(Text, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user", server_default="user")

    subscription_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="free", server_default="free"
    )
    monthly_invoice_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=50, server_default="50")
    current_month_invoices: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    usage_reset_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    expiration_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")
    is_blocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")
    last_login: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    failed_login_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
