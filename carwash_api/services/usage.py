"""
Invoice quota of each operator account.

Every account may issue `monthly_invoice_limit` invoices per usage period. A
period starts at `usage_reset_date` and ends one calendar month later, when the
counter goes back to zero on the next check.
"""

from __future__ import annotations

import calendar
import math
from datetime import datetime, timezone
from typing import Optional

from carwash_api.core.settings import get_app_settings
from carwash_api.db.base import utcnow
from carwash_api.db.models.security import User
from carwash_api.repositories.security import UserRepository
from carwash_api.schemas.usage import InvoicePermission, UsageStats, UsageWarningEntry, UsageWarnings
from carwash_api.services.base import BaseService
from carwash_api.services.errors import UsageLimitError


def _aware(moment: datetime) -> datetime:
    return moment if moment.tzinfo else moment.replace(tzinfo=timezone.utc)


def add_month(moment: datetime) -> datetime:
    """Same day next month, clamped to the month's last day."""
    year = moment.year + moment.month // 12
    month = moment.month % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def months_between(start: datetime, end: datetime) -> int:
    """Calendar months from start to end, ignoring the day of month."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def _days_until(moment: datetime, now: datetime) -> int:
    return math.ceil((_aware(moment) - now).total_seconds() / 86400)


def is_expired(user: User, now: Optional[datetime] = None) -> bool:
    if not user.expiration_date:
        return False
    return _aware(user.expiration_date) < (now or utcnow())


def reset_if_new_period(user: User, now: Optional[datetime] = None) -> bool:
    """Zero the counter when at least one calendar month has passed. Returns True when reset."""
    now = now or utcnow()
    if months_between(_aware(user.usage_reset_date), now) >= 1:
        user.current_month_invoices = 0
        user.usage_reset_date = now
        return True
    return False


def in_current_period(user: User, moment: datetime) -> bool:
    return _aware(moment) >= _aware(user.usage_reset_date)


class UsageService(BaseService):
    """Checks and counters for the per-account invoice quota."""

    # PUBLIC_INTERFACE
    async def can_create_invoice(self, user: User) -> InvoicePermission:
        """Evaluate whether user may issue an invoice now, resetting the period counter when due."""
        now = utcnow()
        if not user.is_active:
            return InvoicePermission(can_create=False, reason="Cuenta inactiva")
        if user.is_blocked:
            return InvoicePermission(can_create=False, reason="Cuenta bloqueada")
        if is_expired(user, now):
            return InvoicePermission(can_create=False, reason="Cuenta expirada")

        if reset_if_new_period(user, now):
            await self.commit()

        if user.current_month_invoices >= user.monthly_invoice_limit:
            return InvoicePermission(
                can_create=False,
                reason=f"Ha alcanzado su límite mensual de {user.monthly_invoice_limit} facturas",
                current_usage=user.current_month_invoices,
                limit=user.monthly_invoice_limit,
                days_until_reset=_days_until(add_month(_aware(user.usage_reset_date)), now),
            )

        return InvoicePermission(
            can_create=True,
            current_usage=user.current_month_invoices,
            limit=user.monthly_invoice_limit,
            days_until_expiration=_days_until(user.expiration_date, now) if user.expiration_date else None,
        )

    # PUBLIC_INTERFACE
    async def ensure_can_create_invoice(self, user: User) -> None:
        """Raise UsageLimitError when the quota or account state forbids a new invoice."""
        permission = await self.can_create_invoice(user)
        if not permission.can_create:
            raise UsageLimitError(
                permission.reason or "Límite de uso excedido",
                details=permission.model_dump(exclude_none=True, exclude={"can_create", "reason"}),
            )

    # PUBLIC_INTERFACE
    def stats(self, user: User) -> UsageStats:
        now = utcnow()
        status = "active"
        if not user.is_active:
            status = "inactive"
        elif user.is_blocked:
            status = "blocked"
        elif is_expired(user, now):
            status = "expired"
        elif user.current_month_invoices >= user.monthly_invoice_limit:
            status = "limit_reached"

        limit = user.monthly_invoice_limit
        percentage = (user.current_month_invoices / limit * 100) if limit else 100.0
        return UsageStats(
            current_month_invoices=user.current_month_invoices,
            monthly_limit=limit,
            remaining_invoices=max(0, limit - user.current_month_invoices),
            usage_percentage=round(percentage, 2),
            days_until_reset=_days_until(add_month(_aware(user.usage_reset_date)), now),
            days_until_expiration=_days_until(user.expiration_date, now) if user.expiration_date else None,
            subscription_type=user.subscription_type,
            account_status=status,
        )

    # PUBLIC_INTERFACE
    async def warnings(self) -> UsageWarnings:
        """Active accounts near or over their quota, and accounts expiring or expired."""
        settings = get_app_settings()
        now = utcnow()
        result = UsageWarnings()
        for user in await UserRepository(self.session).list_all_users():
            if not user.is_active:
                continue
            limit = user.monthly_invoice_limit
            percentage = (user.current_month_invoices / limit * 100) if limit else 100.0
            base = {"id": user.id, "username": user.username, "full_name": user.full_name}
            if user.current_month_invoices >= limit:
                result.users_over_limit.append(
                    UsageWarningEntry(**base, current_usage=user.current_month_invoices, limit=limit)
                )
            elif percentage >= settings.USAGE_WARNING_PERCENT:
                result.users_near_limit.append(
                    UsageWarningEntry(
                        **base,
                        current_usage=user.current_month_invoices,
                        limit=limit,
                        usage_percentage=round(percentage),
                    )
                )

            if user.expiration_date:
                days = _days_until(user.expiration_date, now)
                if days < 0:
                    result.expired.append(
                        UsageWarningEntry(**base, expiration_date=user.expiration_date, days_past_expiration=abs(days))
                    )
                elif days <= settings.EXPIRATION_WARNING_DAYS:
                    result.expiring_soon.append(
                        UsageWarningEntry(**base, expiration_date=user.expiration_date, days_until_expiration=days)
                    )
        return result

    # PUBLIC_INTERFACE
    @staticmethod
    def increment(user: User) -> None:
        """Count one more invoice; the caller commits."""
        user.current_month_invoices += 1

    # PUBLIC_INTERFACE
    @staticmethod
    def decrement(user: User) -> None:
        """Give back one invoice, never going below zero; the caller commits."""
        user.current_month_invoices = max(0, user.current_month_invoices - 1)
