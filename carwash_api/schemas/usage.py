from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class UsageStats(BaseModel):
    """Invoice usage of the current user in the current period."""
    current_month_invoices: int
    monthly_limit: int
    remaining_invoices: int
    usage_percentage: float = Field(..., description="Percentage of the monthly limit already used")
    days_until_reset: int
    days_until_expiration: Optional[int] = None
    subscription_type: str
    account_status: str = Field(..., description="active | inactive | blocked | expired | limit_reached")


class InvoicePermission(BaseModel):
    """Whether the user may issue another invoice right now."""
    can_create: bool
    reason: Optional[str] = None
    current_usage: Optional[int] = None
    limit: Optional[int] = None
    days_until_reset: Optional[int] = None
    days_until_expiration: Optional[int] = None


class UsageWarningEntry(BaseModel):
    id: UUID
    username: str
    full_name: str
    current_usage: Optional[int] = None
    limit: Optional[int] = None
    usage_percentage: Optional[int] = None
    expiration_date: Optional[datetime] = None
    days_until_expiration: Optional[int] = None
    days_past_expiration: Optional[int] = None


class UsageWarnings(BaseModel):
    """Accounts that need administrator attention."""
    users_near_limit: List[UsageWarningEntry] = Field(default_factory=list)
    users_over_limit: List[UsageWarningEntry] = Field(default_factory=list)
    expiring_soon: List[UsageWarningEntry] = Field(default_factory=list)
    expired: List[UsageWarningEntry] = Field(default_factory=list)
