from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

UserRole = Literal["admin", "user", "readonly"]
SubscriptionType = Literal["free", "basic", "premium", "enterprise"]


class TokenPair(BaseModel):
    """Access and refresh tokens returned after login or refresh."""
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Token type")


class RefreshRequest(BaseModel):
    """Request to refresh access token."""
    refresh_token: str = Field(..., description="Refresh token string")


class UserCreate(BaseModel):
    """Admin request to create an operator account."""
    username: str = Field(..., min_length=3, max_length=100, description="Login name (unique)")
    password: str = Field(..., min_length=6, description="Plain password")
    full_name: str = Field(..., min_length=1, max_length=255, description="Full name")
    email: Optional[EmailStr] = Field(default=None, description="Contact email")
    role: UserRole = Field(default="user", description="admin | user | readonly")
    subscription_type: SubscriptionType = Field(default="free")
    monthly_invoice_limit: int = Field(default=50, ge=0, description="Invoices allowed per usage period")
    expiration_date: Optional[datetime] = Field(default=None, description="Account expiration (UTC)")
    is_active: bool = Field(default=True)


class UserUpdate(BaseModel):
    """Partial update of an operator account."""
    username: Optional[str] = Field(default=None, min_length=3, max_length=100)
    password: Optional[str] = Field(default=None, min_length=6)
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    role: Optional[UserRole] = None
    subscription_type: Optional[SubscriptionType] = None
    monthly_invoice_limit: Optional[int] = Field(default=None, ge=0)
    expiration_date: Optional[datetime] = None
    is_active: Optional[bool] = None
    is_blocked: Optional[bool] = None


class ChangePasswordRequest(BaseModel):
    """Password change; current_password is required unless an admin changes another user's password."""
    current_password: Optional[str] = Field(default=None, description="Current password")
    new_password: str = Field(..., min_length=6, description="New password")


class UserRead(BaseModel):
    """Public user profile (never includes the password hash)."""
    id: UUID
    username: str
    full_name: str
    email: Optional[str] = None
    role: str
    subscription_type: str
    monthly_invoice_limit: int
    current_month_invoices: int
    usage_reset_date: datetime
    expiration_date: Optional[datetime] = None
    is_active: bool
    is_blocked: bool
    last_login: Optional[datetime] = None
    failed_login_attempts: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
