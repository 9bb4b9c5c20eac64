from __future__ import annotations

from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application-level settings for the FastAPI service.

    This is separate from carwash_api.db.config.Settings, which focuses on the database layer.
    """

    # FastAPI metadata
    APP_NAME: str = Field(default="Car Wash POS API")
    APP_DESCRIPTION: str = Field(
        default=(
            "Backend API for a car-wash point of sale: customers, vehicles, services, "
            "work orders, inventory and invoicing under Paraguayan fiscal rules."
        )
    )
    APP_VERSION: str = Field(default="0.1.0")

    # CORS
    CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Comma-separated list or JSON array of allowed origins. Default: *",
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True)
    CORS_ALLOW_METHODS: List[str] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_HEADERS: List[str] = Field(default_factory=lambda: ["*"])

    # Startup behavior
    RUN_MIGRATIONS_ON_STARTUP: bool = Field(
        default=True,
        description="If true, run Alembic migrations (upgrade head) at app startup.",
    )
    AUTO_SEED: bool = Field(
        default=True,
        description="If true, create the initial administrator and default categories after migrations.",
    )

    # Auth / JWT
    JWT_SECRET_KEY: str = Field(
        default="change-me-in-production",
        description="Secret used to sign access and refresh tokens.",
    )
    JWT_ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 8)
    REFRESH_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24 * 7)

    # Initial administrator created by the seeder
    ADMIN_USERNAME: str = Field(default="admin")
    ADMIN_PASSWORD: str = Field(default="admin123", min_length=6)
    ADMIN_FULL_NAME: str = Field(default="Administrador")

    # Local calendar used for "today", report days and date filters
    BUSINESS_TIMEZONE: str = Field(default="America/Asuncion", description="IANA timezone of the business.")

    # Fiscal rules
    TAX_RATE: float = Field(default=0.10, description="IVA rate applied to non-tourism sales.")
    SALE_MODIFICATION_WINDOW_HOURS: int = Field(
        default=24, description="Hours after creation during which an admin may edit or delete a sale."
    )
    TIMBRADO_WARNING_DAYS: int = Field(default=30)
    TIMBRADO_MAX_AGE_YEARS: int = Field(default=5)

    # Subscription usage
    USAGE_WARNING_PERCENT: int = Field(default=80)
    EXPIRATION_WARNING_DAYS: int = Field(default=7)

    # Secret used to derive the key that encrypts DNIT credentials at rest
    DNIT_ENCRYPTION_KEY: Optional[str] = Field(
        default=None,
        description="At least 32 characters. A development key is used when unset.",
    )
    DNIT_TIMEOUT_SECONDS: float = Field(default=10.0)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    # Desktop launcher
    DESKTOP_HOST: str = Field(default="127.0.0.1")
    DESKTOP_PORT: Optional[int] = Field(default=None, description="Fixed port; a free port is chosen when unset.")
    DESKTOP_OPEN_BROWSER: bool = Field(default=True)

    # Environment label
    ENVIRONMENT: Optional[str] = Field(
        default=None, description="Environment label (dev/test/prod)"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        """
        Accept both JSON array format and comma-separated formats for CORS origins.
        """
        if v is None:
            return ["*"]
        if isinstance(v, str):
            parts = [p.strip() for p in v.split(",") if p.strip()]
            return parts or ["*"]
        if isinstance(v, list):
            return v or ["*"]
        return ["*"]


# PUBLIC_INTERFACE
def get_app_settings() -> AppSettings:
    """
    Return a new AppSettings instance populated from environment variables.

    A fresh instance is built on each call so tests can adjust the environment.
    """
    return AppSettings()
