from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Tuple

import httpx

from carwash_api.core.encryption import decrypt_secret, encrypt_secret, is_placeholder
from carwash_api.core.settings import get_app_settings
from carwash_api.db.base import utcnow
from carwash_api.db.models.company import CompanyConfig, DnitConfig
from carwash_api.repositories.company import CompanyRepository
from carwash_api.schemas.company import (
    CompanyConfigUpsert,
    DnitConfigSafe,
    DnitConfigUpsert,
    DnitConnectionResult,
    TimbradoStatusInfo,
    TimbradoStatusResponse,
)
from carwash_api.services import fiscal
from carwash_api.services.base import BaseService
from carwash_api.services.errors import BusinessRuleError, NotFoundError, TimbradoInvalidError

logger = logging.getLogger(__name__)


class CompanyService(BaseService):
    """Company fiscal identity and timbrado checks."""

    def __init__(self, session) -> None:
        super().__init__(session)
        self.repo = CompanyRepository(session)

    # PUBLIC_INTERFACE
    async def get_config(self) -> Optional[CompanyConfig]:
        return await self.repo.get_company_config()

    # PUBLIC_INTERFACE
    async def save_config(self, payload: CompanyConfigUpsert) -> Tuple[CompanyConfig, Optional[str]]:
        """
        Create or replace the company configuration.

        Returns:
            The saved row and an optional timbrado warning (expiring soon).
        Raises:
            BusinessRuleError: invalid RUC or timbrado dates.
        """
        settings = get_app_settings()
        ruc = fiscal.validate_ruc(payload.ruc)
        if not ruc.is_valid:
            raise BusinessRuleError(ruc.error or "RUC inválido", details={"field": "ruc"})

        dates = fiscal.validate_timbrado_dates(
            payload.timbrado_desde,
            payload.timbrado_hasta,
            warning_days=settings.TIMBRADO_WARNING_DAYS,
            max_age_years=settings.TIMBRADO_MAX_AGE_YEARS,
        )
        if not dates.is_valid:
            raise BusinessRuleError(dates.error or "Fechas de timbrado inválidas", details={"field": "timbrado_hasta"})

        values = payload.model_dump()
        values["ruc"] = payload.ruc.strip()
        values["email"] = str(payload.email) if payload.email else None

        config = await self.repo.get_company_config()
        if config is None:
            config = CompanyConfig(**values)
            await self.repo.add(config)
        else:
            for key, value in values.items():
                setattr(config, key, value)
        await self.commit()
        logger.info("Company configuration saved (timbrado %s)", config.timbrado_numero)
        return config, dates.warning

    # PUBLIC_INTERFACE
    async def timbrado_status(self, today: Optional[date] = None) -> TimbradoStatusResponse:
        settings = get_app_settings()
        config = await self.repo.get_company_config()
        check = fiscal.validate_active_timbrado(config, today)
        if config is None:
            return TimbradoStatusResponse(
                configured=False, is_valid=False, blocks_invoicing=True, error=check.error
            )
        status = None
        if config.timbrado_hasta:
            st = fiscal.get_timbrado_status(config.timbrado_hasta, today, warning_days=settings.TIMBRADO_WARNING_DAYS)
            status = TimbradoStatusInfo(
                status=st.status, color=st.color, message=st.message, days_until_expiration=st.days_until_expiration
            )
        return TimbradoStatusResponse(
            configured=True,
            is_valid=check.is_valid,
            blocks_invoicing=check.blocks_invoicing,
            error=check.error,
            status=status,
            timbrado_numero=config.timbrado_numero,
            timbrado_hasta=config.timbrado_hasta,
        )

    # PUBLIC_INTERFACE
    async def require_active_timbrado(self, today: Optional[date] = None) -> CompanyConfig:
        """Return the configuration when it authorizes invoicing, else raise TimbradoInvalidError."""
        config = await self.repo.get_company_config()
        check = fiscal.validate_active_timbrado(config, today)
        if not check.is_valid or config is None:
            raise TimbradoInvalidError(
                check.error or "Timbrado inválido",
                details={"blocks_invoicing": check.blocks_invoicing},
            )
        return config


def _dnit_safe(config: DnitConfig) -> DnitConfigSafe:
    return DnitConfigSafe(
        id=config.id,
        endpoint_url=config.endpoint_url,
        operation_mode=config.operation_mode,
        is_active=config.is_active,
        has_auth_token=bool(config.auth_token),
        has_certificate=bool(config.certificate_data),
        has_certificate_password=bool(config.certificate_password),
        last_connection_test=config.last_connection_test,
        last_connection_status=config.last_connection_status,
        last_connection_error=config.last_connection_error,
        created_at=config.created_at,
        updated_at=config.updated_at,
    )


class DnitService(BaseService):
    """DNIT electronic invoicing configuration; secrets are encrypted at rest and never returned."""

    def __init__(self, session) -> None:
        super().__init__(session)
        self.repo = CompanyRepository(session)

    # PUBLIC_INTERFACE
    async def get_safe(self) -> Optional[DnitConfigSafe]:
        config = await self.repo.get_dnit_config()
        return _dnit_safe(config) if config else None

    # PUBLIC_INTERFACE
    async def save(self, payload: DnitConfigUpsert) -> DnitConfigSafe:
        """Upsert the configuration. Placeholder secrets ('••••') keep the stored value."""
        config = await self.repo.get_dnit_config()
        if config is None:
            if is_placeholder(payload.auth_token):
                raise BusinessRuleError("Token de autenticación requerido")
            config = DnitConfig(
                endpoint_url=payload.endpoint_url,
                auth_token=encrypt_secret(payload.auth_token),
                certificate_data=payload.certificate_data,
                certificate_password=encrypt_secret(payload.certificate_password),
                operation_mode=payload.operation_mode,
                is_active=payload.is_active,
            )
            await self.repo.add(config)
        else:
            config.endpoint_url = payload.endpoint_url
            config.operation_mode = payload.operation_mode
            config.is_active = payload.is_active
            if not is_placeholder(payload.auth_token):
                config.auth_token = encrypt_secret(payload.auth_token)
            if payload.certificate_data is not None and not is_placeholder(payload.certificate_data):
                config.certificate_data = payload.certificate_data
            if payload.certificate_password is not None and not is_placeholder(payload.certificate_password):
                config.certificate_password = encrypt_secret(payload.certificate_password)
        await self.commit()
        return _dnit_safe(config)

    # PUBLIC_INTERFACE
    async def delete(self) -> None:
        config = await self.repo.get_dnit_config()
        if config is None:
            raise NotFoundError("Configuración DNIT no encontrada")
        await self.repo.delete(config)
        await self.commit()

    # PUBLIC_INTERFACE
    async def test_connection(self) -> DnitConnectionResult:
        """
        Call the configured endpoint with the stored bearer token and record the outcome.

        Any HTTP response below 500 counts as reachable, except 401/403 which
        report a rejected token.
        """
        config = await self.repo.get_dnit_config()
        if config is None:
            raise NotFoundError("Debe configurar DNIT antes de probar la conexión")

        result = await self._ping_endpoint(config)
        config.last_connection_test = utcnow()
        config.last_connection_status = "success" if result.success else "failed"
        config.last_connection_error = result.error
        await self.commit()
        return result

    async def _ping_endpoint(self, config: DnitConfig) -> DnitConnectionResult:
        if not config.endpoint_url or not config.endpoint_url.startswith("http"):
            return DnitConnectionResult(success=False, error="URL del endpoint inválida")
        token = decrypt_secret(config.auth_token)
        if not token:
            return DnitConnectionResult(success=False, error="Token de autenticación requerido")

        headers = {"Authorization": f"Bearer {token}", "Accept": "application/json"}
        try:
            async with httpx.AsyncClient(timeout=get_app_settings().DNIT_TIMEOUT_SECONDS) as client:
                resp = await client.get(config.endpoint_url, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("DNIT connection test failed: %s", exc)
            return DnitConnectionResult(success=False, error=f"Error de conexión: {exc}")

        if resp.status_code in (401, 403):
            return DnitConnectionResult(
                success=False, error="Token de autenticación rechazado", status_code=resp.status_code
            )
        if resp.status_code >= 500:
            return DnitConnectionResult(
                success=False, error=f"El servicio DNIT respondió {resp.status_code}", status_code=resp.status_code
            )
        return DnitConnectionResult(success=True, status_code=resp.status_code)
