from __future__ import annotations

from typing import Any, Optional


class ServiceError(Exception):
    """
    Base domain error raised by services.

    The API layer maps it to the standard error envelope using status_code and code.
    """

    status_code: int = 400
    code: str = "SERVICE_ERROR"

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(ServiceError):
    status_code = 404
    code = "NOT_FOUND"


class BusinessRuleError(ServiceError):
    """Input is well-formed but violates a business rule."""
    status_code = 400
    code = "VALIDATION_ERROR"


class ConflictError(ServiceError):
    """Operation would break a reference held by another record."""
    status_code = 409
    code = "CONFLICT"


class FiscalComplianceError(ServiceError):
    """Sale modification attempted outside the fiscal edit window."""
    status_code = 403
    code = "FISCAL_COMPLIANCE_VIOLATION"


class TimbradoInvalidError(ServiceError):
    """Invoicing blocked because the timbrado is missing, incomplete or expired."""
    status_code = 403
    code = "TIMBRADO_INVALID"


class UsageLimitError(ServiceError):
    """The user's subscription does not allow issuing another invoice."""
    status_code = 403
    code = "USAGE_LIMIT_EXCEEDED"
