"""
Paraguayan fiscal rules used by invoicing.

Pure functions only: RUC checksum, timbrado validity, IVA totals, the sale
modification window and invoice numbering. Everything takes `today`/`now`
explicitly (defaulting to the current business date) so the rules are deterministic
under test.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional, Protocol

from carwash_api.core.clock import business_today
from carwash_api.services.errors import FiscalComplianceError

RUC_PATTERN = re.compile(r"^\d{8}-\d$")
RUC_MULTIPLIERS = (2, 3, 4, 5, 6, 7, 2, 3)

DEFAULT_TAX_RATE = Decimal("0.10")
SALE_MODIFICATION_WINDOW_HOURS = 24
TIMBRADO_WARNING_DAYS = 30
TIMBRADO_MAX_AGE_YEARS = 5
INVOICE_SEQUENCE_WIDTH = 7


@dataclass(frozen=True)
class RucValidation:
    is_valid: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class TimbradoValidation:
    is_valid: bool
    error: Optional[str] = None
    warning: Optional[str] = None


@dataclass(frozen=True)
class TimbradoStatus:
    status: str
    color: str
    message: str
    days_until_expiration: int


@dataclass(frozen=True)
class ActiveTimbradoCheck:
    is_valid: bool
    blocks_invoicing: bool
    error: Optional[str] = None
    days_until_expiration: Optional[int] = None


@dataclass(frozen=True)
class SaleTotals:
    subtotal: Decimal
    impuestos: Decimal
    total: Decimal


class TimbradoConfig(Protocol):
    """Subset of the company configuration needed to authorize invoicing."""
    timbrado_numero: Optional[str]
    timbrado_hasta: Optional[date]
    establecimiento: Optional[str]
    punto_expedicion: Optional[str]


# PUBLIC_INTERFACE
def calculate_ruc_check_digit(base_number: str) -> int:
    """
    Compute the modulo-11 check digit for the 8-digit base of a RUC.

    Each digit is weighted by RUC_MULTIPLIERS position by position; a remainder
    below 2 yields 0, otherwise the digit is 11 - remainder.
    """
    if len(base_number) != 8 or not base_number.isdigit():
        raise ValueError("RUC base must be exactly 8 digits")
    total = sum(int(d) * m for d, m in zip(base_number, RUC_MULTIPLIERS))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


# PUBLIC_INTERFACE
def validate_ruc(ruc: Optional[str]) -> RucValidation:
    """Validate format (NNNNNNNN-D) and check digit of a RUC."""
    if not ruc or not isinstance(ruc, str):
        return RucValidation(False, "El RUC es obligatorio")
    clean = ruc.strip()
    if not RUC_PATTERN.match(clean):
        return RucValidation(False, "El RUC debe tener el formato 12345678-9")
    base, check = clean.split("-")
    if calculate_ruc_check_digit(base) != int(check):
        return RucValidation(False, "El dígito verificador del RUC no es válido")
    return RucValidation(True)


def _coerce_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


def _years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # 29 February in a non-leap target year
        return day.replace(year=day.year - years, day=28)


# PUBLIC_INTERFACE
def validate_timbrado_dates(
    desde: Any,
    hasta: Any,
    today: Optional[date] = None,
    *,
    warning_days: int = TIMBRADO_WARNING_DAYS,
    max_age_years: int = TIMBRADO_MAX_AGE_YEARS,
) -> TimbradoValidation:
    """
    Validate the validity window of a timbrado before it is saved.

    Rules, in order:
      - both dates must parse (YYYY-MM-DD)
      - hasta must be after desde
      - desde may not be older than max_age_years
      - hasta may not be in the past
      - hasta within warning_days is accepted with a warning
    """
    start = _coerce_date(desde)
    end = _coerce_date(hasta)
    today = today or business_today()

    if start is None or end is None:
        return TimbradoValidation(False, "Las fechas deben ser válidas y estar en formato YYYY-MM-DD")
    if end <= start:
        return TimbradoValidation(False, "La fecha de vencimiento debe ser posterior a la fecha de inicio")
    if start < _years_before(today, max_age_years):
        return TimbradoValidation(
            False, f"La fecha de inicio no puede ser mayor a {max_age_years} años en el pasado"
        )
    if end < today:
        return TimbradoValidation(False, "El timbrado ya ha vencido. Debe renovarlo antes de continuar.")
    if (end - today).days <= warning_days:
        return TimbradoValidation(
            True,
            warning=f"El timbrado vence en menos de {warning_days} días. Se recomienda renovarlo pronto.",
        )
    return TimbradoValidation(True)


# PUBLIC_INTERFACE
def days_until_expiration(hasta: Any, today: Optional[date] = None) -> int:
    """Signed number of days from today until hasta (negative once expired)."""
    end = _coerce_date(hasta)
    if end is None:
        raise ValueError("Invalid timbrado expiration date")
    return (end - (today or business_today())).days


# PUBLIC_INTERFACE
def get_timbrado_status(
    hasta: Any, today: Optional[date] = None, *, warning_days: int = TIMBRADO_WARNING_DAYS
) -> TimbradoStatus:
    """Traffic-light status of the timbrado for dashboards and alerts."""
    days = days_until_expiration(hasta, today)
    if days < 0:
        return TimbradoStatus("expired", "red", f"Timbrado vencido hace {abs(days)} días", days)
    if days <= warning_days:
        return TimbradoStatus("warning", "orange", f"Timbrado vence en {days} días", days)
    return TimbradoStatus("valid", "green", f"Timbrado válido por {days} días más", days)


# PUBLIC_INTERFACE
def validate_active_timbrado(
    config: Optional[TimbradoConfig], today: Optional[date] = None
) -> ActiveTimbradoCheck:
    """Decide whether the current configuration allows issuing invoices."""
    if config is None:
        return ActiveTimbradoCheck(
            False,
            True,
            "Configuración de empresa no encontrada. Debe configurar los datos fiscales antes de emitir facturas.",
        )
    if not config.timbrado_hasta:
        return ActiveTimbradoCheck(
            False, True, "Fecha de vencimiento de timbrado no configurada. Complete la configuración fiscal."
        )
    if not config.timbrado_numero:
        return ActiveTimbradoCheck(
            False, True, "Número de timbrado no configurado. Complete la configuración fiscal."
        )
    if not config.establecimiento or not config.punto_expedicion:
        return ActiveTimbradoCheck(
            False,
            True,
            "Establecimiento y punto de expedición no configurados. Complete la configuración fiscal.",
        )

    days = days_until_expiration(config.timbrado_hasta, today)
    if days < 0:
        return ActiveTimbradoCheck(
            False,
            True,
            f"Timbrado vencido hace {abs(days)} días. No se pueden emitir facturas con timbrado vencido.",
            days,
        )
    return ActiveTimbradoCheck(True, False, None, days)


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


# PUBLIC_INTERFACE
def round_guaranies(value: Any) -> Decimal:
    """Round to whole guaraníes, half up."""
    return _to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


# PUBLIC_INTERFACE
def calculate_sale_totals(
    subtotal: Any, regimen_turismo: bool, tax_rate: Any = DEFAULT_TAX_RATE
) -> SaleTotals:
    """
    Compute IVA and total for a sale.

    Tourism-regime customers are exempt; otherwise IVA is subtotal * tax_rate
    rounded to whole guaraníes. The invariant total == subtotal + impuestos always holds.
    """
    sub = _to_decimal(subtotal)
    if sub < 0:
        raise ValueError("Subtotal cannot be negative")
    impuestos = Decimal("0") if regimen_turismo else round_guaranies(sub * _to_decimal(tax_rate))
    return SaleTotals(subtotal=sub, impuestos=impuestos, total=sub + impuestos)


def _as_utc(moment: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored in UTC.
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


# PUBLIC_INTERFACE
def hours_since(created_at: datetime, now: Optional[datetime] = None) -> float:
    """Hours elapsed between created_at and now."""
    current = _as_utc(now or datetime.now(tz=timezone.utc))
    return (current - _as_utc(created_at)).total_seconds() / 3600


# PUBLIC_INTERFACE
def check_sale_modification_window(
    created_at: datetime,
    now: Optional[datetime] = None,
    max_hours: int = SALE_MODIFICATION_WINDOW_HOURS,
) -> float:
    """
    Enforce the fiscal edit/delete window of an issued invoice.

    Returns:
        Hours elapsed since the sale was created.
    Raises:
        FiscalComplianceError: when more than max_hours have passed, whatever the caller's role.
    """
    elapsed = hours_since(created_at, now)
    if elapsed > max_hours:
        raise FiscalComplianceError(
            f"No se pueden modificar facturas después de {max_hours} horas (cumplimiento fiscal)",
            details={"hours_elapsed": round(elapsed), "max_hours": max_hours},
        )
    return elapsed


# PUBLIC_INTERFACE
def format_invoice_number(establecimiento: str, punto_expedicion: str, sequence: int) -> str:
    """Build an invoice number like 001-001-0000001."""
    return f"{establecimiento}-{punto_expedicion}-{sequence:0{INVOICE_SEQUENCE_WIDTH}d}"


# PUBLIC_INTERFACE
def parse_invoice_sequence(numero_factura: Optional[str]) -> int:
    """Return the trailing sequence of an invoice number, or 0 when it cannot be read."""
    if not numero_factura:
        return 0
    tail = numero_factura.rsplit("-", 1)[-1]
    return int(tail) if tail.isdigit() else 0


# PUBLIC_INTERFACE
def inventory_alert_state(stock_actual: int, stock_minimo: int) -> str:
    """Alert level for an inventory item: critico (empty), bajo (at or under minimum) or normal."""
    if stock_actual <= 0:
        return "critico"
    if stock_actual <= stock_minimo:
        return "bajo"
    return "normal"
