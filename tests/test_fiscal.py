from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from carwash_api.services import fiscal
from carwash_api.services.errors import FiscalComplianceError

TODAY = date(2025, 6, 15)


class TestRuc:
    def test_check_digit(self):
        assert fiscal.calculate_ruc_check_digit("80000000") == 6
        assert fiscal.calculate_ruc_check_digit("80069563") == 9

    def test_remainder_below_two_gives_zero(self):
        assert fiscal.calculate_ruc_check_digit("00000000") == 0
        assert fiscal.calculate_ruc_check_digit("60000000") == 0

    def test_base_must_have_eight_digits(self):
        with pytest.raises(ValueError):
            fiscal.calculate_ruc_check_digit("1234567")

    def test_valid_ruc(self):
        assert fiscal.validate_ruc("80000000-6").is_valid
        assert fiscal.validate_ruc(" 80069563-9 ").is_valid

    @pytest.mark.parametrize("ruc", [None, "", "8000000-6", "80000000", "80000000-66", "ABCDEFGH-1"])
    def test_bad_format(self, ruc):
        result = fiscal.validate_ruc(ruc)
        assert not result.is_valid
        assert result.error

    def test_wrong_check_digit(self):
        result = fiscal.validate_ruc("80000000-5")
        assert not result.is_valid
        assert "verificador" in result.error


class TestTimbradoDates:
    def test_valid_window(self):
        result = fiscal.validate_timbrado_dates("2025-01-01", "2026-01-01", TODAY)
        assert result.is_valid
        assert result.warning is None

    def test_unparseable_dates(self):
        assert not fiscal.validate_timbrado_dates("2025-13-01", "2026-01-01", TODAY).is_valid
        assert not fiscal.validate_timbrado_dates(None, "2026-01-01", TODAY).is_valid

    def test_end_not_after_start(self):
        result = fiscal.validate_timbrado_dates("2025-06-01", "2025-06-01", TODAY)
        assert not result.is_valid
        assert "posterior" in result.error

    def test_start_too_old(self):
        result = fiscal.validate_timbrado_dates(date(2019, 1, 1), date(2026, 1, 1), TODAY)
        assert not result.is_valid

    def test_already_expired(self):
        result = fiscal.validate_timbrado_dates(date(2024, 1, 1), date(2025, 6, 14), TODAY)
        assert not result.is_valid
        assert "vencido" in result.error

    def test_close_to_expiry_warns(self):
        result = fiscal.validate_timbrado_dates(date(2024, 7, 1), date(2025, 7, 10), TODAY)
        assert result.is_valid
        assert result.warning

    def test_status_colors(self):
        assert fiscal.get_timbrado_status(TODAY + timedelta(days=100), TODAY).color == "green"
        warning = fiscal.get_timbrado_status(TODAY + timedelta(days=10), TODAY)
        assert (warning.status, warning.days_until_expiration) == ("warning", 10)
        expired = fiscal.get_timbrado_status(TODAY - timedelta(days=3), TODAY)
        assert expired.status == "expired"
        assert expired.message == "Timbrado vencido hace 3 días"


class TestActiveTimbrado:
    def _config(self, **overrides):
        values = dict(
            timbrado_numero="12345678",
            timbrado_hasta=TODAY + timedelta(days=60),
            establecimiento="001",
            punto_expedicion="001",
        )
        values.update(overrides)
        return SimpleNamespace(**values)

    def test_missing_config_blocks(self):
        result = fiscal.validate_active_timbrado(None, TODAY)
        assert result.blocks_invoicing and not result.is_valid

    @pytest.mark.parametrize("field", ["timbrado_numero", "timbrado_hasta", "establecimiento"])
    def test_incomplete_config_blocks(self, field):
        result = fiscal.validate_active_timbrado(self._config(**{field: None}), TODAY)
        assert result.blocks_invoicing

    def test_expired_blocks(self):
        result = fiscal.validate_active_timbrado(self._config(timbrado_hasta=TODAY - timedelta(days=1)), TODAY)
        assert result.blocks_invoicing
        assert result.days_until_expiration == -1

    def test_expiring_today_still_allows(self):
        result = fiscal.validate_active_timbrado(self._config(timbrado_hasta=TODAY), TODAY)
        assert result.is_valid and not result.blocks_invoicing


class TestTotals:
    def test_iva_ten_percent(self):
        totals = fiscal.calculate_sale_totals(Decimal("100000"), False)
        assert totals.impuestos == Decimal("10000")
        assert totals.total == Decimal("110000")

    def test_tourism_is_exempt(self):
        totals = fiscal.calculate_sale_totals(Decimal("100000"), True)
        assert totals.impuestos == 0
        assert totals.total == totals.subtotal

    def test_rounds_half_up_to_whole_guaranies(self):
        totals = fiscal.calculate_sale_totals(Decimal("12345"), False)
        assert totals.impuestos == Decimal("1235")
        assert totals.total == totals.subtotal + totals.impuestos

    def test_negative_subtotal(self):
        with pytest.raises(ValueError):
            fiscal.calculate_sale_totals(-1, False)


class TestModificationWindow:
    NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)

    def test_inside_window(self):
        elapsed = fiscal.check_sale_modification_window(self.NOW - timedelta(hours=23), self.NOW)
        assert round(elapsed) == 23

    def test_naive_timestamps_are_utc(self):
        created = (self.NOW - timedelta(hours=2)).replace(tzinfo=None)
        assert round(fiscal.check_sale_modification_window(created, self.NOW)) == 2

    def test_outside_window(self):
        with pytest.raises(FiscalComplianceError) as exc_info:
            fiscal.check_sale_modification_window(self.NOW - timedelta(hours=25), self.NOW)
        assert exc_info.value.status_code == 403
        assert exc_info.value.code == "FISCAL_COMPLIANCE_VIOLATION"
        assert exc_info.value.details["max_hours"] == 24


class TestNumbering:
    def test_format(self):
        assert fiscal.format_invoice_number("001", "002", 15) == "001-002-0000015"

    def test_parse(self):
        assert fiscal.parse_invoice_sequence("001-002-0000015") == 15
        assert fiscal.parse_invoice_sequence(None) == 0
        assert fiscal.parse_invoice_sequence("garbage-x") == 0


def test_inventory_alert_state():
    assert fiscal.inventory_alert_state(0, 5) == "critico"
    assert fiscal.inventory_alert_state(5, 5) == "bajo"
    assert fiscal.inventory_alert_state(6, 5) == "normal"
