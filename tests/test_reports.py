import csv
import io
from datetime import date
from decimal import Decimal

import pytest

from carwash_api.services.errors import BusinessRuleError
from carwash_api.services.reports import resolve_period


@pytest.fixture
def two_sales(client, admin_headers, company, customer, service):
    lines = [
        [{"service_id": service["id"], "nombre": service["nombre"], "cantidad": 2, "precio_unitario": "50000"}],
        [{"service_id": service["id"], "nombre": service["nombre"], "cantidad": 1, "precio_unitario": "50000"}],
    ]
    for items, customer_id in zip(lines, (customer["id"], None)):
        resp = client.post(
            "/api/sales", json={"medio_pago": "efectivo", "customer_id": customer_id, "items": items}, headers=admin_headers
        )
        assert resp.status_code == 201, resp.text


class TestResolvePeriod:
    TODAY = date(2025, 8, 20)

    def test_calendar_periods(self):
        assert resolve_period("day", today=self.TODAY) == (self.TODAY, self.TODAY)
        assert resolve_period("week", today=self.TODAY) == (date(2025, 8, 14), self.TODAY)
        assert resolve_period("month", today=self.TODAY) == (date(2025, 8, 1), self.TODAY)
        assert resolve_period("quarter", today=self.TODAY) == (date(2025, 7, 1), self.TODAY)
        assert resolve_period("year", today=self.TODAY) == (date(2025, 1, 1), self.TODAY)

    def test_custom(self):
        assert resolve_period("custom", date(2025, 1, 1), date(2025, 1, 31)) == (date(2025, 1, 1), date(2025, 1, 31))
        with pytest.raises(BusinessRuleError):
            resolve_period("custom", date(2025, 1, 1), None)
        with pytest.raises(BusinessRuleError):
            resolve_period("custom", date(2025, 2, 1), date(2025, 1, 1))

    def test_unknown_period(self):
        with pytest.raises(BusinessRuleError):
            resolve_period("decade", today=self.TODAY)


def test_sales_report_json(client, readonly_headers, two_sales):
    resp = client.get("/api/reports/sales", params={"period": "day"}, headers=readonly_headers)
    assert resp.status_code == 200
    report = resp.json()
    assert report["period"] == "day"
    assert len(report["daily"]) == 1
    assert report["total_orders"] == 2
    assert Decimal(report["total_amount"]) == Decimal("165000")
    assert Decimal(report["average_ticket"]) == Decimal("82500")


def test_week_report_has_every_day(client, admin_headers, two_sales):
    report = client.get("/api/reports/sales", headers=admin_headers).json()
    assert report["period"] == "week"
    assert len(report["daily"]) == 7
    assert sum(d["orders"] for d in report["daily"]) == 2


def test_sales_report_csv(client, admin_headers, two_sales):
    resp = client.get("/api/reports/sales", params={"period": "month", "format": "csv"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert 'filename="ventas_' in resp.headers["content-disposition"]

    rows = list(csv.DictReader(io.StringIO(resp.text)))
    assert len(rows) == 2
    assert {r["numero_factura"] for r in rows} == {"001-001-0000001", "001-001-0000002"}
    assert {r["cliente"] for r in rows} == {"Juan Pérez", "Consumidor Final"}
    assert all(r["timbrado"] == "12345678" for r in rows)


def test_sales_report_xlsx_and_pdf(client, admin_headers, two_sales):
    resp = client.get("/api/reports/sales", params={"format": "xlsx"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.content[:2] == b"PK"

    resp = client.get("/api/reports/sales", params={"format": "pdf"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.content.startswith(b"%PDF")


def test_custom_period_requires_dates(client, admin_headers):
    resp = client.get("/api/reports/sales", params={"period": "custom"}, headers=admin_headers)
    assert resp.status_code == 400


def test_services_report(client, admin_headers, two_sales):
    rows = client.get("/api/reports/services", headers=admin_headers).json()
    assert len(rows) == 1
    assert rows[0]["tipo"] == "servicio"
    assert rows[0]["nombre"] == "Lavado completo"
    assert rows[0]["count"] == 3
    assert Decimal(rows[0]["revenue"]) == Decimal("150000")

    resp = client.get("/api/reports/services", params={"format": "csv"}, headers=admin_headers)
    assert resp.text.splitlines()[0] == "tipo,nombre,cantidad,ingresos"


def test_customers_report(client, admin_headers, customer, two_sales):
    rows = client.get("/api/reports/customers", headers=admin_headers).json()
    assert [(r["customer_id"], r["purchases"]) for r in rows] == [(customer["id"], 1)]
    assert Decimal(rows[0]["total"]) == Decimal("110000")

    resp = client.get("/api/reports/customers", params={"format": "csv"}, headers=admin_headers)
    lines = resp.text.splitlines()
    assert lines[0] == "cliente,documento,compras,total"
    assert lines[1].startswith("Juan Pérez,1234567,1,")
