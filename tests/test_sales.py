from datetime import datetime, time, timedelta, timezone
from decimal import Decimal
from uuid import UUID

from sqlalchemy import update

from carwash_api.core.clock import business_timezone, business_today
from carwash_api.db.base import utcnow
from carwash_api.db.models.company import CompanyConfig
from carwash_api.db.models.sales import Sale
from conftest import run_sql


def _line(service, cantidad=1, precio="50000"):
    return {"service_id": service["id"], "nombre": service["nombre"], "cantidad": cantidad, "precio_unitario": precio}


def _sell(client, headers, **body):
    body.setdefault("medio_pago", "efectivo")
    return client.post("/api/sales", json=body, headers=headers)


def _usage(client, headers):
    return client.get("/api/usage/stats", headers=headers).json()["current_month_invoices"]


def _age_sale(sale_id, hours):
    run_sql(
        lambda s: s.execute(
            update(Sale).where(Sale.id == UUID(sale_id)).values(created_at=utcnow() - timedelta(hours=hours))
        )
    )


def test_sale_charges_iva_and_numbers_invoices(client, admin_headers, company, customer, service):
    resp = _sell(client, admin_headers, customer_id=customer["id"], items=[_line(service, cantidad=2)])
    assert resp.status_code == 201, resp.text
    body = resp.json()
    sale = body["sale"]
    assert Decimal(sale["subtotal"]) == Decimal("100000")
    assert Decimal(sale["impuestos"]) == Decimal("10000")
    assert Decimal(sale["total"]) == Decimal("110000")
    assert sale["regimen_turismo"] is False
    assert body["invoice_number"] == "001-001-0000001"
    assert body["timbrado"] == "12345678"
    assert sale["customer"]["id"] == customer["id"]
    assert len(sale["items"]) == 1

    second = _sell(client, admin_headers, items=[_line(service)]).json()
    assert second["invoice_number"] == "001-001-0000002"
    assert second["sale"]["customer_id"] is None


def test_tourism_customer_is_exempt(client, admin_headers, company, tourist, service):
    resp = _sell(client, admin_headers, customer_id=tourist["id"], items=[_line(service)])
    assert resp.status_code == 201
    sale = resp.json()["sale"]
    assert sale["regimen_turismo"] is True
    assert Decimal(sale["impuestos"]) == 0
    assert Decimal(sale["total"]) == Decimal("50000")


def test_client_totals_must_match(client, admin_headers, company, service):
    resp = _sell(client, admin_headers, items=[_line(service)], subtotal="50000", total="50000")
    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["type"] == "VALIDATION_ERROR"
    assert error["details"]["fields"] == ["total"]
    assert error["details"]["expected"]["total"] == "55000"

    resp = _sell(client, admin_headers, items=[_line(service)], subtotal="50000", impuestos="5000", total="55000")
    assert resp.status_code == 201


def test_sale_needs_lines(client, admin_headers, company):
    resp = _sell(client, admin_headers, items=[])
    assert resp.status_code == 400


def test_no_company_config_blocks_invoicing(client, admin_headers, service):
    resp = _sell(client, admin_headers, items=[_line(service)])
    assert resp.status_code == 403
    assert resp.json()["error"]["type"] == "TIMBRADO_INVALID"


def test_expired_timbrado_blocks_invoicing(client, admin_headers, company, service):
    run_sql(lambda s: s.execute(update(CompanyConfig).values(timbrado_hasta=business_today() - timedelta(days=1))))

    resp = _sell(client, admin_headers, items=[_line(service)])
    assert resp.status_code == 403
    assert resp.json()["error"]["type"] == "TIMBRADO_INVALID"
    assert client.get("/api/sales", headers=admin_headers).json() == []

    status = client.get("/api/timbrado/status", headers=admin_headers).json()
    assert status["blocks_invoicing"] is True
    assert status["status"]["status"] == "expired"


def test_usage_limit(client, make_user, company, service):
    headers = make_user("limitado", monthly_invoice_limit=1)
    assert _sell(client, headers, items=[_line(service)]).status_code == 201

    resp = _sell(client, headers, items=[_line(service)])
    assert resp.status_code == 403
    error = resp.json()["error"]
    assert error["type"] == "USAGE_LIMIT_EXCEEDED"
    assert error["details"]["limit"] == 1

    stats = client.get("/api/usage/stats", headers=headers).json()
    assert stats["current_month_invoices"] == 1
    assert stats["remaining_invoices"] == 0
    assert stats["account_status"] == "limit_reached"
    permission = client.get("/api/usage/can-create-invoice", headers=headers).json()
    assert permission["can_create"] is False


def test_readonly_cannot_sell(client, readonly_headers, company, service):
    assert _sell(client, readonly_headers, items=[_line(service)]).status_code == 403


def test_inventory_lines_take_stock(client, admin_headers, company, stock_item):
    line = {"inventory_item_id": stock_item["id"], "nombre": "Aromatizante", "cantidad": 4, "precio_unitario": "15000"}
    assert _sell(client, admin_headers, items=[line]).status_code == 201
    assert client.get(f"/api/inventory/{stock_item['id']}", headers=admin_headers).json()["stock_actual"] == 6

    too_many = dict(line, cantidad=7)
    resp = _sell(client, admin_headers, items=[too_many])
    assert resp.status_code == 400
    assert client.get(f"/api/inventory/{stock_item['id']}", headers=admin_headers).json()["stock_actual"] == 6
    assert _usage(client, admin_headers) == 1


class TestModificationWindow:
    def test_admin_edits_inside_window(self, client, admin_headers, company, service):
        sale = _sell(client, admin_headers, items=[_line(service)]).json()["sale"]
        resp = client.put(
            f"/api/sales/{sale['id']}",
            json={"medio_pago": "tarjeta_debito", "items": [_line(service, cantidad=3)]},
            headers=admin_headers,
        )
        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["message"] == "Venta actualizada"
        assert body["modified_by"] == "admin"
        assert body["sale"]["medio_pago"] == "tarjeta_debito"
        assert Decimal(body["sale"]["total"]) == Decimal("165000")
        assert len(body["sale"]["items"]) == 1

    def test_only_admin_edits(self, client, user_headers, company, service):
        sale = _sell(client, user_headers, items=[_line(service)]).json()["sale"]
        resp = client.put(f"/api/sales/{sale['id']}", json={"medio_pago": "cheque"}, headers=user_headers)
        assert resp.status_code == 403
        assert client.delete(f"/api/sales/{sale['id']}", headers=user_headers).status_code == 403

    def test_edit_and_delete_blocked_after_24_hours(self, client, admin_headers, company, service):
        sale = _sell(client, admin_headers, items=[_line(service)]).json()["sale"]
        _age_sale(sale["id"], hours=25)

        resp = client.put(f"/api/sales/{sale['id']}", json={"medio_pago": "cheque"}, headers=admin_headers)
        assert resp.status_code == 403
        assert resp.json()["error"]["type"] == "FISCAL_COMPLIANCE_VIOLATION"

        resp = client.delete(f"/api/sales/{sale['id']}", headers=admin_headers)
        assert resp.status_code == 403
        assert client.get(f"/api/sales/{sale['id']}", headers=admin_headers).status_code == 200

    def test_delete_undoes_side_effects(self, client, admin_headers, company, customer, vehicle, service, stock_item):
        order = client.post(
            "/api/work-orders",
            json={"customer_id": customer["id"], "vehicle_id": vehicle["id"], "items": [{"service_id": service["id"]}]},
            headers=admin_headers,
        ).json()
        for estado in ("en_proceso", "terminado"):
            client.put(f"/api/work-orders/{order['id']}/status", json={"estado": estado}, headers=admin_headers)

        resp = _sell(
            client,
            admin_headers,
            work_order_id=order["id"],
            items=[
                _line(service),
                {"inventory_item_id": stock_item["id"], "nombre": "Aromatizante", "cantidad": 2, "precio_unitario": "15000"},
            ],
        )
        assert resp.status_code == 201
        sale = resp.json()["sale"]
        assert sale["customer_id"] == customer["id"]
        assert client.get(f"/api/work-orders/{order['id']}", headers=admin_headers).json()["estado"] == "entregado"
        assert client.get(f"/api/inventory/{stock_item['id']}", headers=admin_headers).json()["stock_actual"] == 8
        assert _usage(client, admin_headers) == 1

        resp = client.delete(f"/api/sales/{sale['id']}", headers=admin_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["deleted_invoice"] == "001-001-0000001"
        assert body["deleted_by"] == "admin"

        assert client.get(f"/api/sales/{sale['id']}", headers=admin_headers).status_code == 404
        assert client.get(f"/api/inventory/{stock_item['id']}", headers=admin_headers).json()["stock_actual"] == 10
        assert _usage(client, admin_headers) == 0
        reopened = client.get(f"/api/work-orders/{order['id']}", headers=admin_headers).json()
        assert reopened["estado"] == "terminado"
        assert reopened["fecha_entrega"] is None


class TestFromWorkOrder:
    def _order(self, client, headers, customer, vehicle, service):
        return client.post(
            "/api/work-orders",
            json={
                "customer_id": customer["id"],
                "vehicle_id": vehicle["id"],
                "items": [{"service_id": service["id"], "cantidad": 2}],
            },
            headers=headers,
        ).json()

    def test_lines_come_from_the_order(self, client, user_headers, company, customer, vehicle, service):
        order = self._order(client, user_headers, customer, vehicle, service)
        resp = client.post(
            "/api/sales/create-from-order",
            json={"work_order_id": order["id"], "medio_pago": "transferencia"},
            headers=user_headers,
        )
        assert resp.status_code == 201, resp.text
        sale = resp.json()["sale"]
        assert sale["work_order_id"] == order["id"]
        assert sale["customer_id"] == customer["id"]
        assert [(i["nombre"], i["cantidad"]) for i in sale["items"]] == [("Lavado completo", 2)]
        assert Decimal(sale["total"]) == Decimal("110000")
        assert client.get(f"/api/work-orders/{order['id']}", headers=user_headers).json()["estado"] == "entregado"

    def test_cancelled_order_cannot_be_invoiced(self, client, admin_headers, company, customer, vehicle, service):
        order = self._order(client, admin_headers, customer, vehicle, service)
        client.put(f"/api/work-orders/{order['id']}/status", json={"estado": "cancelado"}, headers=admin_headers)
        resp = client.post(
            "/api/sales/create-from-order",
            json={"work_order_id": order["id"], "medio_pago": "efectivo"},
            headers=admin_headers,
        )
        assert resp.status_code == 400

    def test_direct_sale_delivers_received_order(self, client, admin_headers, company, customer, vehicle, service):
        order = self._order(client, admin_headers, customer, vehicle, service)
        assert order["estado"] == "recibido"
        resp = _sell(
            client, admin_headers, customer_id=customer["id"], work_order_id=order["id"], items=[_line(service)]
        )
        assert resp.status_code == 201, resp.text
        assert resp.json()["sale"]["work_order_id"] == order["id"]
        delivered = client.get(f"/api/work-orders/{order['id']}", headers=admin_headers).json()
        assert delivered["estado"] == "entregado"
        assert delivered["fecha_entrega"] is not None

    def test_direct_sale_rejects_delivered_order(self, client, admin_headers, company, customer, vehicle, service):
        order = self._order(client, admin_headers, customer, vehicle, service)
        first = _sell(client, admin_headers, work_order_id=order["id"], items=[_line(service)])
        assert first.status_code == 201

        again = _sell(client, admin_headers, work_order_id=order["id"], items=[_line(service)])
        assert again.status_code == 400
        assert again.json()["error"]["details"] == {"estado": "entregado"}
        assert _usage(client, admin_headers) == 1


def test_list_filters_by_day(client, admin_headers, company, service):
    _sell(client, admin_headers, items=[_line(service)])
    today = business_today()
    params = {"date_from": today.isoformat(), "date_to": today.isoformat()}
    assert len(client.get("/api/sales", params=params, headers=admin_headers).json()) == 1

    yesterday = (today - timedelta(days=1)).isoformat()
    params = {"date_from": yesterday, "date_to": yesterday}
    assert client.get("/api/sales", params=params, headers=admin_headers).json() == []


class TestBusinessDay:
    """A sale rung up late in the evening belongs to that local day, not to the next UTC day."""

    def _late_sale(self, client, headers, service):
        sale = _sell(client, headers, items=[_line(service)]).json()["sale"]
        day = business_today() - timedelta(days=1)
        moment = datetime.combine(day, time(23, 30), tzinfo=business_timezone()).astimezone(timezone.utc)
        run_sql(lambda s: s.execute(update(Sale).where(Sale.id == UUID(sale["id"])).values(fecha=moment)))
        return day

    def test_sale_list_uses_local_days(self, client, admin_headers, company, service):
        day = self._late_sale(client, admin_headers, service)
        params = {"date_from": day.isoformat(), "date_to": day.isoformat()}
        assert len(client.get("/api/sales", params=params, headers=admin_headers).json()) == 1

        today = (day + timedelta(days=1)).isoformat()
        params = {"date_from": today, "date_to": today}
        assert client.get("/api/sales", params=params, headers=admin_headers).json() == []

    def test_dashboard_and_day_report_skip_last_night(self, client, admin_headers, company, service):
        day = self._late_sale(client, admin_headers, service)
        metrics = client.get("/api/dashboard/metrics", headers=admin_headers).json()
        assert metrics["ventas_hoy"] == 0

        report = client.get(
            "/api/reports/sales",
            params={"period": "custom", "date_from": day.isoformat(), "date_to": day.isoformat()},
            headers=admin_headers,
        ).json()
        assert report["total_orders"] == 1
        assert report["daily"][0]["date"] == day.isoformat()
