from datetime import timedelta
from decimal import Decimal

from carwash_api.core.clock import business_today
from conftest import VALID_RUC, company_payload


class TestCompanyConfig:
    def test_not_configured(self, client, readonly_headers):
        assert client.get("/api/company-config", headers=readonly_headers).json() is None
        status = client.get("/api/timbrado/status", headers=readonly_headers).json()
        assert status["configured"] is False
        assert status["blocks_invoicing"] is True

    def test_save_and_read(self, client, admin_headers, company):
        assert company["ruc"] == VALID_RUC
        assert client.get("/api/company-config", headers=admin_headers).json()["id"] == company["id"]
        status = client.get("/api/timbrado/status", headers=admin_headers).json()
        assert status["is_valid"] is True
        assert status["status"]["color"] == "green"

    def test_invalid_ruc(self, client, admin_headers):
        resp = client.put("/api/company-config", json=company_payload(ruc="80000000-1"), headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["error"]["details"] == {"field": "ruc"}

    def test_expired_timbrado_cannot_be_saved(self, client, admin_headers):
        today = business_today()
        payload = company_payload(
            timbrado_desde=(today - timedelta(days=400)).isoformat(),
            timbrado_hasta=(today - timedelta(days=1)).isoformat(),
        )
        assert client.put("/api/company-config", json=payload, headers=admin_headers).status_code == 400

    def test_close_expiry_saves_with_warning(self, client, admin_headers):
        payload = company_payload(timbrado_hasta=(business_today() + timedelta(days=10)).isoformat())
        resp = client.put("/api/company-config", json=payload, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["warning"]

    def test_only_admin_saves(self, client, user_headers):
        assert client.put("/api/company-config", json=company_payload(), headers=user_headers).status_code == 403


class TestDnitConfig:
    PAYLOAD = {"endpoint_url": "https://dnit.example.test/api", "auth_token": "super-secret-token"}

    def test_secrets_are_never_returned(self, client, admin_headers):
        resp = client.put("/api/dnit-config", json=self.PAYLOAD, headers=admin_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["has_auth_token"] is True
        assert "auth_token" not in body
        assert "super-secret-token" not in resp.text

    def test_placeholder_keeps_stored_token(self, client, admin_headers):
        client.put("/api/dnit-config", json=self.PAYLOAD, headers=admin_headers)
        resp = client.put(
            "/api/dnit-config", json=dict(self.PAYLOAD, auth_token="••••••", operation_mode="production"), headers=admin_headers
        )
        assert resp.status_code == 200
        assert resp.json()["operation_mode"] == "production"
        assert resp.json()["has_auth_token"] is True

    def test_delete(self, client, admin_headers):
        client.put("/api/dnit-config", json=self.PAYLOAD, headers=admin_headers)
        assert client.delete("/api/dnit-config", headers=admin_headers).status_code == 200
        assert client.delete("/api/dnit-config", headers=admin_headers).status_code == 404

    def test_admin_only(self, client, user_headers):
        assert client.get("/api/dnit-config", headers=user_headers).status_code == 403


class TestUsage:
    def test_stats_for_new_account(self, client, make_user):
        headers = make_user("nuevo", monthly_invoice_limit=10)
        stats = client.get("/api/usage/stats", headers=headers).json()
        assert stats["current_month_invoices"] == 0
        assert stats["monthly_limit"] == 10
        assert stats["remaining_invoices"] == 10
        assert stats["account_status"] == "active"
        assert stats["subscription_type"] == "free"

    def test_warnings_list_accounts_over_limit(self, client, admin_headers, make_user):
        make_user("sin-cupo", monthly_invoice_limit=0)
        warnings = client.get("/api/usage/warnings", headers=admin_headers).json()
        assert "sin-cupo" in {w["username"] for w in warnings["users_over_limit"]}


def test_dashboard_metrics(client, readonly_headers, admin_headers, company, service, stock_item):
    client.put(f"/api/inventory/{stock_item['id']}/stock", json={"action": "remove", "quantity": 10}, headers=admin_headers)
    client.post(
        "/api/sales",
        json={
            "medio_pago": "efectivo",
            "items": [{"service_id": service["id"], "nombre": "Lavado", "cantidad": 1, "precio_unitario": "50000"}],
        },
        headers=admin_headers,
    )
    metrics = client.get("/api/dashboard/metrics", headers=readonly_headers).json()
    assert metrics["ventas_hoy"] == 1
    assert Decimal(metrics["ingresos_hoy"]) == Decimal("55000")
    assert metrics["inventario_critico"] == 1
    assert metrics["timbrado_status"] == "valid"


def test_websocket_info(client):
    info = client.get("/api/websocket-info").json()
    assert info["endpoints"][0]["path"] == "/ws/dashboard"


class TestSystemReset:
    def test_reset_keeps_users_and_configuration(self, client, admin_headers, user_headers, company, customer, service):
        client.post(
            "/api/sales",
            json={
                "medio_pago": "efectivo",
                "customer_id": customer["id"],
                "items": [{"service_id": service["id"], "nombre": "Lavado", "cantidad": 1, "precio_unitario": "50000"}],
            },
            headers=admin_headers,
        )

        resp = client.post("/api/admin/reset-system", headers=admin_headers)
        assert resp.status_code == 200
        body = resp.json()
        assert body["message"] == "Sistema reseteado exitosamente"
        assert body["deleted"]["sales"] == 1
        assert body["deleted"]["sale_items"] == 1
        assert body["deleted"]["customers"] == 1
        assert body["deleted"]["categories"] == 4

        assert client.get("/api/sales", headers=admin_headers).json() == []
        assert client.get("/api/customers", headers=admin_headers).json() == []
        assert client.get("/api/company-config", headers=admin_headers).json()["ruc"] == VALID_RUC
        assert client.get("/api/auth/me", headers=user_headers).status_code == 200

    def test_reset_is_admin_only(self, client, user_headers):
        assert client.post("/api/admin/reset-system", headers=user_headers).status_code == 403
