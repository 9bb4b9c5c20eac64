from datetime import timedelta
from decimal import Decimal

from sqlalchemy import update

from carwash_api.core.clock import business_today
from carwash_api.db.models.company import CompanyConfig

from conftest import company_payload, run_sql


def _sale(client, headers, service, **body):
    body.setdefault("medio_pago", "efectivo")
    body.setdefault(
        "items",
        [{"service_id": service["id"], "nombre": service["nombre"], "cantidad": 2, "precio_unitario": "50000"}],
    )
    resp = client.post("/api/sales", json=body, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["sale"]


def test_invoice_print_data(client, admin_headers, company, customer, service):
    sale = _sale(client, admin_headers, service, customer_id=customer["id"])

    resp = client.get(f"/api/print/invoices/{sale['id']}", headers=admin_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["titulo"] == "FACTURA"
    assert data["company"]["nombre"] == "Lavadero Central"
    assert data["company"]["ruc"] == "80000000-6"
    assert data["timbrado"]["numero"] == "12345678"
    assert data["numero_factura"] == "001-001-0000001"
    assert data["customer"]["nombre"] == "Juan Pérez"
    assert data["customer"]["documento"] == "CI: 1234567"
    assert data["condicion"] is None
    assert data["iva_label"] == "IVA (10%)"
    assert Decimal(data["total"]) == Decimal("110000")
    assert data["total_en_letras"] == "CIENTO DIEZ MIL GUARANÍES"
    assert data["medio_pago"] == "Efectivo"
    assert data["copias"] == ["ORIGINAL", "DUPLICADO"]
    assert data["timbrado_status"] == "valid"
    assert data["items"][0]["descripcion"] == "Lavado completo"


def test_walk_in_and_tourism_invoices(client, admin_headers, company, tourist, service):
    walk_in = _sale(client, admin_headers, service)
    data = client.get(f"/api/print/invoices/{walk_in['id']}", headers=admin_headers).json()
    assert data["customer"]["nombre"] == "Consumidor Final"

    exempt = _sale(client, admin_headers, service, customer_id=tourist["id"])
    data = client.get(f"/api/print/invoices/{exempt['id']}", headers=admin_headers).json()
    assert data["condicion"] == "RÉGIMEN DE TURISMO"
    assert data["iva_label"] == "IVA (Exento - Turismo)"
    assert data["customer"]["pais"] == "Brasil"
    assert data["total_en_letras"] == "CIEN MIL GUARANÍES"


def test_invoice_pdf_in_both_sizes(client, readonly_headers, admin_headers, company, service):
    sale = _sale(client, admin_headers, service)
    for size in ("a4", "80mm"):
        resp = client.get(
            f"/api/print/invoices/{sale['id']}", params={"format": "pdf", "size": size}, headers=readonly_headers
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert "factura_001-001-0000001.pdf" in resp.headers["content-disposition"]
        assert resp.content.startswith(b"%PDF")


def test_print_keeps_the_timbrado_used_by_the_sale(client, admin_headers, company, service):
    sale = _sale(client, admin_headers, service)
    resp = client.put("/api/company-config", json=company_payload(timbrado_numero="87654321"), headers=admin_headers)
    assert resp.status_code == 200
    data = client.get(f"/api/print/invoices/{sale['id']}", headers=admin_headers).json()
    assert data["timbrado"]["numero"] == "12345678"


def test_invoice_print_requires_active_timbrado(client, admin_headers, company, service):
    sale = _sale(client, admin_headers, service)
    run_sql(lambda s: s.execute(update(CompanyConfig).values(timbrado_hasta=business_today() - timedelta(days=2))))
    resp = client.get(f"/api/print/invoices/{sale['id']}", headers=admin_headers)
    assert resp.status_code == 403
    assert resp.json()["error"]["type"] == "TIMBRADO_INVALID"
def test_unknown_sale(client, admin_headers, company):
    resp = client.get("/api/print/invoices/00000000-0000-0000-0000-000000000000", headers=admin_headers)
    assert resp.status_code == 404


def test_work_order_print(client, admin_headers, customer, vehicle, service):
    order = client.post(
        "/api/work-orders",
        json={"customer_id": customer["id"], "vehicle_id": vehicle["id"], "items": [{"service_id": service["id"]}]},
        headers=admin_headers,
    ).json()

    data = client.get(f"/api/print/work-orders/{order['id']}", headers=admin_headers).json()
    assert data["titulo"] == "ORDEN DE TRABAJO"
    assert data["numero"] == 1
    assert data["estado"] == "Recibido"
    assert data["company"] is None
    assert data["vehicle"]["placa"] == "ABC 123"
    assert Decimal(data["total"]) == Decimal("50000")

    resp = client.get(f"/api/print/work-orders/{order['id']}", params={"format": "pdf"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.content.startswith(b"%PDF")
