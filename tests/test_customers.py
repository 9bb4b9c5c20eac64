from datetime import date

from conftest import VALID_RUC


def test_create_and_search_customers(client, admin_headers, customer):
    resp = client.get("/api/customers", params={"search": "juan"}, headers=admin_headers)
    assert resp.status_code == 200
    assert [c["id"] for c in resp.json()] == [customer["id"]]

    resp = client.get("/api/customers", params={"search": "zzz"}, headers=admin_headers)
    assert resp.json() == []


def test_tourism_customer_requires_travel_data(client, admin_headers):
    resp = client.post(
        "/api/customers",
        json={"nombre": "Turista", "doc_tipo": "Pasaporte", "doc_numero": "X1", "regimen_turismo": True, "pais": "Chile"},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"]["type"] == "VALIDATION_ERROR"
    assert set(body["error"]["details"]["missing"]) == {"pasaporte", "fecha_ingreso"}


def test_tourism_customer(client, tourist):
    assert tourist["regimen_turismo"] is True
    assert tourist["fecha_ingreso"] == date.today().isoformat()


def test_update_cannot_drop_tourism_data(client, admin_headers, tourist):
    resp = client.put(f"/api/customers/{tourist['id']}", json={"pasaporte": None}, headers=admin_headers)
    assert resp.status_code == 400


def test_update_rejects_null_required_fields(client, admin_headers, customer):
    for field in ("nombre", "doc_tipo", "regimen_turismo"):
        resp = client.put(f"/api/customers/{customer['id']}", json={field: None}, headers=admin_headers)
        assert resp.status_code == 400, field
        assert resp.json()["error"]["details"] == {"field": field}
    kept = client.get(f"/api/customers/{customer['id']}", headers=admin_headers).json()
    assert (kept["nombre"], kept["doc_tipo"]) == ("Juan Pérez", "CI")


def test_ruc_customer_needs_valid_check_digit(client, admin_headers):
    bad = {"nombre": "Empresa SA", "doc_tipo": "RUC", "doc_numero": "80000000-5"}
    resp = client.post("/api/customers", json=bad, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["error"]["details"] == {"field": "doc_numero"}

    good = dict(bad, doc_numero=VALID_RUC)
    resp = client.post("/api/customers", json=good, headers=admin_headers)
    assert resp.status_code == 201
    assert resp.json()["doc_numero"] == VALID_RUC


def test_readonly_can_read_but_not_write(client, readonly_headers, customer):
    assert client.get(f"/api/customers/{customer['id']}", headers=readonly_headers).status_code == 200
    resp = client.post("/api/customers", json={"nombre": "X", "doc_numero": "1"}, headers=readonly_headers)
    assert resp.status_code == 403


def test_user_role_can_write(client, user_headers):
    resp = client.post("/api/customers", json={"nombre": "Carlos", "doc_numero": "445566"}, headers=user_headers)
    assert resp.status_code == 201


def test_unknown_customer(client, admin_headers):
    resp = client.get("/api/customers/00000000-0000-0000-0000-000000000000", headers=admin_headers)
    assert resp.status_code == 404
    assert resp.json()["error"]["type"] == "NOT_FOUND"


class TestVehicles:
    def test_plate_is_normalized(self, vehicle):
        assert vehicle["placa"] == "ABC 123"

    def test_vehicle_needs_existing_customer(self, client, admin_headers):
        resp = client.post(
            "/api/vehicles",
            json={"customer_id": "00000000-0000-0000-0000-000000000000", "placa": "X", "marca": "Kia", "modelo": "Rio"},
            headers=admin_headers,
        )
        assert resp.status_code == 400

    def test_by_customer(self, client, admin_headers, customer, vehicle):
        resp = client.get(f"/api/vehicles/by-customer/{customer['id']}", headers=admin_headers)
        assert resp.status_code == 200
        assert [v["id"] for v in resp.json()] == [vehicle["id"]]

    def test_update(self, client, admin_headers, vehicle):
        resp = client.put(f"/api/vehicles/{vehicle['id']}", json={"color": "Blanco", "placa": "xyz 999"}, headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["color"] == "Blanco"
        assert resp.json()["placa"] == "XYZ 999"

    def test_delete_customer_removes_vehicles(self, client, admin_headers, customer, vehicle):
        assert client.delete(f"/api/customers/{customer['id']}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/vehicles/{vehicle['id']}", headers=admin_headers).status_code == 404

    def test_referenced_vehicle_and_customer_cannot_be_deleted(self, client, admin_headers, customer, vehicle):
        resp = client.post(
            "/api/work-orders",
            json={
                "customer_id": customer["id"],
                "vehicle_id": vehicle["id"],
                "items": [{"nombre": "Lavado simple", "precio": "30000"}],
            },
            headers=admin_headers,
        )
        assert resp.status_code == 201

        resp = client.delete(f"/api/vehicles/{vehicle['id']}", headers=admin_headers)
        assert resp.status_code == 409
        resp = client.delete(f"/api/customers/{customer['id']}", headers=admin_headers)
        assert resp.status_code == 409
        assert resp.json()["error"]["type"] == "CONFLICT"
