def test_default_categories_are_seeded(client, readonly_headers):
    resp = client.get("/api/categories", headers=readonly_headers)
    assert resp.status_code == 200
    assert {c["nombre"] for c in resp.json()} == {"Lavado", "Detallado", "Productos de limpieza", "Accesorios"}


def test_categories_by_type_include_shared_ones(client, admin_headers):
    resp = client.get("/api/categories/by-type/servicios", headers=admin_headers)
    assert resp.status_code == 200
    assert {c["nombre"] for c in resp.json()} == {"Lavado", "Detallado", "Accesorios"}

    assert client.get("/api/categories/by-type/otros", headers=admin_headers).status_code == 422


def test_category_crud(client, admin_headers):
    resp = client.post(
        "/api/categories", json={"nombre": "Motos", "tipo": "servicios", "color": "#ff0000"}, headers=admin_headers
    )
    assert resp.status_code == 201
    category = resp.json()
    assert category["color"] == "#FF0000"

    resp = client.put(f"/api/categories/{category['id']}", json={"activa": False}, headers=admin_headers)
    assert resp.json()["activa"] is False
    active = client.get("/api/categories/active", headers=admin_headers).json()
    assert category["id"] not in {c["id"] for c in active}

    assert client.delete(f"/api/categories/{category['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/categories/{category['id']}", headers=admin_headers).status_code == 404


def test_bad_color_is_rejected(client, admin_headers):
    resp = client.post("/api/categories", json={"nombre": "X", "color": "red"}, headers=admin_headers)
    assert resp.status_code == 422
    assert resp.json()["error"]["type"] == "validation_error"


def test_services_require_admin_to_write(client, user_headers):
    resp = client.post("/api/services", json={"nombre": "Encerado", "precio": "40000"}, headers=user_headers)
    assert resp.status_code == 403


def test_service_price_must_be_positive(client, admin_headers):
    resp = client.post("/api/services", json={"nombre": "Gratis", "precio": "0"}, headers=admin_headers)
    assert resp.status_code == 422


def test_null_for_required_fields_is_rejected(client, admin_headers, service):
    category_id = client.get("/api/categories", headers=admin_headers).json()[0]["id"]
    resp = client.put(f"/api/categories/{category_id}", json={"nombre": None}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["error"]["details"] == {"field": "nombre"}

    for field in ("nombre", "precio", "activo"):
        resp = client.put(f"/api/services/{service['id']}", json={field: None}, headers=admin_headers)
        assert resp.status_code == 400, field
        assert resp.json()["error"]["details"] == {"field": field}
    assert client.get(f"/api/services/{service['id']}", headers=admin_headers).json()["nombre"] == "Lavado completo"


def test_service_update_and_active_list(client, admin_headers, service):
    resp = client.put(f"/api/services/{service['id']}", json={"activo": False}, headers=admin_headers)
    assert resp.status_code == 200
    assert client.get("/api/services/active", headers=admin_headers).json() == []
    assert len(client.get("/api/services", headers=admin_headers).json()) == 1


class TestCombos:
    def _second_service(self, client, admin_headers):
        resp = client.post("/api/services", json={"nombre": "Aspirado", "precio": "20000"}, headers=admin_headers)
        return resp.json()

    def test_combo_needs_two_distinct_services(self, client, admin_headers, service):
        resp = client.post(
            "/api/service-combos",
            json={"nombre": "Combo", "precio_total": "60000", "service_ids": [service["id"], service["id"]]},
            headers=admin_headers,
        )
        assert resp.status_code == 400

    def test_create_and_deactivate(self, client, admin_headers, service):
        other = self._second_service(client, admin_headers)
        resp = client.post(
            "/api/service-combos",
            json={"nombre": "Full", "precio_total": "60000", "service_ids": [service["id"], other["id"]]},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        combo = resp.json()
        assert {s["id"] for s in combo["services"]} == {service["id"], other["id"]}

        resp = client.delete(f"/api/service-combos/{combo['id']}", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.json()["activo"] is False
        assert client.get("/api/service-combos/active", headers=admin_headers).json() == []
        assert len(client.get("/api/service-combos", headers=admin_headers).json()) == 1

    def test_unknown_service_in_combo(self, client, admin_headers, service):
        resp = client.post(
            "/api/service-combos",
            json={
                "nombre": "Roto",
                "precio_total": "60000",
                "service_ids": [service["id"], "00000000-0000-0000-0000-000000000000"],
            },
            headers=admin_headers,
        )
        assert resp.status_code == 400

    def _combo(self, client, admin_headers, *services):
        resp = client.post(
            "/api/service-combos",
            json={"nombre": "Full", "precio_total": "60000", "service_ids": [s["id"] for s in services]},
            headers=admin_headers,
        )
        assert resp.status_code == 201
        return resp.json()

    def test_service_in_active_combo_cannot_be_deleted(self, client, admin_headers, service):
        other = self._second_service(client, admin_headers)
        combo = self._combo(client, admin_headers, service, other)

        resp = client.delete(f"/api/services/{other['id']}", headers=admin_headers)
        assert resp.status_code == 409
        assert resp.json()["error"]["details"] == {"combos": ["Full"]}
        kept = client.get(f"/api/service-combos/{combo['id']}", headers=admin_headers).json()
        assert len(kept["services"]) == 2
        assert kept["activo"] is True

    def test_inactive_combo_cannot_come_back_short_of_services(self, client, admin_headers, service):
        other = self._second_service(client, admin_headers)
        combo = self._combo(client, admin_headers, service, other)
        client.delete(f"/api/service-combos/{combo['id']}", headers=admin_headers)
        assert client.delete(f"/api/services/{other['id']}", headers=admin_headers).status_code == 200

        resp = client.put(f"/api/service-combos/{combo['id']}", json={"activo": True}, headers=admin_headers)
        assert resp.status_code == 400
        third = client.post("/api/services", json={"nombre": "Encerado", "precio": "30000"}, headers=admin_headers).json()
        resp = client.put(
            f"/api/service-combos/{combo['id']}",
            json={"activo": True, "service_ids": [service["id"], third["id"]]},
            headers=admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["activo"] is True

    def test_combo_rejects_null_price(self, client, admin_headers, service):
        other = self._second_service(client, admin_headers)
        combo = self._combo(client, admin_headers, service, other)
        resp = client.put(f"/api/service-combos/{combo['id']}", json={"precio_total": None}, headers=admin_headers)
        assert resp.status_code == 400
        assert resp.json()["error"]["details"] == {"field": "precio_total"}
