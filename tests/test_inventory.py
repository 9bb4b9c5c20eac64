def test_alert_state_follows_stock(client, admin_headers, stock_item):
    assert stock_item["estado_alerta"] == "normal"
    url = f"/api/inventory/{stock_item['id']}/stock"

    resp = client.put(url, json={"action": "remove", "quantity": 7}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["stock_actual"] == 3
    assert resp.json()["estado_alerta"] == "bajo"

    resp = client.put(url, json={"action": "remove", "quantity": 3}, headers=admin_headers)
    assert resp.json()["estado_alerta"] == "critico"

    alerts = client.get("/api/inventory/alerts", headers=admin_headers).json()
    assert [a["id"] for a in alerts] == [stock_item["id"]]

    resp = client.put(url, json={"action": "add", "quantity": 20}, headers=admin_headers)
    assert resp.json()["stock_actual"] == 20
    assert resp.json()["estado_alerta"] == "normal"
    assert client.get("/api/inventory/alerts", headers=admin_headers).json() == []


def test_cannot_remove_more_than_on_hand(client, admin_headers, stock_item):
    resp = client.put(
        f"/api/inventory/{stock_item['id']}/stock", json={"action": "remove", "quantity": 11}, headers=admin_headers
    )
    assert resp.status_code == 400
    item = client.get(f"/api/inventory/{stock_item['id']}", headers=admin_headers).json()
    assert item["stock_actual"] == 10


def test_user_role_adjusts_stock_but_cannot_edit_items(client, user_headers, stock_item):
    resp = client.put(
        f"/api/inventory/{stock_item['id']}/stock", json={"action": "add", "quantity": 1}, headers=user_headers
    )
    assert resp.status_code == 200
    resp = client.put(f"/api/inventory/{stock_item['id']}", json={"precio": "1"}, headers=user_headers)
    assert resp.status_code == 403


def test_update_recomputes_alert(client, admin_headers, stock_item):
    resp = client.put(f"/api/inventory/{stock_item['id']}", json={"stock_minimo": 15}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["estado_alerta"] == "bajo"


def test_delete(client, admin_headers, stock_item):
    assert client.delete(f"/api/inventory/{stock_item['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/inventory/{stock_item['id']}", headers=admin_headers).status_code == 404
