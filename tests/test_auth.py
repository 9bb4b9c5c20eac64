from conftest import login


def test_health_and_correlation_header(client):
    resp = client.get("/api/health", headers={"X-Correlation-ID": "abc-123"})
    assert resp.status_code == 200
    assert resp.json()["message"] == "Healthy"
    assert resp.headers["X-Correlation-ID"] == "abc-123"


def test_login_and_me(client, admin_headers):
    resp = client.get("/api/auth/me", headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["username"] == "admin"
    assert body["role"] == "admin"
    assert body["last_login"] is not None
    assert "hashed_password" not in body


def test_wrong_password_counts_failed_attempts(client, admin_headers):
    client.post("/api/users", json={"username": "lucia", "password": "secret123", "full_name": "Lucía"}, headers=admin_headers)

    resp = client.post("/api/auth/login", data={"username": "lucia", "password": "wrong"})
    assert resp.status_code == 401
    assert resp.json()["error"]["message"] == "Usuario o contraseña incorrectos"

    users = client.get("/api/users", headers=admin_headers).json()
    lucia = next(u for u in users if u["username"] == "lucia")
    assert lucia["failed_login_attempts"] == 1

    login(client, "lucia", "secret123")
    users = client.get("/api/users", headers=admin_headers).json()
    assert next(u for u in users if u["username"] == "lucia")["failed_login_attempts"] == 0


def test_unknown_user(client):
    resp = client.post("/api/auth/login", data={"username": "nadie", "password": "x"})
    assert resp.status_code == 401


def test_blocked_and_inactive_accounts_cannot_sign_in(client, admin_headers):
    created = client.post(
        "/api/users", json={"username": "pedro", "password": "secret123", "full_name": "Pedro"}, headers=admin_headers
    ).json()

    client.patch(f"/api/users/{created['id']}", json={"is_blocked": True}, headers=admin_headers)
    resp = client.post("/api/auth/login", data={"username": "pedro", "password": "secret123"})
    assert resp.status_code == 403
    assert resp.json()["error"]["message"] == "Cuenta bloqueada"

    client.patch(f"/api/users/{created['id']}", json={"is_blocked": False, "is_active": False}, headers=admin_headers)
    resp = client.post("/api/auth/login", data={"username": "pedro", "password": "secret123"})
    assert resp.status_code == 403
    assert resp.json()["error"]["message"] == "Cuenta inactiva"


def test_expired_account_cannot_sign_in(client, admin_headers):
    client.post(
        "/api/users",
        json={
            "username": "vencido",
            "password": "secret123",
            "full_name": "Vencido",
            "expiration_date": "2020-01-01T00:00:00Z",
        },
        headers=admin_headers,
    )
    resp = client.post("/api/auth/login", data={"username": "vencido", "password": "secret123"})
    assert resp.status_code == 403
    assert resp.json()["error"]["message"] == "Cuenta expirada"


def test_refresh_flow(client):
    tokens = client.post("/api/auth/login", data={"username": "admin", "password": "admin123"}).json()

    resp = client.post("/api/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert resp.status_code == 200
    assert resp.json()["access_token"]

    # An access token is not a refresh token
    resp = client.post("/api/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert resp.status_code == 401


def test_refresh_token_is_not_accepted_as_bearer(client):
    tokens = client.post("/api/auth/login", data={"username": "admin", "password": "admin123"}).json()
    resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {tokens['refresh_token']}"})
    assert resp.status_code == 401


def test_missing_token_uses_error_envelope(client):
    resp = client.get("/api/customers")
    assert resp.status_code == 401
    body = resp.json()
    assert body["status"] == 401
    assert body["error"]["type"] == "http_error"
    assert body["path"] == "/api/customers"
    assert body["method"] == "GET"
    assert body["correlation_id"]


def test_logout(client, admin_headers):
    resp = client.post("/api/auth/logout", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Sesión cerrada"


class TestUserAdministration:
    def test_duplicate_username(self, client, admin_headers):
        body = {"username": "maria", "password": "secret123", "full_name": "María"}
        assert client.post("/api/users", json=body, headers=admin_headers).status_code == 201
        resp = client.post("/api/users", json=body, headers=admin_headers)
        assert resp.status_code == 400

    def test_non_admin_cannot_manage_users(self, client, user_headers):
        assert client.get("/api/users", headers=user_headers).status_code == 403

    def test_admin_cannot_delete_itself(self, client, admin_headers):
        me = client.get("/api/auth/me", headers=admin_headers).json()
        resp = client.delete(f"/api/users/{me['id']}", headers=admin_headers)
        assert resp.status_code == 400

    def test_change_own_password_requires_current(self, client, user_headers):
        me = client.get("/api/auth/me", headers=user_headers).json()
        url = f"/api/users/{me['id']}/change-password"

        resp = client.post(url, json={"current_password": "bad-one", "new_password": "nueva123"}, headers=user_headers)
        assert resp.status_code == 400

        resp = client.post(url, json={"current_password": "secret123", "new_password": "nueva123"}, headers=user_headers)
        assert resp.status_code == 200
        login(client, "cajero", "nueva123")

    def test_user_cannot_change_someone_elses_password(self, client, admin_headers, user_headers):
        admin = client.get("/api/auth/me", headers=admin_headers).json()
        resp = client.post(
            f"/api/users/{admin['id']}/change-password",
            json={"current_password": "admin123", "new_password": "hacked1"},
            headers=user_headers,
        )
        assert resp.status_code == 403
