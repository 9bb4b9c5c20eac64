"""
Shared fixtures: a throwaway SQLite database per test, a TestClient and
login helpers for the seeded admin plus 'user' and 'readonly' accounts.
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Callable, Dict

_TMP_DIR = tempfile.mkdtemp(prefix="carwash-tests-")
DB_PATH = Path(_TMP_DIR) / "test.db"

# Must be set before the application modules read their settings
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{DB_PATH.as_posix()}"
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "false"
os.environ["AUTO_SEED"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-the-car-wash-suite"
os.environ["ADMIN_USERNAME"] = "admin"
os.environ["ADMIN_PASSWORD"] = "admin123"
os.environ["DNIT_ENCRYPTION_KEY"] = "a-test-encryption-secret-of-at-least-32-chars"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import event, pool  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from carwash_api.api.main import app  # noqa: E402
from carwash_api.core.clock import business_today  # noqa: E402
from carwash_api.db.base import Base  # noqa: E402
from carwash_api.db.seed import seed_all  # noqa: E402
from carwash_api.db.session import get_async_session  # noqa: E402

ADMIN_CREDENTIALS = {"username": "admin", "password": "admin123"}
VALID_RUC = "80000000-6"

test_engine = create_async_engine(os.environ["DATABASE_URL"], poolclass=pool.NullPool)


@event.listens_for(test_engine.sync_engine, "connect")
def _sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestSessionMaker = async_sessionmaker(bind=test_engine, expire_on_commit=False, autoflush=False)


async def _override_session():
    async with TestSessionMaker() as session:
        yield session


async def _reset_database() -> None:
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    async with TestSessionMaker() as session:
        await seed_all(session)


def run_sql(fn: Callable[[AsyncSession], Any]) -> Any:
    """Run an async callable against a fresh session and commit (for arranging test state)."""

    async def _run():
        async with TestSessionMaker() as session:
            result = await fn(session)
            await session.commit()
            return result

    return asyncio.run(_run())


@pytest.fixture(autouse=True)
def database():
    asyncio.run(_reset_database())
    yield


@pytest.fixture
def client(database) -> TestClient:
    app.dependency_overrides[get_async_session] = _override_session
    test_client = TestClient(app)
    yield test_client
    app.dependency_overrides.clear()


def login(client: TestClient, username: str, password: str) -> Dict[str, str]:
    resp = client.post("/api/auth/login", data={"username": username, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def admin_headers(client: TestClient) -> Dict[str, str]:
    return login(client, ADMIN_CREDENTIALS["username"], ADMIN_CREDENTIALS["password"])


@pytest.fixture
def make_user(client: TestClient, admin_headers: Dict[str, str]):
    """Create an account through the admin API and return its auth headers."""

    def _make(username: str, role: str = "user", password: str = "secret123", **extra: Any) -> Dict[str, str]:
        body = {"username": username, "password": password, "full_name": username.title(), "role": role}
        body.update(extra)
        resp = client.post("/api/users", json=body, headers=admin_headers)
        assert resp.status_code == 201, resp.text
        return login(client, username, password)

    return _make


@pytest.fixture
def user_headers(make_user) -> Dict[str, str]:
    return make_user("cajero", role="user")


@pytest.fixture
def readonly_headers(make_user) -> Dict[str, str]:
    return make_user("consulta", role="readonly")


def company_payload(**overrides: Any) -> Dict[str, Any]:
    today = business_today()
    body = {
        "ruc": VALID_RUC,
        "razon_social": "Lavadero Central S.A.",
        "nombre_fantasia": "Lavadero Central",
        "timbrado_numero": "12345678",
        "timbrado_desde": (today - timedelta(days=30)).isoformat(),
        "timbrado_hasta": (today + timedelta(days=365)).isoformat(),
        "establecimiento": "001",
        "punto_expedicion": "001",
        "direccion": "Av. Mariscal López 1234",
        "ciudad": "Asunción",
        "telefono": "021 555 000",
    }
    body.update(overrides)
    return body


@pytest.fixture
def company(client: TestClient, admin_headers: Dict[str, str]) -> Dict[str, Any]:
    resp = client.put("/api/company-config", json=company_payload(), headers=admin_headers)
    assert resp.status_code == 200, resp.text
    return resp.json()["config"]


@pytest.fixture
def customer(client: TestClient, admin_headers: Dict[str, str]) -> Dict[str, Any]:
    resp = client.post(
        "/api/customers",
        json={"nombre": "Juan Pérez", "doc_tipo": "CI", "doc_numero": "1234567", "telefono": "0981 000 000"},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def tourist(client: TestClient, admin_headers: Dict[str, str]) -> Dict[str, Any]:
    resp = client.post(
        "/api/customers",
        json={
            "nombre": "Ana Souza",
            "doc_tipo": "Pasaporte",
            "doc_numero": "BR998877",
            "regimen_turismo": True,
            "pais": "Brasil",
            "pasaporte": "BR998877",
            "fecha_ingreso": date.today().isoformat(),
        },
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def vehicle(client: TestClient, admin_headers: Dict[str, str], customer: Dict[str, Any]) -> Dict[str, Any]:
    resp = client.post(
        "/api/vehicles",
        json={"customer_id": customer["id"], "placa": "abc 123", "marca": "Toyota", "modelo": "Corolla", "color": "Gris"},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def service(client: TestClient, admin_headers: Dict[str, str]) -> Dict[str, Any]:
    resp = client.post(
        "/api/services",
        json={"nombre": "Lavado completo", "precio": "50000", "duracion_min": 45, "categoria": "Lavado"},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


@pytest.fixture
def stock_item(client: TestClient, admin_headers: Dict[str, str]) -> Dict[str, Any]:
    resp = client.post(
        "/api/inventory",
        json={"nombre": "Aromatizante", "precio": "15000", "stock_actual": 10, "stock_minimo": 3},
        headers=admin_headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
