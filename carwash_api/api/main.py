from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict
from uuid import UUID, uuid4

from fastapi import APIRouter, FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from jose import JWTError

from carwash_api.core.encryption import EncryptionKeyError
from carwash_api.core.logging import configure_logging, correlation_id_var
from carwash_api.core.security import decode_token
from carwash_api.core.settings import get_app_settings
from carwash_api.db.run_migrations import main as run_alembic
from carwash_api.db.seed import seed_all
from carwash_api.db.session import get_session_maker
from carwash_api.repositories.security import UserRepository
from carwash_api.schemas.common import ErrorInfo, ErrorResponse, MessageResponse
from carwash_api.schemas.realtime import WsEnvelope
from carwash_api.services.dashboard import DashboardService
from carwash_api.services.errors import ServiceError
from carwash_api.services.realtime import DASHBOARD_TOPIC, broadcast_manager

# Routers
from carwash_api.api.routes.auth import router as auth_router
from carwash_api.api.routes.users import router as users_router
from carwash_api.api.routes.usage import router as usage_router
from carwash_api.api.routes.company import router as company_router
from carwash_api.api.routes.dnit import router as dnit_router
# Domain routers
from carwash_api.api.routes.catalog import categories_router, combos_router, services_router
from carwash_api.api.routes.customers import customers_router, vehicles_router
from carwash_api.api.routes.work_orders import router as work_orders_router
from carwash_api.api.routes.inventory import router as inventory_router
from carwash_api.api.routes.sales import router as sales_router
from carwash_api.api.routes.printing import router as printing_router
from carwash_api.api.routes.dashboard import router as dashboard_router
from carwash_api.api.routes.reports import router as reports_router
from carwash_api.api.routes.admin import router as admin_router

settings = get_app_settings()

# Configure structured logging once at import
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "System", "description": "System and operational endpoints."},
    {"name": "Health", "description": "Liveness check."},
    {"name": "Auth", "description": "Authentication and token endpoints."},
    {"name": "Users", "description": "User administration endpoints."},
    {"name": "Usage", "description": "Monthly invoice quota per account."},
    {"name": "Company", "description": "Company fiscal identity and timbrado."},
    {"name": "DNIT", "description": "DNIT electronic invoicing settings."},
    {"name": "Catalog", "description": "Categories, services and service combos."},
    {"name": "Customers", "description": "Customers, including tourism regime data."},
    {"name": "Vehicles", "description": "Customer vehicles."},
    {"name": "Work Orders", "description": "Work orders, lines and status transitions."},
    {"name": "Inventory", "description": "Stock items and alerts."},
    {"name": "Sales", "description": "Invoices under the active timbrado."},
    {"name": "Print", "description": "Invoice and work order print previews (JSON or PDF)."},
    {"name": "Dashboard", "description": "Today's operational figures."},
    {"name": "Reports", "description": "Sales, service and customer reports (JSON/CSV/Excel/PDF)."},
    {
        "name": "WebSocket",
        "description": "WebSocket usage, endpoints, and connection details.",
    },
]

app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    openapi_tags=openapi_tags,
)

# CORS - avoid wildcard with credentials
cors_allow_credentials = settings.CORS_ALLOW_CREDENTIALS
if settings.CORS_ORIGINS == ["*"] and cors_allow_credentials:
    logger.warning("CORS_ALLOW_CREDENTIALS=True with '*' origins is not permitted; disabling credentials.")
    cors_allow_credentials = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=cors_allow_credentials,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """
    Enrich request context with a correlation_id for logging and error responses.
    Adds 'X-Correlation-ID' to every response.
    """
    corr = request.headers.get("X-Correlation-ID") or request.headers.get("X-Request-ID") or str(uuid4())
    token_corr = correlation_id_var.set(corr)
    request.state.correlation_id = corr

    logger.info("Incoming request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
    finally:
        correlation_id_var.reset(token_corr)

    response.headers["X-Correlation-ID"] = corr
    return response


def _build_error_response(
    request: Request,
    status_code: int,
    error_type: str,
    message: str,
    details: Any | None = None,
) -> JSONResponse:
    """Build a standardized ErrorResponse JSONResponse."""
    ts = datetime.now(tz=timezone.utc)
    corr = getattr(request.state, "correlation_id", None)
    err = ErrorResponse(
        status=status_code,
        error=ErrorInfo(type=error_type, message=message, details=details),
        correlation_id=corr,
        path=request.url.path,
        method=request.method,
        timestamp=ts,
    )
    return JSONResponse(status_code=status_code, content=err.model_dump(mode="json"))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Global handler for HTTPException to produce a standardized error envelope.
    """
    detail = exc.detail if isinstance(exc.detail, str) else "HTTP Error"
    response = _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type="http_error",
        message=str(detail),
        details=None if isinstance(exc.detail, str) else exc.detail,
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Global handler for request validation errors with a standard structure.
    """
    return _build_error_response(
        request=request,
        status_code=422,
        error_type="validation_error",
        message="Request validation failed",
        details=exc.errors(),
    )


@app.exception_handler(ServiceError)
async def service_exception_handler(request: Request, exc: ServiceError):
    """
    Map domain errors raised by services (not found, business rules, fiscal
    compliance, timbrado, usage limits) to the standard envelope.
    """
    logger.info("%s: %s", exc.code, exc.message)
    return _build_error_response(
        request=request,
        status_code=exc.status_code,
        error_type=exc.code,
        message=exc.message,
        details=exc.details,
    )


@app.exception_handler(EncryptionKeyError)
async def encryption_exception_handler(request: Request, exc: EncryptionKeyError):
    logger.error("Encryption key problem: %s", exc)
    return _build_error_response(
        request=request,
        status_code=500,
        error_type="ENCRYPTION_ERROR",
        message=str(exc),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler to avoid leaking stack traces and to return a structured error.
    """
    logger.exception("Unhandled error processing request")
    return _build_error_response(
        request=request,
        status_code=500,
        error_type="internal_error",
        message="An unexpected error occurred",
        details=None,
    )


@app.on_event("startup")
async def on_startup() -> None:
    """
    Run migrations and optional seeding on service startup.

    Both steps are controlled by settings so tests and external deployments can skip them.
    """
    startup_settings = get_app_settings()
    if startup_settings.RUN_MIGRATIONS_ON_STARTUP:
        try:
            logger.info("Running Alembic migrations: upgrade head")
            # Alembic's env.py drives its own event loop
            await asyncio.to_thread(run_alembic, ["upgrade", "head"])
            logger.info("Migrations completed.")
        except Exception as exc:
            logger.exception("Migration step failed: %s", exc)

    if startup_settings.AUTO_SEED:
        try:
            logger.info("Running database seeding...")
            await seed_all()
            logger.info("Seeding completed.")
        except Exception as exc:
            logger.exception("Seeding step failed: %s", exc)


# Build API router and include sub-routers
api = APIRouter(prefix="/api")

# PUBLIC_INTERFACE
@api.get(
    "/health",
    response_model=MessageResponse,
    summary="Health Check",
    tags=["Health"],
)
def health_check() -> MessageResponse:
    """
    Basic liveness health check endpoint.

    Returns:
        MessageResponse: Simple confirmation that the service is running.
    """
    return MessageResponse(message="Healthy")


# PUBLIC_INTERFACE
@api.get(
    "/websocket-info",
    response_model=Dict[str, Any],
    summary="WebSocket Usage Information",
    description="Connection details for the dashboard WebSocket endpoint.",
    tags=["WebSocket"],
)
def websocket_info() -> Dict[str, Any]:
    """
    Describe how to connect to WebSocket endpoints in this service.

    Returns:
        JSON object with usage notes and endpoints list describing query params and message format.
    """
    return {
        "usage": (
            "Connect with a valid access token as a 'token' query parameter. "
            "Message format is JSON with fields: { type: string, payload: object, at: ISO-8601, user_id?: string }."
        ),
        "security": {
            "token": "Access JWT issued by /api/auth/login; the account must be active and not blocked.",
        },
        "endpoints": [
            {
                "path": "/ws/dashboard",
                "summary": "Real-time dashboard metrics (server push).",
                "query": ["token"],
                "messages": {
                    "client_to_server": ["ping"],
                    "server_to_client": ["metrics.snapshot", "pong"],
                },
            }
        ],
        "notes": "WebSocket endpoints are not represented in OpenAPI schema; refer to this endpoint for usage.",
    }


# Include all routers under /api
api.include_router(auth_router)
api.include_router(users_router)
api.include_router(usage_router)
api.include_router(company_router)
api.include_router(dnit_router)
api.include_router(categories_router)
api.include_router(services_router)
api.include_router(combos_router)
api.include_router(customers_router)
api.include_router(vehicles_router)
api.include_router(work_orders_router)
api.include_router(inventory_router)
api.include_router(sales_router)
api.include_router(printing_router)
api.include_router(dashboard_router)
api.include_router(reports_router)
api.include_router(admin_router)

app.include_router(api)


async def _validate_ws_and_get_user(websocket: WebSocket) -> str:
    """
    Validate a WebSocket connection from its 'token' query parameter.

    Returns:
        The user id.
    Raises:
        WebSocketDisconnect if the token is missing, invalid, or the account cannot sign in.
    """
    token = websocket.query_params.get("token")
    try:
        claims = decode_token(token) if token else None
    except JWTError:
        claims = None

    user_id = claims.get("sub") if claims and claims.get("type") == "access" else None
    if not user_id:
        await websocket.close(code=4401)
        raise WebSocketDisconnect(code=4401)

    async with get_session_maker()() as session:
        try:
            user = await UserRepository(session).get_user_by_id(UUID(str(user_id)))
        except ValueError:
            user = None
    if not user:
        await websocket.close(code=4401)
        raise WebSocketDisconnect(code=4401)
    if not user.is_active or user.is_blocked:
        await websocket.close(code=4403)
        raise WebSocketDisconnect(code=4403)
    return str(user.id)


# PUBLIC_INTERFACE
@app.websocket("/ws/dashboard")
async def ws_dashboard(websocket: WebSocket):
    """
    WebSocket endpoint for real-time dashboard metrics.

    Security:
      - Query param 'token' must be a valid access JWT.
    Messages:
      - Server -> Client: type='metrics.snapshot' payload=DashboardMetrics, on connect and
        after every sale, work-order or stock change
      - Client -> Server: 'ping' is answered with 'pong'; other messages are ignored.
    """
    await websocket.accept()
    try:
        user_id = await _validate_ws_and_get_user(websocket)
    except WebSocketDisconnect:
        return

    await broadcast_manager.connect(DASHBOARD_TOPIC, websocket)

    try:
        async with get_session_maker()() as session:
            snapshot = await DashboardService(session).compute_metrics()
        env = WsEnvelope(type="metrics.snapshot", payload=snapshot.model_dump(mode="json"), user_id=user_id)
        await websocket.send_json(env.model_dump(mode="json"))
    except Exception:
        logger.exception("Failed to send initial metrics snapshot")

    try:
        while True:
            msg = await websocket.receive_text()
            if msg and msg.lower() == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        await broadcast_manager.disconnect(DASHBOARD_TOPIC, websocket)
    except Exception:
        logger.exception("Error on ws_dashboard connection")
        await broadcast_manager.disconnect(DASHBOARD_TOPIC, websocket)
        await websocket.close()
