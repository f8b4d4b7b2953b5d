"""ASGI application for the smsgate back-office.

``create_app`` wires the routers, the error contract and the request
middleware; the lifespan owns the database and the background access log.
"""

import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from smsgate.core.config import Settings, get_settings
from smsgate.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
)
from smsgate.domain.exceptions import SMSGateError
from smsgate.infrastructure.persistence.database import (
    close_database,
    get_db_manager,
    init_database,
)
from smsgate.infrastructure.services import AccessLogRecorder

logger = get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
SERVICE_NAME = "smsgate"

health_router = APIRouter(tags=["health"])


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Bring the database up before serving and flush pending access logs on exit."""
    settings = get_settings()
    configure_logging(settings)
    logger.info(
        "Starting smsgate",
        version=settings.app_version,
        environment=settings.environment,
        registration_mode=settings.registration_mode,
    )

    try:
        await init_database(settings)
    except Exception as e:
        logger.error("Database startup failed", error=str(e))
        raise

    recorder = AccessLogRecorder(
        get_db_manager().session_factory,
        enabled=settings.access_log_enabled,
    )
    app.state.access_log_recorder = recorder

    yield

    logger.info("Stopping smsgate", pending_access_logs=recorder.pending)
    await recorder.drain()
    await close_database()


@health_router.get("/health")
async def health() -> dict:
    """Process is up. Does not touch the database."""
    return {"status": "healthy", "service": SERVICE_NAME, "version": get_settings().app_version}


@health_router.get("/live")
async def live() -> dict:
    return {"status": "alive", "service": SERVICE_NAME, "version": get_settings().app_version}


@health_router.get("/ready")
async def ready():
    """Ready to serve: the database answers a trivial query."""
    if await get_db_manager().check_connection():
        return {
            "status": "ready",
            "service": SERVICE_NAME,
            "version": get_settings().app_version,
            "database": "connected",
        }
    return JSONResponse(
        status_code=503,
        content={"status": "not_ready", "service": SERVICE_NAME, "database": "disconnected"},
    )


def _error(status_code: int, reason: str, message: str, **extra) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        status_code=status_code,
        content={"error": reason, "message": message, **extra},
        headers=headers,
    )


async def handle_domain_error(request: Request, exc: SMSGateError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Domain error", path=request.url.path, error=exc.message)
    return _error(exc.status_code, exc.reason, exc.message)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies, paths and queries are client errors with per-field details."""
    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    return _error(400, "invalid_input", "Request validation failed", details=details)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled exception",
        method=request.method,
        path=request.url.path,
        exc_type=type(exc).__name__,
    )
    message = str(exc) if get_settings().debug else "An unexpected error occurred"
    return _error(500, "internal_error", message)


async def correlation_middleware(request: Request, call_next):
    """Tag every log line of a request with one correlation id and echo it back."""
    correlation_id = request.headers.get(CORRELATION_HEADER) or f"cid_{uuid.uuid4().hex[:12]}"
    bind_correlation_id(correlation_id)
    try:
        response = await call_next(request)
        logger.info(
            "Request handled",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
        )
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
    finally:
        clear_context()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings used for wiring (prefix, CORS, docs). Defaults to
            the cached process settings. Request-time settings still come from
            ``Depends(get_settings)``.
    """
    from smsgate.infrastructure.api.routes import (
        admin_router,
        auth_router,
        invites_router,
    )

    settings = settings or get_settings()
    docs_enabled = settings.is_development

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Administrative back-office for an SMS gateway",
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )
    app.middleware("http")(correlation_middleware)

    app.add_exception_handler(SMSGateError, handle_domain_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    prefix = settings.api_prefix
    app.include_router(health_router)
    app.include_router(auth_router, prefix=f"{prefix}/auth", tags=["auth"])
    app.include_router(admin_router, prefix=f"{prefix}/admin", tags=["admin"])
    app.include_router(invites_router, prefix=f"{prefix}/admin/invites", tags=["invites"])

    return app


app = create_app()
