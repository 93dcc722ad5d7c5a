"""
Name: Secure Payments Portal ASGI Application

Responsibilities:
  - Build the FastAPI app (create_app) from Settings
  - Open/close the DB pool and the Argon2 hashing pool in the lifespan
  - Seed the demo employee when enabled (never in production)
  - Mount the /api/employees routers and /healthz

Collaborators:
  - container: repositories, hasher, hashing pool
  - crosscutting.middleware: request context + security headers
  - api.exception_handlers: problem+json for every failure

Notes:
  - Test environments (APP_ENV=test/testing/ci) use in-memory stores and
    never touch the pool.
  - Run with: uvicorn payments_portal.api.main:app
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from ..application.dev_seed_employee import ensure_demo_employee
from ..container import get_employee_repository, get_hashing_pool, get_password_hasher
from ..crosscutting.config import Settings, get_settings
from ..crosscutting.logger import logger
from ..crosscutting.middleware import (
    REQUEST_ID_HEADER,
    RequestContextMiddleware,
    SecurityHeadersMiddleware,
)
from ..infrastructure.db import SessionSettings, close_pool, init_pool
from .auth_routes import router as auth_router
from .exception_handlers import register_exception_handlers
from .transaction_routes import router as transaction_router

API_VERSION = "0.1.0"

_OPENAPI_TAGS = [
    {"name": "auth", "description": "Employee login, token refresh and logout"},
    {
        "name": "transactions",
        "description": "Verification, settlement batches and daily statistics",
    },
]

health_router = APIRouter(tags=["health"])


@health_router.get("/healthz")
def healthz(request: Request):
    """Liveness + credential store reachability."""
    store_ok = get_employee_repository().ping()
    return {
        "ok": store_ok,
        "db": "connected" if store_ok else "disconnected",
        "request_id": getattr(request.state, "request_id", None),
    }


def _open_pool(settings: Settings) -> None:
    init_pool(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        session=SessionSettings(
            statement_timeout_ms=settings.db_statement_timeout_ms,
            lock_timeout_ms=settings.db_lock_timeout_ms,
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    use_db = not settings.is_test()

    if use_db:
        _open_pool(settings)
    try:
        ensure_demo_employee(
            settings,
            employee_repo=get_employee_repository(),
            password_hasher=get_password_hasher(),
        )
        logger.info(
            "Portal API iniciada",
            extra={
                "app_env": settings.app_env,
                "persistence": "postgres" if use_db else "in_memory",
                "lockout_max_attempts": settings.lockout_max_attempts,
                "argon2_max_concurrency": settings.argon2_max_concurrency,
            },
        )
        yield
    finally:
        get_hashing_pool().shutdown()
        get_hashing_pool.cache_clear()
        if use_db:
            close_pool()
        logger.info("Portal API detenida")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    application = FastAPI(
        title="Secure Payments Portal API",
        version=API_VERSION,
        lifespan=lifespan,
        openapi_tags=_OPENAPI_TAGS,
    )
    application.state.settings = settings

    # R: add_middleware apila: el último agregado corre primero (CORS).
    application.add_middleware(
        SecurityHeadersMiddleware, is_production=settings.is_production()
    )
    application.add_middleware(RequestContextMiddleware)
    # R: CORS con credenciales (cookie httpOnly): solo orígenes explícitos.
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins_list(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER, "Retry-After"],
    )

    application.include_router(health_router)
    application.include_router(auth_router)
    application.include_router(transaction_router)
    register_exception_handlers(application)
    return application


app = create_app()
