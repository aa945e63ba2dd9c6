"""
SyncMe - FastAPI Application Factory
====================================

What:  Creates and configures the notes service.
How:   create_app() registers middleware, exception handlers and routers;
       the lifespan configures logging, applies migrations and disposes the
       engine on shutdown.
Who:   uvicorn (`uvicorn syncme.main:app`) and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌─────────────────┐               │
    │  │  Request ID  │→│  Logging        │               │
    │  └──────────────┘ └─────────────────┘               │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ /notes CRUD  │ │ /login       │ │ GET /health │  │
    │  │              │ │ /signup      │ │             │  │
    │  └──────────────┘ └──────────────┘ └─────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation/Conflict→400 │ Unauth→401 │       │   │
    │  │ NotFound→404 │ DB→500 │ anything else→500    │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Apply pending migrations (failures are logged, startup continues)
    3. Log startup complete

    Shutdown:
    1. Dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from syncme import __version__
from syncme.config import settings
from syncme.database import dispose_engine
from syncme.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    SyncMeError,
    UnauthorizedError,
    ValidationError,
)
from syncme.middleware.logging import RequestLoggingMiddleware
from syncme.middleware.request_id import RequestIDMiddleware, request_id_var
from syncme.migrations import run_migrations
from syncme.routes import auth, health, notes

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure root logging once for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # Third-party loggers that are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("SyncMe notes service starting up...")

    if settings.run_migrations_on_startup:
        try:
            await run_migrations()
        except Exception:
            # Startup continues; the schema may be behind the models
            logger.error("An error occurred while migrating the database.", exc_info=True)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("SyncMe notes service shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def _error(status_code: int, error: str, message: str, request: Request) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "request_id": _request_id(request),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

    Handler table:
        ValidationError        → 400 validation_error
        RequestValidationError → 400 validation_error (malformed body or path)
        ConflictError          → 400 conflict
        UnauthorizedError      → 401 unauthorized
        NotFoundError          → 404 not_found
        DatabaseError          → 500 server_error (generic message)
        SyncMeError (base)     → 500 server_error
        Exception              → 500 internal_server_error (stack trace logged)

    Context dicts are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", _request_id(request), exc.message)
        return _error(400, "validation_error", exc.message, request)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        fields = ", ".join(
            ".".join(str(loc) for loc in err.get("loc", [])) for err in errors
        )
        logger.warning("[%s] Request validation failed: %s", _request_id(request), fields)
        return _error(400, "validation_error", f"Invalid request: {fields}", request)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return _error(400, "conflict", exc.message, request)

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return _error(401, "unauthorized", exc.message, request)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error(404, "not_found", exc.message, request)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            _request_id(request), exc.message, exc.context,
        )
        return _error(
            500,
            "server_error",
            "An internal error occurred. Please try again later.",
            request,
        )

    @app.exception_handler(SyncMeError)
    async def handle_app_error(request: Request, exc: SyncMeError):
        logger.error(
            "[%s] %s: %s | Context: %s",
            _request_id(request), type(exc).__name__, exc.message, exc.context,
        )
        return _error(500, "server_error", exc.message, request)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            _request_id(request),
            str(exc),
            exc_info=exc,
        )
        return _error(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
            request,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="SyncMe API",
        description="Notes CRUD API with soft delete, plus signup and login.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: RequestID → Logging → route
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(notes.router)
    app.include_router(auth.router)
    app.include_router(health.router)

    return app


app = create_app()
