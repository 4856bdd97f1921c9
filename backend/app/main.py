"""
WellNest Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn app.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Logging → GZip → CORS         │
    │                                                          │
    │  Routes:                                                 │
    │    /api/auth  /api/employees  /api/events                │
    │    /api/practitioners  /api/public/*  /api/upload        │
    │    /api/health            static: /uploads               │
    │                                                          │
    │  Exception Handlers:                                     │
    │    WellNestError subclasses → their own status code      │
    │    RequestValidationError   → 400                        │
    │    HTTPException (404 etc.) → envelope                   │
    │    SQLAlchemy connectivity  → 503, TimeoutError → 504    │
    │    anything else            → 500                        │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config check → upload dir → keep-alive task
    Shutdown: stop keep-alive → dispose database engine
"""

import logging
import sys
import traceback
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import __version__
from app.config import settings
from app.database import dispose_engine, ping_database
from app.exceptions import WellNestError
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import (
    auth,
    employees,
    events,
    health,
    practitioners,
    public_events,
    public_practitioners,
    uploads,
)
from app.services.keepalive import DatabaseKeepAlive
from app.services.upload_service import upload_service

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process. Called once, first thing in the lifespan.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("WellNest Backend %s starting up (%s)...", __version__, settings.environment)

    # Don't exit on a bad config: the health endpoint should still answer
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    upload_service.ensure_directory()

    keepalive = DatabaseKeepAlive(ping_database, settings.keepalive_interval_seconds)
    keepalive.start()
    app.state.keepalive = keepalive

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("WellNest Backend shutting down...")
    await keepalive.stop()
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "") or request_id_var.get("")


def error_body(request: Request, error: str, message: str, details=None) -> dict:
    body = {"success": False, "error": error, "message": message, "request_id": _request_id(request)}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Every error leaves the API as:
        {"success": false, "error": <code>, "message": <text>, "details"?: {...}, "request_id": <id>}

    Client-side categories (4xx) include their context as `details`.
    Server-side categories (5xx) log the context and return a generic message.
    """

    @app.exception_handler(WellNestError)
    async def handle_app_error(request: Request, exc: WellNestError):
        rid = _request_id(request)
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
            details = None
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
            details = exc.context or None
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(request, exc.error_code, exc.message, details),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Schema failures are 400 here, matching the hand-written validation errors."""
        errors = jsonable_encoder(exc.errors(), exclude={"input", "ctx", "url"})
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", [])[1:]) or None
        message = first.get("msg", "Validation failed")
        if field:
            message = f"Validation error: {field}: {message}"
        return JSONResponse(
            status_code=400,
            content=error_body(request, "validation_error", message, {"errors": errors}),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            message = f"Route {request.url.path} not found"
        else:
            message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(request, "http_error", message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(IntegrityError)
    async def handle_integrity_error(request: Request, exc: IntegrityError):
        logger.warning("[%s] Integrity violation at commit: %s", _request_id(request), exc.orig)
        return JSONResponse(
            status_code=409,
            content=error_body(request, "conflict", "A record with this information already exists"),
        )

    @app.exception_handler(OperationalError)
    @app.exception_handler(InterfaceError)
    async def handle_store_unavailable(request: Request, exc: Exception):
        logger.error("[%s] Database unreachable: %s", _request_id(request), exc)
        return JSONResponse(
            status_code=503,
            content=error_body(request, "service_unavailable", "Database temporarily unavailable"),
        )

    @app.exception_handler(TimeoutError)
    @app.exception_handler(PoolTimeoutError)
    async def handle_timeout(request: Request, exc: Exception):
        logger.error("[%s] Operation timed out: %s", _request_id(request), exc)
        return JSONResponse(
            status_code=504,
            content=error_body(request, "timeout", "Request timed out. Please try again."),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Stack traces go to the log always, and to the client only outside production."""
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        body = error_body(
            request,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )
        if not settings.is_production:
            body["stack"] = traceback.format_exception(type(exc), exc, exc.__traceback__)
        return JSONResponse(status_code=500, content=body)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="WellNest API",
        description=(
            "Directory and events backend for wellness practitioners. "
            "Staff manage practitioners, events and employee accounts; "
            "the public site reads the directory and upcoming events."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Response-Time"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(employees.router)
    app.include_router(events.router)
    app.include_router(practitioners.router)
    app.include_router(public_events.router)
    app.include_router(public_practitioners.router)
    app.include_router(uploads.router)

    # check_dir=False: the directory is created in the lifespan, after import
    app.mount("/uploads", StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")

    return app


app = create_app()
