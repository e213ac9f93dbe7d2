"""
QuillMind Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers;
       the lifespan validates configuration, creates tables and disposes
       the engine on shutdown.
Who:   uvicorn (uvicorn quillmind.main:app) and the test suite.

Application Architecture:
    ┌───────────────────────────────────────────────────────┐
    │                     FastAPI App                       │
    │                                                       │
    │  Middleware Chain:                                    │
    │  ┌──────────┐ ┌────────────┐ ┌─────────┐ ┌──────────┐ │
    │  │  Req ID  │→│ Rate Limit │→│ Logging │→│   CORS   │ │
    │  └──────────┘ └────────────┘ └─────────┘ └──────────┘ │
    │                                                       │
    │  Routes:                                              │
    │  /api/auth  /api/projects  /api/files  /api/ai  /health│
    │                                                       │
    │  Exception Handlers:                                  │
    │  QuillMindError → its status │ validation → 400       │
    │  HTTPException → envelope    │ anything else → 500    │
    └───────────────────────────────────────────────────────┘

Every error response uses one envelope:
    {"code": ..., "message": ..., "details": {...}?, "request_id": ...}
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from quillmind import __version__
from quillmind.config import settings
from quillmind.database import dispose_engine, init_models
from quillmind.exceptions import (
    CircuitBreakerOpenError,
    ConflictError,
    InternalError,
    QuillMindError,
    RateLimitExceededError,
    UnauthorizedError,
    UpstreamError,
    ValidationError,
)
from quillmind.middleware.logging import RequestLoggingMiddleware
from quillmind.middleware.rate_limit import RateLimitMiddleware
from quillmind.middleware.request_id import RequestIDMiddleware, request_id_var
from quillmind.routes import ai, auth, files, health, projects

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every operation at INFO/DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Validate critical configuration (logged, not fatal, so /health
           can still report)
        3. Create tables from ORM metadata when DB_CREATE_TABLES is on
    Shutdown:
        1. Dispose database engine (close all pooled connections)
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("QuillMind Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    if settings.db_create_tables:
        await init_models()
        logger.info("Database tables ensured")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("QuillMind Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "") or request_id_var.get("")


def error_envelope(
    code: str,
    message: str,
    request_id: str,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"code": code, "message": message}
    if details:
        body["details"] = details
    body["request_id"] = request_id
    return body


def _public_details(exc: QuillMindError) -> Optional[Dict[str, Any]]:
    """The part of an exception's context that may be shown to clients."""
    if isinstance(exc, (ValidationError, ConflictError)):
        return {"field": exc.field} if exc.field else None
    if isinstance(exc, RateLimitExceededError):
        return {"retry_after": exc.retry_after}
    if isinstance(exc, CircuitBreakerOpenError):
        return {"recovery_time": exc.recovery_time}
    if isinstance(exc, UpstreamError) and exc.upstream_status is not None:
        return {"upstream_status": exc.upstream_status}
    return None


def _headers_for(exc: QuillMindError) -> Dict[str, str]:
    if isinstance(exc, UnauthorizedError):
        return {"WWW-Authenticate": "Bearer"}
    if isinstance(exc, RateLimitExceededError):
        return {"Retry-After": str(exc.retry_after)}
    if isinstance(exc, CircuitBreakerOpenError):
        return {"Retry-After": str(exc.recovery_time)}
    return {}


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions onto the shared error envelope.

    Handler hierarchy:
        QuillMindError          → exc.status_code (400/401/403/404/409/429/5xx)
        RequestValidationError  → 400 (malformed or missing body fields)
        HTTPException           → its own status (unknown route, bad method)
        Exception (fallback)    → 500

    Internal errors (InternalError, DatabaseError, unexpected exceptions)
    always return a generic message; their details go to the server log.
    """

    @app.exception_handler(QuillMindError)
    async def handle_quillmind_error(request: Request, exc: QuillMindError):
        rid = _request_id(request)
        status_code = exc.status_code
        message = exc.message

        if isinstance(exc, InternalError):
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
            message = "An internal error occurred. Please try again later."
        elif status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        return JSONResponse(
            status_code=status_code,
            content=error_envelope(exc.code, message, rid, _public_details(exc)),
            headers=_headers_for(exc),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = _request_id(request)
        errors = [
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]
        logger.warning("[%s] Request validation failed: %s", rid, errors)
        return JSONResponse(
            status_code=400,
            content=error_envelope(
                "validation_error",
                "Request body or parameters are invalid.",
                rid,
                {"errors": errors},
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        rid = _request_id(request)
        code = "not_found" if exc.status_code == 404 else "http_error"
        return JSONResponse(
            status_code=exc.status_code,
            content=error_envelope(code, str(exc.detail), rid),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_envelope(
                "internal_error",
                "An unexpected error occurred. Please try again later.",
                rid,
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="QuillMind API",
        description=(
            "Backend for a note and script writing workspace: accounts, "
            "projects with text files, and AI text actions."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: RequestID → RateLimit → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(projects.router)
    app.include_router(files.router)
    app.include_router(ai.router)
    app.include_router(health.router)

    return app


app = create_app()
