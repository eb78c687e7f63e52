"""
Showcase Backend — FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn showcase.main:app).

Application Architecture:
    ┌───────────────────────────────────────────────────────┐
    │                     FastAPI App                       │
    │                                                       │
    │  Middleware Chain:                                    │
    │  ┌────────────┐ ┌──────────┐ ┌─────────┐ ┌─────────┐  │
    │  │ Rate Limit │→│  Req ID  │→│ Logging │→│GZip/CORS│  │
    │  └────────────┘ └──────────┘ └─────────┘ └─────────┘  │
    │                                                       │
    │  Routes:                                              │
    │  ┌──────────────┐ ┌────────────┐ ┌──────┐ ┌────────┐  │
    │  │ login/logout │ │ /items CRUD│ │/files│ │/health │  │
    │  └──────────────┘ └────────────┘ └──────┘ └────────┘  │
    │                                                       │
    │  Exception Handlers:                                  │
    │  ┌─────────────────────────────────────────────────┐  │
    │  │ Validation→422 │ Auth→401/403 │ 404 │ Upload→400│  │
    │  └─────────────────────────────────────────────────┘  │
    └───────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, not fatal)
    3. Create the storage directory
    4. Seed the bootstrap admin when configured and no user exists

    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from showcase import __version__
from showcase.config import settings
from showcase.database import async_session_factory, dispose_engine
from showcase.exceptions import (
    DatabaseError,
    FileStorageError,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidUploadError,
    NotFoundError,
    ShowcaseError,
    UnauthenticatedError,
    ValidationError,
)
from showcase.middleware.logging import RequestLoggingMiddleware
from showcase.middleware.rate_limit import RateLimitMiddleware
from showcase.middleware.request_id import RequestIDMiddleware, request_id_var
from showcase.routes import auth, files, health, items
from showcase.services.user_service import bootstrap_admin_if_needed

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2025-01-15T12:00:00 [INFO] showcase.services.item_service: Item 3 created ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access log replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    # PIL logs every plugin it tries while identifying an upload
    logging.getLogger("PIL").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

async def seed_bootstrap_admin() -> None:
    async with async_session_factory() as session:
        try:
            await bootstrap_admin_if_needed(session)
            await session.commit()
        except Exception as e:
            await session.rollback()
            logger.error("Bootstrap admin failed: %s", str(e), exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Showcase Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # The API still serves /health so the problem is visible to probes
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Storage directory: %s", storage.resolve())

    await seed_bootstrap_admin()

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Showcase Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

_LOCATION_PREFIXES = {"body", "query", "path", "header", "cookie", "form"}


def field_errors_from(exc: RequestValidationError) -> Dict[str, List[str]]:
    """
    Reshape FastAPI's error list into {field: [message, ...]}.

    ("body", "email") → "email"; a whole-body error (invalid JSON) → "body".
    """
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if str(part) not in _LOCATION_PREFIXES]
        field = ".".join(loc) or "body"
        errors.setdefault(field, []).append(err.get("msg", "Invalid value."))
    return errors


def error_response(
    status_code: int,
    error: str,
    message: str,
    errors: Optional[Dict[str, List[str]]] = None,
    details: Optional[dict] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content = {"error": error, "message": message}
    if errors is not None:
        content["errors"] = errors
    if details is not None:
        content["details"] = details
    content["request_id"] = request_id_var.get("")
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

    Handler table:
        ValidationError / RequestValidationError → 422 validation_error
        InvalidCredentialsError                  → 422 invalid_credentials
        UnauthenticatedError                     → 401 (+ WWW-Authenticate)
        ForbiddenError                           → 403
        NotFoundError                            → 404
        InvalidUploadError                       → 400
        FileStorageError / DatabaseError         → 500 server_error
        ShowcaseError / Exception                → 500

    429 is answered by RateLimitMiddleware itself: exceptions raised in
    BaseHTTPMiddleware never reach these handlers.

    `context` goes to the log only; storage and database failures answer
    with a generic message.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return error_response(422, "validation_error", exc.message, errors=exc.errors)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = field_errors_from(exc)
        logger.warning("[%s] Request validation failed for %s", request_id_var.get(""), sorted(errors))
        first = next(iter(errors.values()))[0] if errors else "The given data was invalid."
        return error_response(422, "validation_error", first, errors=errors)

    @app.exception_handler(InvalidCredentialsError)
    async def handle_invalid_credentials(request: Request, exc: InvalidCredentialsError):
        return error_response(422, "invalid_credentials", exc.message, errors=exc.errors)

    @app.exception_handler(UnauthenticatedError)
    async def handle_unauthenticated(request: Request, exc: UnauthenticatedError):
        return error_response(
            401,
            "unauthenticated",
            exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        return error_response(403, "forbidden", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, "not_found", exc.message)

    @app.exception_handler(InvalidUploadError)
    async def handle_invalid_upload(request: Request, exc: InvalidUploadError):
        logger.warning("[%s] Invalid upload: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(
            400,
            "invalid_upload",
            exc.message,
            errors={"image": [exc.message]},
        )

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error("[%s] File storage error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(ShowcaseError)
    async def handle_showcase_error(request: Request, exc: ShowcaseError):
        logger.error("[%s] Unhandled application error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Showcase API",
        description=(
            "Item catalogue with token login. Anyone can browse items; "
            "admins create, update and delete them along with their images."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(items.router)
    app.include_router(files.router)
    app.include_router(health.router)

    return app


# uvicorn imports `showcase.main:app`
app = create_app()
