"""
Library Store Backend - FastAPI Application Factory
====================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn library_api.main:app`) and the test suite, which
       passes its own Settings and Database.

Application Architecture:
    ┌────────────────────────────────────────────────────────────┐
    │                        FastAPI App                         │
    │                                                            │
    │  Middleware Chain:                                         │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌──────┐               │
    │  │ Req ID   │→│ Logging  │→│ GZip │→│ CORS │               │
    │  └──────────┘ └──────────┘ └──────┘ └──────┘               │
    │                                                            │
    │  Routes (/api): auth, books, genre, transactions           │
    │  Routes (root): /, /health-check                           │
    │                                                            │
    │  Exception Handlers:                                       │
    │  ┌──────────────────────────────────────────────────────┐  │
    │  │ LibraryError → STATUS_BY_KIND │ schema errors → 400  │  │
    │  │ anything else → 500                                  │  │
    │  └──────────────────────────────────────────────────────┘  │
    └────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, check security settings, log readiness
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from library_api import __version__
from library_api.config import Settings, settings as default_settings
from library_api.database import Database
from library_api.exceptions import LibraryError
from library_api.middleware.logging import RequestLoggingMiddleware
from library_api.middleware.request_id import RequestIDMiddleware, request_id_var
from library_api.routes import auth, books, genres, health, transactions

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure the root logger once at startup.

    Format: 2026-10-19T12:00:00 [INFO] library_api.access: GET /api/books 200 4.2ms [a1b2c3d4] from 127.0.0.1
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Chatty at INFO.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    setup_logging(settings)
    logger.info("=" * 60)
    logger.info("Library Store Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: health checks and logs still surface the problem.
        logger.error("Configuration error: %s", e)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Library Store Backend shutting down...")
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def format_validation_errors(exc: RequestValidationError) -> List[str]:
    """
    One readable line per schema failure.

    ("body", "books", 0, "quantity") → "books[0].quantity: Input should be a valid integer"
    """
    lines = []
    for error in exc.errors():
        location = ""
        for part in error.get("loc", ()):
            if part in ("body", "query", "path", "header"):
                continue
            if isinstance(part, int):
                location += f"[{part}]"
            else:
                location += f".{part}" if location else str(part)
        message = error.get("msg", "Invalid value")
        lines.append(f"{location}: {message}" if location else message)
    return lines


def register_exception_handlers(app: FastAPI) -> None:
    """
    Every failure leaves the API as {success: false, message, errors?}.

    LibraryError subclasses carry an ErrorKind; the status comes from
    STATUS_BY_KIND. Internal details (context, SQL, stack traces) are logged
    and never returned.
    """

    @app.exception_handler(LibraryError)
    async def handle_library_error(request: Request, exc: LibraryError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s error: %s | Context: %s", rid, exc.kind.value, exc.message, exc.context)
        else:
            logger.warning("[%s] %s error: %s", rid, exc.kind.value, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = format_validation_errors(exc)
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), errors)
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "message": f"Validation failed: {errors[0]}" if errors else "Validation failed",
                "errors": errors,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            exc,
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "An unexpected error occurred. Please try again later.",
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; the environment-derived default when omitted
        database: Store handle; built from `settings` when omitted. Tests
                  pass an in-memory SQLite Database here.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Library Store API",
        description="Book catalog, genres, accounts and atomic book purchases.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database or Database(settings)

    # ── Middleware ────────────────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID runs first.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(books.router)
    app.include_router(genres.router)
    app.include_router(transactions.router)
    app.include_router(health.router)

    @app.get("/", include_in_schema=False)
    async def welcome():
        return {"success": True, "message": "Welcome to the Library Store API"}

    return app


# uvicorn expects `library_api.main:app`.
app = create_app()
