"""
Notes API — FastAPI Application Factory
========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app(settings) builds the engine, services,
       middleware, exception handlers and routes from one Settings object.
Who:   uvicorn (`uvicorn notes_api.main:app`), the `notes-api` console
       script, and the test suite (with its own Settings).

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                      FastAPI App                        │
    │                                                         │
    │  Middleware: RequestID → Logging → Security → GZip →    │
    │              CORS → ServerError                         │
    │                                                         │
    │  Routes:                                                │
    │   POST /notes   GET /notes   GET|PUT|DELETE /notes/{id} │
    │   POST /upload  GET /uploads/* (static)   GET /health   │
    │                                                         │
    │  Exception Handlers:                                    │
    │   Validation→400 │ NotFound→404 │ Upload→400 │ *→500    │
    └─────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, create tables, log listen address
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from notes_api import __version__
from notes_api.config import Settings, settings
from notes_api.database import (
    create_engine_from_settings,
    create_session_factory,
    dispose_engine,
    init_models,
)
from notes_api.exceptions import (
    FileStorageError,
    NotFoundError,
    NotesApiError,
    StorageError,
    UploadError,
    ValidationError,
)
from notes_api.middleware.logging import RequestLoggingMiddleware
from notes_api.middleware.request_id import RequestIDMiddleware, request_id_var
from notes_api.middleware.security_headers import SecurityHeadersMiddleware
from notes_api.middleware.server_error import ServerErrorMiddleware, server_error_response
from notes_api.routes import health, notes, upload
from notes_api.services.file_service import FileService
from notes_api.services.note_service import NoteService
from notes_api.validation import describe_validation_error

logger = logging.getLogger(__name__)

UNKNOWN_ROUTE_MESSAGE = "Route inconnue"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] notes_api.access: [a1b2c3d4] GET /notes
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # Third-party libraries are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Create tables (a failure is logged; the server keeps running and
           database-backed routes answer 500 until the database is reachable)
    Shutdown:
        Dispose the database engine
    """
    app_settings: Settings = app.state.settings
    setup_logging(app_settings.log_level)
    logger.info("Notes API starting up...")

    try:
        await init_models(app.state.engine)
        logger.info("Connected to database, tables ready")
    except (SQLAlchemyError, OSError) as e:
        logger.error("Database connection error: %s", str(e))

    logger.info("Upload directory: %s", app.state.file_service.upload_dir)
    logger.info("Notes API listening on http://%s:%d", app_settings.host, app_settings.port)

    yield

    logger.info("Notes API shutting down...")
    await dispose_engine(app.state.engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the JSON error envelope.

    Handler hierarchy:
        RequestValidationError  → 400 (first violated constraint)
        ValidationError         → 400
        UploadError             → 400
        NotFoundError           → 404 "Note non trouvée."
        HTTPException 404/405   → 404 "Route inconnue"
        StorageError            → 500 "Erreur serveur" + details
        FileStorageError        → 500 "Erreur serveur" + details
        NotesApiError (base)    → 500 "Erreur serveur" + details
        Exception (fallback)    → 500 "Erreur serveur" + details

    Exceptions raised by routes and dependencies never reach the Exception
    handler: ServerErrorMiddleware renders them inside the middleware chain.
    The handler covers failures in the outer middleware only.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = describe_validation_error(exc.errors())
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), message)
        return JSONResponse(status_code=400, content={"erreur": message})

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=400, content={"erreur": exc.message})

    @app.exception_handler(UploadError)
    async def handle_upload_error(request: Request, exc: UploadError):
        logger.warning("[%s] Upload rejected: %s", request_id_var.get(""), exc.message)
        return JSONResponse(status_code=400, content={"erreur": exc.message})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"erreur": exc.message})

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # Unmatched paths, unsupported methods and missing static files
        if exc.status_code in (404, 405):
            return JSONResponse(status_code=404, content={"erreur": UNKNOWN_ROUTE_MESSAGE})
        return JSONResponse(
            status_code=exc.status_code,
            content={"erreur": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return server_error_response(exc.message)

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error(
            "[%s] File storage error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return server_error_response(exc.message)

    @app.exception_handler(NotesApiError)
    async def handle_app_error(request: Request, exc: NotesApiError):
        logger.error("[%s] Error: %s", request_id_var.get(""), exc.message)
        return server_error_response(exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return server_error_response(str(exc))


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Configuration to build the app from. Defaults to the
                      module-level `settings` loaded from the environment.

    Everything with state (engine, session factory, services) is created
    here and kept on `app.state`, so two apps never share a database or an
    upload directory.
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="Notes API",
        description="Store and retrieve short text notes, with single-file uploads.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Shared State ──────────────────────────────────────────────────────
    app.state.settings = app_settings
    app.state.engine = create_engine_from_settings(app_settings)
    app.state.session_factory = create_session_factory(app.state.engine)
    app.state.note_service = NoteService(max_page_size=app_settings.max_page_size)
    app.state.file_service = FileService(
        upload_dir=app_settings.upload_dir,
        max_size=app_settings.max_upload_size,
        allowed_extensions=app_settings.allowed_upload_extensions_list,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition (last added = first).
    app.add_middleware(ServerErrorMiddleware)
    origins = app_settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(upload.router)
    app.include_router(notes.router)
    app.include_router(health.router)

    # Uploaded files, read-only
    app.mount(
        "/uploads",
        StaticFiles(directory=app.state.file_service.upload_dir),
        name="uploads",
    )

    return app


# uvicorn expects `notes_api.main:app` to be importable
app = create_app()


def run() -> None:
    """Console entry point: serve the module-level app on HOST:PORT."""
    import uvicorn

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
