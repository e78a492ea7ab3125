"""
GreenThumb Backend - FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the Database and the plant classifier (or takes
       the ones it is given), installs them on `app.state`, and registers
       middleware, exception handlers and routers.
Who:   uvicorn imports `greenthumb.main:app`; tests call create_app()
       with their own Database and classifier.

Application Architecture:
    ┌──────────────────────────────────────────────────────────────┐
    │                        FastAPI App                           │
    │                                                              │
    │  Middleware Chain:                                           │
    │  ┌────────────┐ ┌──────────┐ ┌─────────┐ ┌──────┐ ┌──────┐   │
    │  │ Rate Limit │→│  Req ID  │→│ Logging │→│ GZip │→│ CORS │   │
    │  └────────────┘ └──────────┘ └─────────┘ └──────┘ └──────┘   │
    │                                                              │
    │  Routes:                                                     │
    │  /photos  /photoReports  /plants  /mlModel  /users  /health  │
    │                                                              │
    │  Exception Handlers:                                         │
    │  Validation→400 │ Unauthorized→401 │ NotFound→404 │ else→500 │
    └──────────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check, optional table creation
    Shutdown: close the classifier's HTTP client, dispose the engine
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

from greenthumb import __version__
from greenthumb.config import Settings, settings
from greenthumb.database import Database
from greenthumb.exceptions import (
    CircuitBreakerOpenError,
    DatabaseError,
    MLServiceError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from greenthumb.middleware.logging import RequestLoggingMiddleware
from greenthumb.middleware.rate_limit import RateLimitMiddleware
from greenthumb.middleware.request_id import RequestIDMiddleware, request_id_var
from greenthumb.routes import health, ml_model, photo_reports, photos, plants, users
from greenthumb.schemas.common import describe_validation_errors
from greenthumb.services.classifier_base import PlantClassifier
from greenthumb.services.classifier_service import RemoteClassifier

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "An internal error occurred. Please try again later."


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(config: Optional[Settings] = None) -> None:
    """
    Configure the root logger once at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    """
    config = config or settings
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
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
    config: Settings = app.state.config

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config)
    logger.info("=" * 60)
    logger.info("GreenThumb Backend %s starting up...", __version__)

    try:
        config.validate_required_for_production()
    except ValueError as e:
        # Keep serving so /health can report the problem
        logger.error("Configuration error: %s", str(e))

    if config.db_auto_create:
        await app.state.database.create_all()

    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("GreenThumb Backend shutting down...")
    await app.state.classifier.close()
    await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details=None) -> dict:
    return {
        "error": error,
        "message": message,
        "details": details,
        "request_id": request_id_var.get(""),
    }


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the shared error body.

    Handler hierarchy:
        ValidationError, RequestValidationError  → 400
        UnauthorizedError                        → 401
        NotFoundError                            → 404
        DatabaseError, MLServiceError,
        CircuitBreakerOpenError, Exception       → 500 (details logged only)

    429 responses come straight from RateLimitMiddleware.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = describe_validation_errors(errors)
        logger.warning("[%s] Invalid request body: %s", request_id_var.get(""), message)
        details = {
            "errors": [
                {
                    "field": ".".join(str(p) for p in e.get("loc", ()) if p != "body"),
                    "type": e.get("type"),
                }
                for e in errors
            ]
        }
        return JSONResponse(
            status_code=400, content=_error_body("validation_error", message, details)
        )

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context or None),
        )

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return JSONResponse(
            status_code=401,
            content=_error_body("unauthorized", exc.message),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body(
                "not_found",
                exc.message,
                {"resource": exc.resource, "resource_id": exc.resource_id},
            ),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500, content=_error_body("server_error", GENERIC_SERVER_ERROR)
        )

    @app.exception_handler(MLServiceError)
    async def handle_ml_error(request: Request, exc: MLServiceError):
        logger.error(
            "[%s] Classifier error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return JSONResponse(
            status_code=500, content=_error_body("server_error", GENERIC_SERVER_ERROR)
        )

    @app.exception_handler(CircuitBreakerOpenError)
    async def handle_circuit_breaker(request: Request, exc: CircuitBreakerOpenError):
        logger.warning("[%s] Circuit breaker open: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=500, content=_error_body("server_error", GENERIC_SERVER_ERROR)
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("internal_server_error", GENERIC_SERVER_ERROR),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    config: Optional[Settings] = None,
    database: Optional[Database] = None,
    classifier: Optional[PlantClassifier] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config:     Settings to use (defaults to the module singleton)
        database:   Storage handle (defaults to one built from config)
        classifier: Plant classifier (defaults to a RemoteClassifier)
    """
    config = config or settings

    app = FastAPI(
        title="GreenThumb API",
        description=(
            "Plant identification and photo sharing: plant catalogue, user photos "
            "with votes, moderation reports and bans, and ML-backed identification."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.database = database or Database(config=config)
    app.state.classifier = classifier or RemoteClassifier(config=config)

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition: RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=config.rate_limit_requests,
        window_seconds=config.rate_limit_window,
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(photos.router)
    app.include_router(photo_reports.router)
    app.include_router(plants.router)
    app.include_router(ml_model.router)
    app.include_router(users.router)
    app.include_router(health.router)

    return app


app = create_app()
