"""
Card Activation Backend — FastAPI Application Factory
=======================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) returns a configured FastAPI app; the module-level
       `app` is what uvicorn serves (uvicorn cardactivation.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                     FastAPI App                          │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌────────────┐ ┌────────────┐ ┌──────────┐ ┌────────┐   │
    │  │ Request ID │→│ Client IP  │→│ Logging  │→│  CORS  │   │
    │  └────────────┘ └────────────┘ └──────────┘ └────────┘   │
    │                                                          │
    │  Routes:                                                 │
    │  POST /validate-digits   POST /activate                  │
    │  POST /admin/login       POST /admin/update-fees         │
    │  GET  /api/payments      GET  /health                    │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Validation→400 │ Auth→401 │ Persistence→500 │ *→500     │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Validate configuration (missing DATABASE_URL aborts startup)
    3. Connect to the database (retrying at a fixed interval)
    4. Create missing tables (DB_AUTO_CREATE)
    5. Seed the default admin and the zero-priced fee ledger if empty

    Shutdown:
    1. Dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cardactivation import __version__
from cardactivation.config import Settings, settings as default_settings
from cardactivation.database import Database
from cardactivation.exceptions import (
    AuthError,
    CardActivationError,
    PersistenceError,
    ValidationError,
)
from cardactivation.middleware.client_ip import ClientIPMiddleware
from cardactivation.middleware.logging import RequestLoggingMiddleware
from cardactivation.middleware.request_id import RequestIDMiddleware, request_id_var
from cardactivation.routes import activation, admin, health, payments
from cardactivation.services.admin_service import admin_credential_service
from cardactivation.services.fee_service import fee_ledger_service
from cardactivation.services.session_service import SessionService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure root logging once for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] cardactivation.access: POST /activate 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Startup helpers
# ══════════════════════════════════════════════════════════════════════════

async def initialize_database(database: Database, app_settings: Settings) -> None:
    """
    Create tables (if enabled) and run the idempotent seeders.

    Shared by the lifespan and the `init-db` CLI command.
    """
    if app_settings.db_auto_create:
        await database.create_all()

    async with database.session() as session:
        await admin_credential_service.seed_if_empty(
            session,
            username=app_settings.admin_username,
            password=app_settings.admin_password,
        )
        await fee_ledger_service.seed_if_empty(session)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup and shutdown for one application instance.

    Unlike a missing optional setting, a missing DATABASE_URL or an
    unreachable store is fatal: the exception propagates and the server
    refuses to start.
    """
    app_settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("Card Activation Backend %s starting up...", __version__)

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        logger.critical("Configuration error: %s", str(e))
        raise

    if app_settings.uses_default_jwt_secret:
        logger.warning("JWT_SECRET is not set; using the insecure development fallback")

    database = Database(app_settings)
    try:
        await database.connect()
        await initialize_database(database, app_settings)
    except Exception:
        await database.close()
        raise

    app.state.database = database

    logger.info("Server ready on %s:%d", app_settings.backend_host, app_settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Card Activation Backend shutting down...")
    await database.close()
    app.state.database = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(message: str) -> dict:
    return {
        "success": False,
        "message": message,
        "request_id": request_id_var.get(""),
    }


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and the shared error body.

        ValidationError         → 400
        RequestValidationError  → 400 (body could not be parsed)
        AuthError               → 401
        PersistenceError        → 500 (context logged, generic message)
        CardActivationError     → 500
        Exception               → 500 (stack trace logged only)
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error (%s): %s", request_id_var.get(""), exc.reason, exc.message)
        return JSONResponse(status_code=400, content=_error_body(exc.message))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        logger.warning("[%s] Unparseable request body: %s", request_id_var.get(""), exc.errors())
        return JSONResponse(status_code=400, content=_error_body("Invalid request body"))

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        logger.warning("[%s] Auth error (%s): %s", request_id_var.get(""), exc.reason, exc.message)
        return JSONResponse(
            status_code=401,
            content=_error_body(exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError):
        logger.error("[%s] Persistence error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(status_code=500, content=_error_body(exc.message))

    @app.exception_handler(CardActivationError)
    async def handle_app_error(request: Request, exc: CardActivationError):
        logger.error("[%s] Application error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(status_code=500, content=_error_body(exc.message))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(status_code=500, content=_error_body("Unexpected error occurred."))


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Assemble the application for the given settings (module settings by default).

    No I/O happens here; the database is connected by the lifespan.
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title="Card Activation API",
        description=(
            "Card activation intake with server-side validation, an admin login "
            "gate and an admin-managed fee table."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.session_service = SessionService.from_settings(app_settings)
    app.state.database = None

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → ClientIP → Logging → CORS
    origins = app_settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentialed requests against a wildcard origin
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ClientIPMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(activation.router)
    app.include_router(admin.router)
    app.include_router(payments.router)
    app.include_router(health.router)

    return app


app = create_app()
