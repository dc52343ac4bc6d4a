"""
ProductHub Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires lifespan, middleware, exception handlers and
       routers; uvicorn serves the module-level `app`
       (uvicorn producthub.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware (outermost first):                      │
    │  Request ID → Logging → GZip → CORS                 │
    │                                                     │
    │  Routes:                                            │
    │  /users/*   /products/*   /health                   │
    │                                                     │
    │  Exception Handlers:                                │
    │  ProductHubError → its status_code                  │
    │  RequestValidationError → 400                       │
    │  Exception → 500                                    │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check, storage directory
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from producthub import __version__
from producthub.config import settings
from producthub.database import dispose_engine
from producthub.exceptions import ProductHubError
from producthub.middleware.logging import RequestLoggingMiddleware
from producthub.middleware.request_id import (
    RequestIdLogFilter,
    RequestIDMiddleware,
    request_id_var,
)
from producthub.routes import health, products, users

logger = logging.getLogger(__name__)

SYSTEM_ERROR_MESSAGE = "System error"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once at startup.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s

    The request id comes from RequestIdLogFilter, so records logged outside a
    request show "-".
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIdLogFilter())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("ProductHub Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving so /health still answers
        logger.error("Configuration error: %s", str(e))

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Storage directory: %s", storage.resolve())
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("ProductHub Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_envelope(
    status: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {
        "status": status,
        "error": error,
        "message": message,
        "data": None,
        "request_id": request_id_var.get(""),
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the JSON error envelope.

    Handler hierarchy:
        ProductHubError          → exc.status_code (400/401/403/404/500)
        RequestValidationError   → 400 (wrong JSON or query types)
        Exception (fallback)     → 500

    5xx responses carry an opaque message; the context is logged only.
    """

    @app.exception_handler(ProductHubError)
    async def handle_producthub_error(request: Request, exc: ProductHubError):
        status = exc.status_code
        headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None

        if status >= 500:
            logger.error("%s: %s | Context: %s", type(exc).__name__, exc.message, exc.context)
            return error_envelope(status, exc.error_code, SYSTEM_ERROR_MESSAGE)

        logger.warning("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
        details = exc.context if status == 400 else None
        return error_envelope(status, exc.error_code, exc.message, details=details, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", ""), "type": err.get("type", "")}
            for err in exc.errors()
        ]
        first = errors[0] if errors else {"loc": [], "msg": "Invalid request"}
        field = first["loc"][-1] if first["loc"] else "request"
        logger.warning("Request validation failed on %s: %s", request.url.path, errors)
        return error_envelope(
            400,
            "validation_error",
            f"Parameter {field} tidak valid: {first['msg']}",
            details={"errors": errors},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unexpected error on %s: %s", request.url.path, str(exc), exc_info=True)
        return error_envelope(500, "server_error", SYSTEM_ERROR_MESSAGE)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Assemble the application; tests call this for a fresh instance."""
    app = FastAPI(
        title="ProductHub API",
        description=(
            "User accounts with JWT authentication and owner-scoped product "
            "management, including profile and product image uploads."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "WWW-Authenticate"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(health.router)

    return app


app = create_app()
