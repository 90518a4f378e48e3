"""
QR Bridge — FastAPI Application Factory
=========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Served by uvicorn (`uvicorn qrbridge.main:app` or the `qrbridge` script).
When:  Once at server startup.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware Chain:                                   │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐   │
    │  │  Req ID  │→│  Logging        │→│  CORS        │   │
    │  └──────────┘ └─────────────────┘ └──────────────┘   │
    │                                                      │
    │  Routes:                                             │
    │  ┌──────────────────┐ ┌──────────────┐ ┌──────────┐  │
    │  │ POST qr/generate │ │ POST qr/read │ │ /health  │  │
    │  └──────────────────┘ └──────────────┘ └──────────┘  │
    │                                                      │
    │  Exception Handlers:                                 │
    │  ┌────────────────────────────────────────────────┐  │
    │  │ Input→400 │ Image/QR/Record→422 │ I/O, Codec→500│ │
    │  └────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from qrbridge import __version__
from qrbridge.config import settings
from qrbridge.exceptions import (
    QrBridgeError,
    ValidationError,
    MissingInputError,
    MalformedRecordError,
    UnsupportedImageError,
    SymbolNotFoundError,
    CodecFaultError,
    IOFailureError,
)
from qrbridge.middleware.request_id import RequestIDMiddleware, request_id_var
from qrbridge.middleware.logging import RequestLoggingMiddleware
from qrbridge.routes import health, qr

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before any other initialization.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Request logging middleware replaces uvicorn's access log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("QR Bridge %s starting up...", __version__)
    logger.info(
        "QR output: %dx%d %s, max upload %d bytes",
        settings.matrix_width,
        settings.matrix_height,
        settings.image_format,
        settings.max_upload_size,
    )
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("QR Bridge shutting down.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

# Exception type → (HTTP status, machine-readable error code)
# Order matters: first isinstance() match wins.
ERROR_STATUS = [
    (ValidationError, 400, "validation_error"),
    (MissingInputError, 400, "missing_input"),
    (UnsupportedImageError, 422, "unsupported_image"),
    (SymbolNotFoundError, 422, "symbol_not_found"),
    (MalformedRecordError, 422, "malformed_record"),
    (IOFailureError, 500, "io_failure"),
    (CodecFaultError, 500, "codec_fault"),
]


def _error_response(exc: QrBridgeError, status_code: int, error: str, rid: str) -> JSONResponse:
    # Client-fixable errors carry their context; server errors never do
    details = exc.context if status_code < 500 else None
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": exc.message,
            "details": details,
            "request_id": rid,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError, MissingInputError              → 400
        UnsupportedImageError, SymbolNotFoundError,
        MalformedRecordError                            → 422
        IOFailureError, CodecFaultError                 → 500
        QrBridgeError (base)                            → 500
        Exception (fallback)                            → 500

    Server-side details (OS errors, encoder messages) are logged, never returned.
    """

    @app.exception_handler(QrBridgeError)
    async def handle_qrbridge_error(request: Request, exc: QrBridgeError):
        rid = request_id_var.get("")
        for exc_type, status_code, error in ERROR_STATUS:
            if isinstance(exc, exc_type):
                break
        else:
            status_code, error = 500, "server_error"

        request.state.error_code = error

        if status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return _error_response(exc, status_code, error, rid)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: generic 500 with a request ID; stack trace logged only."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="QR Bridge API",
        description=(
            "Encodes small structured records into QR code images and reads "
            "them back from uploaded images."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Content-Disposition"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(qr.router)
    app.include_router(health.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn using configured host/port."""
    import uvicorn

    uvicorn.run(
        "qrbridge.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )
