"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from upload_server.api.files_router import router as files_router
from upload_server.api.upload_router import router as upload_router
from upload_server.core.config import settings
from upload_server.core.exceptions import (
    AppException,
    app_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from upload_server.core.logging_config import configure_logging
from upload_server.core.middleware import RequestLoggingMiddleware
from upload_server.schemas.response_schema import HealthResponse
from upload_server.services.storage import StorageManager

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    configure_logging(settings.app.log_level, settings.app.log_json)
    await StorageManager(settings.storage).ensure_root()
    logger.info(
        "Starting application",
        app_name=settings.app.name,
        upload_path=str(settings.storage.path),
        base_url=settings.storage.normalized_base_url or "(from request headers)",
        webhook_enabled=settings.webhook is not None,
        max_file_size_mb=settings.limits.max_file_size_mb,
    )
    yield
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.app.name,
    description="Date-partitioned file upload and delivery service",
    version="0.1.0",
    lifespan=lifespan,
)

# Exception handlers
app.add_exception_handler(AppException, app_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(Exception, unhandled_exception_handler)

# Middleware (registration order: inner→outer, execution order: outer→inner)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-API-Key", "Player-Metadata"],
    max_age=settings.cors.max_age,
)
app.add_middleware(RequestLoggingMiddleware)


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok", timestamp=datetime.now(UTC).isoformat())


# Register routers
app.include_router(upload_router)
app.include_router(files_router)
