"""Application exception classes and handlers."""

from typing import Any

import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from upload_server.core.config import get_settings

logger = structlog.get_logger()


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        extra: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.extra = extra or {}
        super().__init__(message)


# --- Bad Request (400) ---


class NoFileUploadedError(AppException):
    """Multipart body carries no `file` field."""

    def __init__(self) -> None:
        super().__init__(
            message="No file uploaded",
            code="NO_FILE_UPLOADED",
            status_code=400,
        )


class InvalidFileTypeError(AppException):
    """No file extension could be resolved for the upload."""

    def __init__(self) -> None:
        super().__init__(
            message="Invalid file type",
            code="INVALID_FILE_TYPE",
            status_code=400,
        )


# --- Authentication (401) ---


class InvalidApiKeyError(AppException):
    """Authorization header does not match the configured API key."""

    def __init__(self) -> None:
        super().__init__(
            message="Invalid API key",
            code="INVALID_API_KEY",
            status_code=401,
        )


# --- Authorization (403) ---


class InvalidOriginError(AppException):
    """Origin header missing or not in the allowed set."""

    def __init__(self) -> None:
        super().__init__(
            message="Invalid origin",
            code="INVALID_ORIGIN",
            status_code=403,
        )


# --- Not Found (404) ---


class StoredFileNotFoundError(AppException):
    """Requested upload does not exist."""

    def __init__(self) -> None:
        super().__init__(
            message="File not found",
            code="FILE_NOT_FOUND",
            status_code=404,
        )


# --- Payload (413 / 415) ---


class FileTooLargeError(AppException):
    """Upload exceeds the configured size limit."""

    def __init__(self) -> None:
        super().__init__(
            message="File is too large",
            code="FILE_TOO_LARGE",
            status_code=413,
        )


class UnallowedMimeTypeError(AppException):
    """Detected MIME type is not in the allow-list."""

    def __init__(self, detected_type: str, client_type: str) -> None:
        super().__init__(
            message="Unallowed mime type",
            code="UNALLOWED_MIME_TYPE",
            status_code=415,
            extra={"detectedType": detected_type, "clientType": client_type},
        )


# --- Server (500) ---


class StorageError(AppException):
    """Reading or writing the upload store failed."""

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(
            message="Internal server error",
            code="STORAGE_ERROR",
            status_code=500,
            extra={"message": detail} if detail else None,
        )


# --- Exception Handlers ---


def _debug_enabled(request: Request) -> bool:
    """Debug flag from the same settings provider the routes resolve."""
    provider = request.app.dependency_overrides.get(get_settings, get_settings)
    return provider().app.debug


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Central exception handler for AppException."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, **exc.extra},
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation failures in the error envelope."""
    logger.info("Request validation failed", path=request.url.path, errors=exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid request"})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Convert any uncaught exception into a 500 response."""
    logger.exception("Unhandled error", path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "message": str(exc) if _debug_enabled(request) else "An error occurred",
        },
    )
