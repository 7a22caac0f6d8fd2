"""Stored file retrieval endpoints."""

from pathlib import Path
from typing import Annotated

import aiofiles.os
import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import FileResponse, RedirectResponse

from upload_server.core.config import Settings
from upload_server.core.exceptions import StorageError, StoredFileNotFoundError
from upload_server.dependencies import SettingsDep, get_storage
from upload_server.schemas.response_schema import ErrorResponse
from upload_server.services.classifier import media_type_for
from upload_server.services.storage import StorageManager

logger = structlog.get_logger()

router = APIRouter(prefix="/uploads", tags=["files"])

StorageDep = Annotated[StorageManager, Depends(get_storage)]

CACHE_HEADERS = {
    "Cache-Control": "public, max-age=15724800, immutable",
    "X-Content-Type-Options": "nosniff",
    "Accept-Ranges": "bytes",
}

ERROR_RESPONSES: dict[int | str, dict] = {
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


async def _file_response(path: Path, settings: Settings) -> FileResponse:
    try:
        stat_result = await aiofiles.os.stat(path)
    except FileNotFoundError as e:
        raise StoredFileNotFoundError from e
    except OSError as e:
        logger.exception("File serve error", path=str(path))
        raise StorageError(str(e) if settings.app.debug else None) from e

    return FileResponse(
        path,
        media_type=media_type_for(path.name),
        headers=CACHE_HEADERS,
        stat_result=stat_result,
    )


@router.get("/{date_folder}/{filename}", responses=ERROR_RESPONSES)
async def get_file(
    date_folder: str,
    filename: str,
    storage: StorageDep,
    settings: SettingsDep,
) -> FileResponse:
    """Stream a stored file with long-lived cache headers."""
    try:
        path = await storage.resolve(date_folder, filename)
    except OSError as e:
        logger.exception("File lookup error", date_folder=date_folder, filename=filename)
        raise StorageError(str(e) if settings.app.debug else None) from e
    if path is None:
        logger.info("File not found", date_folder=date_folder, filename=filename)
        raise StoredFileNotFoundError
    return await _file_response(path, settings)


@router.get(
    "/{filename}",
    responses={301: {"description": "Redirect to the dated URL"}, **ERROR_RESPONSES},
    response_model=None,
)
async def get_legacy_file(
    filename: str,
    storage: StorageDep,
    settings: SettingsDep,
) -> RedirectResponse | FileResponse:
    """Resolve a bare ``{uuid}.{ext}`` link from before date folders existed."""
    try:
        date_folder = await storage.find_legacy(filename)
        flat_path = None if date_folder else await storage.resolve_flat(filename)
    except OSError as e:
        logger.exception("Legacy lookup error", filename=filename)
        raise StorageError(str(e) if settings.app.debug else None) from e

    if date_folder:
        return RedirectResponse(
            url=f"/uploads/{date_folder}/{filename}",
            status_code=status.HTTP_301_MOVED_PERMANENTLY,
        )
    if flat_path is not None:
        return await _file_response(flat_path, settings)

    logger.info("Legacy file not found", filename=filename)
    raise StoredFileNotFoundError
