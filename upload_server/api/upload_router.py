"""Upload endpoint."""

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, File, Header, UploadFile
from starlette.datastructures import UploadFile as StarletteUploadFile

from upload_server.dependencies import get_base_url, get_notifier, get_upload_service
from upload_server.schemas.response_schema import ErrorResponse
from upload_server.schemas.upload_schema import PlayerMetadata, UploadResponse
from upload_server.services.notifier import (
    WebhookNotifier,
    dispatch_upload_notification,
)
from upload_server.services.upload_service import UploadService

router = APIRouter(tags=["upload"])

UploadServiceDep = Annotated[UploadService, Depends(get_upload_service)]
NotifierDep = Annotated[WebhookNotifier | None, Depends(get_notifier)]
BaseUrlDep = Annotated[str, Depends(get_base_url)]

ERROR_RESPONSES: dict[int | str, dict] = {
    status: {"model": ErrorResponse} for status in (400, 401, 403, 413, 415, 500)
}


@router.post(
    "/upload/",
    response_model=UploadResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
@router.post(
    "/upload",
    response_model=UploadResponse,
    response_model_exclude_none=True,
    include_in_schema=False,
)
async def upload_file(
    upload_service: UploadServiceDep,
    notifier: NotifierDep,
    base_url: BaseUrlDep,
    background_tasks: BackgroundTasks,
    file: Annotated[UploadFile | str | None, File()] = None,
    authorization: Annotated[str | None, Header()] = None,
    origin: Annotated[str | None, Header()] = None,
    player_metadata: Annotated[str | None, Header()] = None,
) -> UploadResponse:
    """Validate and store a single uploaded file.

    A plain form field named ``file`` carries no upload and counts as missing.
    """
    metadata = PlayerMetadata.from_header(player_metadata)
    result, stored = await upload_service.upload(
        file if isinstance(file, StarletteUploadFile) else None,
        base_url=base_url,
        authorization=authorization,
        origin=origin,
        player_metadata=metadata,
    )
    if notifier is not None:
        background_tasks.add_task(
            dispatch_upload_notification,
            notifier,
            stored,
            result.url,
            metadata,
        )
    return result
