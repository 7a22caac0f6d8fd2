"""Upload validation and persistence."""

import structlog
from fastapi import UploadFile

from upload_server.core.exceptions import (
    FileTooLargeError,
    InvalidApiKeyError,
    InvalidFileTypeError,
    InvalidOriginError,
    NoFileUploadedError,
    StorageError,
    UnallowedMimeTypeError,
)
from upload_server.core.settings import LimitsConfig, SecurityConfig
from upload_server.schemas.upload_schema import PlayerMetadata, UploadResponse
from upload_server.services.classifier import ContentClassifier, is_mime_allowed
from upload_server.services.storage import StorageManager, StoredFile

logger = structlog.get_logger()


class UploadService:
    """Validates an upload, stores it and builds the response payload."""

    def __init__(
        self,
        storage: StorageManager,
        classifier: ContentClassifier,
        limits: LimitsConfig,
        security: SecurityConfig,
        debug: bool = False,
    ) -> None:
        self._storage = storage
        self._classifier = classifier
        self._limits = limits
        self._security = security
        self._debug = debug

    async def upload(
        self,
        file: UploadFile | None,
        base_url: str,
        authorization: str | None = None,
        origin: str | None = None,
        player_metadata: PlayerMetadata | None = None,
    ) -> tuple[UploadResponse, StoredFile]:
        """Run every check in order, then persist the file.

        Each failed check raises before anything touches the disk.
        """
        if file is None:
            raise NoFileUploadedError

        max_bytes = self._limits.max_file_size_bytes
        if max_bytes is not None and file.size is not None and file.size > max_bytes:
            raise FileTooLargeError

        buffer = await file.read()
        if max_bytes is not None and len(buffer) > max_bytes:
            raise FileTooLargeError

        client_type = file.content_type or ""
        classification = self._classifier.classify(buffer, client_type)

        if not is_mime_allowed(classification.mime_type, self._limits.allowed_mimes):
            logger.info(
                "Rejected upload with unallowed type",
                detected_type=classification.mime_type,
                client_type=client_type,
            )
            raise UnallowedMimeTypeError(classification.mime_type, client_type)

        if not classification.extension:
            raise InvalidFileTypeError

        if not self._security.api_key_matches(authorization):
            raise InvalidApiKeyError

        if not self._security.origin_allowed(origin):
            raise InvalidOriginError

        try:
            stored = await self._storage.save(
                buffer,
                classification.extension,
                classification.mime_type,
                client_type=client_type,
                original_filename=file.filename,
                player_metadata=player_metadata,
            )
        except OSError as e:
            logger.exception("Failed to store upload")
            raise StorageError(str(e) if self._debug else None) from e

        url = f"{base_url}/uploads/{stored.relative_path}"
        response = UploadResponse(
            filename=stored.filename,
            link=url,
            url=url,
            date_folder=stored.date_folder,
            relative_path=stored.relative_path,
            size=stored.size,
            type=classification.mime_type,
            client_type=client_type,
            mime_type_changed=classification.changed,
            player_metadata=player_metadata,
        )
        return response, stored
