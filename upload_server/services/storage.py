"""Date-partitioned on-disk storage for uploads."""

import json
import re
import uuid
from datetime import UTC, datetime
from pathlib import Path

import aiofiles
import aiofiles.os
import structlog
from pydantic import BaseModel, ConfigDict

from upload_server.core.settings import StorageConfig
from upload_server.schemas.upload_schema import PlayerMetadata

logger = structlog.get_logger()

DATE_FOLDER_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
FILENAME_PATTERN = re.compile(r"[A-Za-z0-9_-][A-Za-z0-9._-]*")
UUID_FILENAME_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\.[a-z0-9]+",
    re.IGNORECASE,
)
METADATA_SUFFIX = ".meta.json"


def is_date_folder(name: str) -> bool:
    return bool(DATE_FOLDER_PATTERN.fullmatch(name))


def is_safe_filename(name: str) -> bool:
    return bool(FILENAME_PATTERN.fullmatch(name))


def is_uuid_filename(name: str) -> bool:
    """Whether ``name`` looks like a generated ``{uuid}.{ext}`` file name."""
    return bool(UUID_FILENAME_PATTERN.fullmatch(name))


class StoredFile(BaseModel):
    """One persisted upload. Immutable once written."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    extension: str
    mime_type: str
    size: int
    date_folder: str
    path: Path

    @property
    def filename(self) -> str:
        return f"{self.identifier}.{self.extension}"

    @property
    def relative_path(self) -> str:
        return f"{self.date_folder}/{self.filename}"


class StorageManager:
    """Stores uploads under ``{root}/{YYYY-MM-DD}/{uuid}.{ext}``."""

    def __init__(self, config: StorageConfig) -> None:
        self.root = config.path
        self.preserve_metadata = config.preserve_metadata

    @staticmethod
    def date_folder(now: datetime | None = None) -> str:
        """Today's folder name in server local time."""
        current = now or datetime.now()
        return current.strftime("%Y-%m-%d")

    @staticmethod
    def generate_identifier() -> str:
        return str(uuid.uuid4())

    async def ensure_root(self) -> None:
        await aiofiles.os.makedirs(self.root, exist_ok=True)

    async def ensure_date_folder(self, date_folder: str) -> Path:
        """Create the date folder if needed and return its path.

        Safe to call concurrently: an existing folder counts as success.
        """
        folder = self.root / date_folder
        await aiofiles.os.makedirs(folder, exist_ok=True)
        return folder

    async def save(
        self,
        buffer: bytes,
        extension: str,
        mime_type: str,
        *,
        client_type: str = "",
        original_filename: str | None = None,
        player_metadata: PlayerMetadata | None = None,
        now: datetime | None = None,
    ) -> StoredFile:
        """Write ``buffer`` under today's date folder.

        On an I/O error nothing is left behind: the data file and any
        sidecar are removed before the error propagates.
        """
        date_folder = self.date_folder(now)
        folder = await self.ensure_date_folder(date_folder)
        identifier = self.generate_identifier()
        path = folder / f"{identifier}.{extension}"

        stored = StoredFile(
            identifier=identifier,
            extension=extension,
            mime_type=mime_type,
            size=len(buffer),
            date_folder=date_folder,
            path=path,
        )

        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(buffer)

            if self.preserve_metadata:
                await self._write_metadata(
                    stored,
                    client_type=client_type,
                    original_filename=original_filename,
                    player_metadata=player_metadata,
                )
        except OSError:
            await self._discard(path, self._sidecar_path(path))
            raise

        logger.info(
            "File stored",
            relative_path=stored.relative_path,
            size=stored.size,
            mime_type=mime_type,
        )
        return stored

    async def _write_metadata(
        self,
        stored: StoredFile,
        *,
        client_type: str,
        original_filename: str | None,
        player_metadata: PlayerMetadata | None,
    ) -> None:
        metadata = {
            "filename": stored.filename,
            "originalFilename": original_filename,
            "dateFolder": stored.date_folder,
            "size": stored.size,
            "type": stored.mime_type,
            "clientType": client_type,
            "uploadedAt": datetime.now(UTC).isoformat(),
            "playerMetadata": player_metadata.model_dump() if player_metadata else None,
        }
        sidecar = self._sidecar_path(stored.path)
        async with aiofiles.open(sidecar, "w", encoding="utf-8") as f:
            await f.write(json.dumps(metadata, ensure_ascii=False))

    @staticmethod
    def _sidecar_path(path: Path) -> Path:
        return path.with_name(path.name + METADATA_SUFFIX)

    @staticmethod
    async def _discard(*paths: Path) -> None:
        for path in paths:
            try:
                await aiofiles.os.remove(path)
            except FileNotFoundError:
                continue
            except OSError:
                logger.warning("Failed to remove partial upload", path=str(path))
            else:
                logger.info("Removed partial upload", path=str(path))

    async def resolve(self, date_folder: str, filename: str) -> Path | None:
        """Path of a stored file, or None if it does not exist."""
        if not is_date_folder(date_folder) or not is_safe_filename(filename):
            return None
        if filename.endswith(METADATA_SUFFIX):
            return None
        path = self.root / date_folder / filename
        if await aiofiles.os.path.isfile(path):
            return path
        return None

    async def resolve_flat(self, filename: str) -> Path | None:
        """File stored directly under the root by the pre-date-folder layout."""
        if not is_uuid_filename(filename):
            return None
        path = self.root / filename
        if await aiofiles.os.path.isfile(path):
            return path
        return None

    async def find_legacy(self, filename: str) -> str | None:
        """Date folder holding ``filename``, newest folder first.

        Scans every date folder, so a miss costs O(folders).
        """
        if not is_uuid_filename(filename):
            return None
        if not await aiofiles.os.path.isdir(self.root):
            return None

        entries = await aiofiles.os.listdir(self.root)
        for date_folder in sorted(filter(is_date_folder, entries), reverse=True):
            if await aiofiles.os.path.isfile(self.root / date_folder / filename):
                return date_folder
        return None
