"""Upload request and response schemas."""

import json

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

logger = structlog.get_logger()


class PlayerMetadata(BaseModel):
    """Caller identity attached to an upload via the player-metadata header."""

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(min_length=1)
    name: str = Field(min_length=1)

    @classmethod
    def from_header(cls, raw: str | None) -> "PlayerMetadata | None":
        """Parse the header value, ignoring anything malformed."""
        if not raw:
            return None
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Failed to parse player metadata", raw=raw)
            return None
        if not isinstance(payload, dict):
            logger.warning("Player metadata is not an object", raw=raw)
            return None
        try:
            return cls(
                identifier=str(payload.get("identifier") or ""),
                name=str(payload.get("name") or ""),
            )
        except ValidationError:
            logger.warning("Player metadata missing identifier or name", raw=raw)
            return None


class UploadResponse(BaseModel):
    """Successful upload payload."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    success: bool = True
    filename: str
    link: str
    url: str
    date_folder: str
    relative_path: str
    size: int
    type: str
    client_type: str
    mime_type_changed: bool
    player_metadata: PlayerMetadata | None = None
