"""Upload storage configuration."""

from pathlib import Path

from pydantic import BaseModel


class StorageConfig(BaseModel, frozen=True):
    """Where uploads live and how their public URLs are built."""

    path: Path
    base_url: str | None = None
    preserve_metadata: bool = False

    @property
    def normalized_base_url(self) -> str | None:
        """Base URL override without a trailing slash."""
        if not self.base_url:
            return None
        return self.base_url.rstrip("/")
