"""Upload size and type limits."""

from pydantic import BaseModel

MB = 1024 * 1024


class LimitsConfig(BaseModel, frozen=True):
    """File size and MIME type limits.

    ``None`` disables the corresponding limit.
    """

    max_file_size_mb: int | None = None
    allowed_mimes: frozenset[str] | None = None
    sniff_bypass_mimes: frozenset[str] = frozenset()

    @property
    def max_file_size_bytes(self) -> int | None:
        """Get maximum file size in bytes."""
        if self.max_file_size_mb is None:
            return None
        return self.max_file_size_mb * MB
