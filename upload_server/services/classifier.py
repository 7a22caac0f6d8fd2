"""Content type detection for uploaded files."""

import mimetypes
from collections.abc import Iterable

import filetype
from pydantic import BaseModel, ConfigDict

DEFAULT_MIME_TYPE = "application/octet-stream"

EXTENSION_BY_MIME: dict[str, str] = {
    "audio/mpeg": "mp3",
    "audio/ogg": "ogg",
    "audio/opus": "opus",
    "audio/webm": "weba",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/wave": "wav",
    "audio/mp4": "m4a",
    "audio/aac": "aac",
    "audio/flac": "flac",
    "audio/x-flac": "flac",
    "video/mp4": "mp4",
    "video/webm": "webm",
    "video/mpeg": "mpeg",
    "video/ogg": "ogv",
    "video/quicktime": "mov",
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}

# Sniffed types reported under non-canonical aliases.
CANONICAL_MIME: dict[str, str] = {
    "audio/x-wav": "audio/wav",
    "audio/wave": "audio/wav",
    "audio/x-flac": "audio/flac",
    "audio/x-aac": "audio/aac",
    "audio/x-m4a": "audio/mp4",
}

MIME_BY_EXTENSION: dict[str, str] = {
    "mp3": "audio/mpeg",
    "ogg": "audio/ogg",
    "opus": "audio/opus",
    "weba": "audio/webm",
    "wav": "audio/wav",
    "m4a": "audio/mp4",
    "aac": "audio/aac",
    "flac": "audio/flac",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mpeg": "video/mpeg",
    "ogv": "video/ogg",
    "mov": "video/quicktime",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
}


def base_mime_type(value: str | None) -> str:
    """Strip ``;codecs=...`` style parameters and normalise case."""
    if not value:
        return ""
    return value.split(";", 1)[0].strip().lower()


def is_mime_allowed(mime_type: str, allowed: Iterable[str] | None) -> bool:
    """Compare base MIME types against an allow-list (None allows all)."""
    if allowed is None:
        return True
    base = base_mime_type(mime_type)
    return any(base == base_mime_type(entry) for entry in allowed)


def extension_for(mime_type: str) -> str | None:
    """Map a MIME type to a file extension using the static table."""
    return EXTENSION_BY_MIME.get(base_mime_type(mime_type))


def media_type_for(filename: str) -> str:
    """Content type to serve a stored file with, based on its extension."""
    _, _, extension = filename.rpartition(".")
    known = MIME_BY_EXTENSION.get(extension.lower())
    if known:
        return known
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or DEFAULT_MIME_TYPE


class Classification(BaseModel):
    """Outcome of classifying an upload."""

    model_config = ConfigDict(frozen=True)

    mime_type: str
    extension: str | None
    declared_type: str
    sniffed: bool = False

    @property
    def changed(self) -> bool:
        """Whether detection replaced the client-declared type."""
        return base_mime_type(self.mime_type) != base_mime_type(self.declared_type)


class ContentClassifier:
    """Resolves the true MIME type and extension of a byte buffer.

    Magic-byte sniffing wins over the declared type, except for declared
    types in ``bypass_mimes`` whose signatures are unreliable to sniff
    (e.g. streamed opus/webm audio that sniffs as video).
    """

    def __init__(self, bypass_mimes: Iterable[str] = ()) -> None:
        self._bypass = frozenset(base_mime_type(m) for m in bypass_mimes)

    def classify(self, buffer: bytes, declared_type: str | None) -> Classification:
        declared = declared_type or ""
        declared_base = base_mime_type(declared)

        if declared_base and declared_base in self._bypass:
            return Classification(
                mime_type=declared,
                extension=extension_for(declared),
                declared_type=declared,
            )

        kind = filetype.guess(buffer) if buffer else None
        if kind is not None:
            mime = CANONICAL_MIME.get(kind.mime, kind.mime)
            return Classification(
                mime_type=mime,
                extension=EXTENSION_BY_MIME.get(mime, kind.extension),
                declared_type=declared,
                sniffed=True,
            )

        return Classification(
            mime_type=declared or DEFAULT_MIME_TYPE,
            extension=extension_for(declared),
            declared_type=declared,
        )
