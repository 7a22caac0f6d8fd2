"""Global dependencies for the application."""

from typing import Annotated

from fastapi import Depends, Request

from upload_server.core.config import Settings, get_settings
from upload_server.services.classifier import ContentClassifier
from upload_server.services.notifier import WebhookNotifier
from upload_server.services.storage import StorageManager
from upload_server.services.upload_service import UploadService

SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_storage(settings: SettingsDep) -> StorageManager:
    """Get a StorageManager rooted at the configured upload path."""
    return StorageManager(settings.storage)


def get_classifier(settings: SettingsDep) -> ContentClassifier:
    """Get a ContentClassifier honouring the sniffing bypass list."""
    return ContentClassifier(settings.limits.sniff_bypass_mimes)


def get_notifier(settings: SettingsDep) -> WebhookNotifier | None:
    """Get the webhook notifier, or None when no webhook is configured."""
    if settings.webhook is None:
        return None
    return WebhookNotifier(settings.webhook)


def get_upload_service(
    settings: SettingsDep,
    storage: StorageManager = Depends(get_storage),
    classifier: ContentClassifier = Depends(get_classifier),
) -> UploadService:
    """Get UploadService with all dependencies."""
    return UploadService(
        storage=storage,
        classifier=classifier,
        limits=settings.limits,
        security=settings.security,
        debug=settings.app.debug,
    )


def get_base_url(request: Request, settings: SettingsDep) -> str:
    """Public base URL for links to stored files.

    Uses BASE_URL when configured; otherwise rebuilt from the request's
    forwarded-protocol and host headers on every call.
    """
    override = settings.storage.normalized_base_url
    if override:
        return override
    host = request.headers.get("host") or settings.server.fallback_host
    forwarded = request.headers.get("x-forwarded-proto", "")
    protocol = forwarded.split(",")[0].strip() or "http"
    return f"{protocol}://{host}"
