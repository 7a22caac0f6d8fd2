"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator, Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from upload_server.core.config import Settings, get_settings
from upload_server.dependencies import get_notifier
from upload_server.services.notifier import WebhookNotifier

# --- Sample payloads ---

JPEG_HEADER = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n"
    b"\x00\x00\x00\x0dIHDR"
    b"\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00"
    b"\x1f\x15\xc4\x89"
    b"\x00\x00\x00\x0dIDAT"
    b"\x78\x9c\x63\x00\x01\x00\x00\x05\x00\x01\x0d\x0a\x2d\xb4"
    b"\x00\x00\x00\x00IEND\xaeB`\x82"
)
GIF_BYTES = b"GIF89a\x01\x00\x01\x00\x80\x00\x00\xff\xff\xff\x00\x00\x00!\xf9\x04" + b"\x00" * 32


def make_jpeg(size: int = 2048) -> bytes:
    """JPEG magic bytes padded with random data to ``size`` bytes."""
    return JPEG_HEADER + os.urandom(size - len(JPEG_HEADER))


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_jpeg()


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def gif_bytes() -> bytes:
    return GIF_BYTES


# --- Settings ---


@pytest.fixture
def upload_root(tmp_path: Path) -> Path:
    """Storage root inside the test's temporary directory."""
    return tmp_path / "uploads"


@pytest.fixture
def make_settings(upload_root: Path) -> Callable[..., Settings]:
    """Build Settings without reading .env, rooted at ``upload_root``."""

    def _make(**overrides: Any) -> Settings:
        overrides.setdefault("upload_path", upload_root)
        overrides.setdefault("discord_webhook", None)
        overrides.setdefault("api_key", None)
        overrides.setdefault("require_origin", None)
        overrides.setdefault("base_url", None)
        return Settings(_env_file=None, **overrides)  # type: ignore[call-arg]

    return _make


@pytest.fixture
def test_settings(make_settings: Callable[..., Settings]) -> Settings:
    """Default settings: no key, no origin check, default limits."""
    return make_settings()


# --- Notifier ---


@pytest.fixture
def mock_notifier() -> MagicMock:
    """Create a mock WebhookNotifier."""
    mock = MagicMock(spec=WebhookNotifier)
    mock.notify = AsyncMock(return_value=None)
    return mock


# --- App override & client fixtures ---


def _get_app(settings: Settings, notifier: WebhookNotifier | None = None):  # type: ignore[no-untyped-def]
    """Import app lazily and apply overrides."""
    from upload_server.main import app

    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_notifier] = lambda: notifier
    return app


@pytest.fixture
def client_factory() -> Callable[..., Any]:
    """Open an AsyncClient bound to the app with the given settings."""

    def _factory(
        settings: Settings, notifier: WebhookNotifier | None = None
    ) -> AsyncClient:
        application = _get_app(settings, notifier)
        transport = ASGITransport(app=application)
        return AsyncClient(transport=transport, base_url="http://test")

    return _factory


@pytest.fixture
async def async_client(
    test_settings: Settings,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with default settings."""
    application = _get_app(test_settings)
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    application.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def clear_overrides() -> Any:
    """Reset dependency overrides after every test."""
    yield
    from upload_server.main import app

    app.dependency_overrides.clear()
