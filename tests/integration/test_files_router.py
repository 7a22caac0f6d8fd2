"""Integration tests for stored file retrieval."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock, patch

from httpx import AsyncClient

from upload_server.core.config import Settings
from upload_server.services.storage import StorageManager

LEGACY_NAME = "ab9c2b65-a053-412c-b1d1-b1c241c14591.webp"


def place_file(root: Path, date_folder: str, filename: str, data: bytes) -> Path:
    folder = root / date_folder
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / filename
    path.write_bytes(data)
    return path


class TestDatedRetrieval:
    """Tests for GET /uploads/{date_folder}/{filename}."""

    async def test_streams_file_with_cache_headers(
        self, async_client: AsyncClient, upload_root: Path
    ) -> None:
        place_file(upload_root, "2025-10-16", LEGACY_NAME, b"RIFF-webp-bytes")

        resp = await async_client.get(f"/uploads/2025-10-16/{LEGACY_NAME}")

        assert resp.status_code == 200
        assert resp.content == b"RIFF-webp-bytes"
        assert resp.headers["content-type"] == "image/webp"
        assert resp.headers["cache-control"] == "public, max-age=15724800, immutable"
        assert resp.headers["x-content-type-options"] == "nosniff"
        assert resp.headers["accept-ranges"] == "bytes"

    async def test_range_request(
        self, async_client: AsyncClient, upload_root: Path
    ) -> None:
        place_file(upload_root, "2025-10-16", LEGACY_NAME, b"0123456789")

        resp = await async_client.get(
            f"/uploads/2025-10-16/{LEGACY_NAME}", headers={"range": "bytes=2-5"}
        )

        assert resp.status_code == 206
        assert resp.content == b"2345"

    async def test_missing_file(self, async_client: AsyncClient) -> None:
        resp = await async_client.get("/uploads/2099-01-01/nonexistent.png")
        assert resp.status_code == 404
        assert resp.json() == {"error": "File not found"}

    async def test_invalid_date_folder(self, async_client: AsyncClient) -> None:
        resp = await async_client.get("/uploads/not-a-date/file.png")
        assert resp.status_code == 404

    async def test_io_error(self, async_client: AsyncClient, upload_root: Path) -> None:
        place_file(upload_root, "2025-10-16", LEGACY_NAME, b"x")

        with patch(
            "aiofiles.os.stat",
            AsyncMock(side_effect=PermissionError("denied")),
        ):
            resp = await async_client.get(f"/uploads/2025-10-16/{LEGACY_NAME}")

        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal server error"}

    async def test_io_error_detail_in_debug(
        self,
        client_factory: Callable[..., AsyncClient],
        make_settings: Callable[..., Settings],
        upload_root: Path,
    ) -> None:
        place_file(upload_root, "2025-10-16", LEGACY_NAME, b"x")

        with patch.object(
            StorageManager, "resolve", AsyncMock(side_effect=OSError("disk gone"))
        ):
            async with client_factory(make_settings(debug=True)) as client:
                resp = await client.get(f"/uploads/2025-10-16/{LEGACY_NAME}")

        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal server error", "message": "disk gone"}


class TestLegacyRetrieval:
    """Tests for GET /uploads/{filename}."""

    async def test_redirects_to_dated_path(
        self, async_client: AsyncClient, upload_root: Path
    ) -> None:
        place_file(upload_root, "2025-10-16", LEGACY_NAME, b"x")

        resp = await async_client.get(f"/uploads/{LEGACY_NAME}")

        assert resp.status_code == 301
        assert resp.headers["location"] == f"/uploads/2025-10-16/{LEGACY_NAME}"

    async def test_not_found(self, async_client: AsyncClient, upload_root: Path) -> None:
        place_file(upload_root, "2025-10-16", "other.webp", b"x")

        resp = await async_client.get(f"/uploads/{LEGACY_NAME}")

        assert resp.status_code == 404
        assert resp.json() == {"error": "File not found"}

    async def test_non_uuid_name(self, async_client: AsyncClient) -> None:
        resp = await async_client.get("/uploads/photo.webp")
        assert resp.status_code == 404

    async def test_flat_layout_served_directly(
        self, async_client: AsyncClient, upload_root: Path
    ) -> None:
        upload_root.mkdir(parents=True)
        (upload_root / LEGACY_NAME).write_bytes(b"flat")

        resp = await async_client.get(f"/uploads/{LEGACY_NAME}")

        assert resp.status_code == 200
        assert resp.content == b"flat"
        assert resp.headers["cache-control"] == "public, max-age=15724800, immutable"
