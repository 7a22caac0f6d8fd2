"""Best-effort webhook notifications for completed uploads."""

import asyncio
from datetime import UTC, datetime
from typing import Any

import httpx
import structlog

from upload_server.core.settings import WebhookConfig
from upload_server.schemas.upload_schema import PlayerMetadata
from upload_server.services.storage import StoredFile

logger = structlog.get_logger()

EMBED_TITLE = "📁 File Upload"
COLOR_WITH_PLAYER = 0x00FF00
COLOR_DEFAULT = 0x0099FF


class WebhookNotifier:
    """Posts Discord-style messages describing an upload.

    Delivery is fire-and-forget: failures are logged, never raised and
    never retried.
    """

    def __init__(
        self,
        config: WebhookConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

    def _identity(self) -> dict[str, Any]:
        identity: dict[str, Any] = {"username": self._config.username}
        if self._config.avatar_url:
            identity["avatar_url"] = self._config.avatar_url
        return identity

    def build_embed_payload(
        self,
        stored: StoredFile,
        url: str,
        player_metadata: PlayerMetadata | None = None,
    ) -> dict[str, Any]:
        fields = [
            {"name": "File Name", "value": stored.filename, "inline": False},
            {"name": "Date Folder", "value": stored.date_folder, "inline": False},
            {
                "name": "File Size",
                "value": f"{stored.size / (1024 * 1024):.2f} MB",
                "inline": False,
            },
            {"name": "MIME Type", "value": stored.mime_type, "inline": False},
        ]
        if player_metadata:
            fields.append(
                {
                    "name": "Player(ID)",
                    "value": f"{player_metadata.name} ({player_metadata.identifier})",
                    "inline": False,
                }
            )

        return {
            **self._identity(),
            "embeds": [
                {
                    "title": EMBED_TITLE,
                    "fields": fields,
                    "url": url,
                    "color": COLOR_WITH_PLAYER if player_metadata else COLOR_DEFAULT,
                    "timestamp": datetime.now(UTC).isoformat(),
                }
            ],
        }

    def build_link_payload(self, url: str) -> dict[str, Any]:
        return {**self._identity(), "content": url}

    async def _post(self, client: httpx.AsyncClient, payload: dict[str, Any]) -> None:
        response = await client.post(self._config.url, json=payload)
        response.raise_for_status()

    async def notify(
        self,
        stored: StoredFile,
        url: str,
        player_metadata: PlayerMetadata | None = None,
    ) -> None:
        """Send the embed (and optionally the bare link) to the webhook."""
        payloads = [self.build_embed_payload(stored, url, player_metadata)]
        if self._config.send_link:
            payloads.append(self.build_link_payload(url))

        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds,
                transport=self._transport,
            ) as client:
                results = await asyncio.gather(
                    *(self._post(client, payload) for payload in payloads),
                    return_exceptions=True,
                )
        except httpx.HTTPError:
            logger.exception("Webhook client failed", relative_path=stored.relative_path)
            return

        for result in results:
            if isinstance(result, httpx.HTTPError):
                logger.error(
                    "Webhook delivery failed",
                    relative_path=stored.relative_path,
                    error=str(result),
                )
            elif isinstance(result, BaseException):
                raise result
        if not any(isinstance(result, BaseException) for result in results):
            logger.info("Webhook delivered", relative_path=stored.relative_path)


async def dispatch_upload_notification(
    notifier: WebhookNotifier,
    stored: StoredFile,
    url: str,
    player_metadata: PlayerMetadata | None = None,
) -> None:
    """Run a notification as a background task.

    Designed to run as a FastAPI BackgroundTask so that the upload response
    is not blocked by the webhook; any error ends up in the log only.
    """
    try:
        await notifier.notify(stored, url, player_metadata)
    except Exception:
        logger.exception(
            "Failed to send upload notification",
            relative_path=stored.relative_path,
        )
