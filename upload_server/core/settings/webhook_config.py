"""Webhook notification configuration."""

from pydantic import BaseModel


class WebhookConfig(BaseModel, frozen=True):
    """Outbound webhook settings."""

    url: str
    username: str
    avatar_url: str | None = None
    send_link: bool = True
    timeout_seconds: float = 10.0
