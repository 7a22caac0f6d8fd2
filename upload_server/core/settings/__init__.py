"""Domain-specific configuration models."""

from upload_server.core.settings.app_config import AppConfig
from upload_server.core.settings.cors_config import CorsConfig
from upload_server.core.settings.limits_config import LimitsConfig
from upload_server.core.settings.security_config import SecurityConfig
from upload_server.core.settings.server_config import ServerConfig
from upload_server.core.settings.storage_config import StorageConfig
from upload_server.core.settings.webhook_config import WebhookConfig

__all__ = [
    "AppConfig",
    "CorsConfig",
    "LimitsConfig",
    "SecurityConfig",
    "ServerConfig",
    "StorageConfig",
    "WebhookConfig",
]
