"""Application configuration using Pydantic Settings V2."""

from functools import cached_property
from pathlib import Path

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from upload_server.core.settings import (
    AppConfig,
    CorsConfig,
    LimitsConfig,
    SecurityConfig,
    ServerConfig,
    StorageConfig,
    WebhookConfig,
)

DEFAULT_ALLOWED_MIMES = ",".join(
    [
        "audio/mpeg",
        "audio/ogg",
        "audio/opus",
        "audio/webm",
        "audio/wav",
        "video/mp4",
        "video/webm",
        "video/mpeg",
        "video/ogg",
        "image/jpeg",
        "image/png",
        "image/webp",
        "image/gif",
    ]
)

# Disables the MIME allow-list when used as ALLOWED_MIMES.
ALLOW_ALL = "*"


def split_csv(value: str | None) -> list[str]:
    """Split a comma-separated env value, dropping blank items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Flat fields are loaded directly from environment variables.
    Domain properties provide grouped access (e.g. settings.limits.allowed_mimes).
    An unset optional restriction disables that restriction.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = Field(
        default="upload-server",
        description="Application name",
    )
    debug: bool = Field(
        default=False,
        description="Expose internal error details in 500 responses",
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum log level",
    )
    log_json: bool = Field(
        default=False,
        description="Render logs as JSON lines",
    )

    # Storage
    upload_path: Path = Field(
        default=Path("./uploads"),
        description="Root directory for stored uploads",
    )
    base_url: str | None = Field(
        default=None,
        description="Public base URL; derived from request headers when unset",
    )
    preserve_metadata: bool = Field(
        default=False,
        description="Write a .meta.json sidecar next to each upload",
    )

    # Webhook
    discord_webhook: str | None = Field(
        default=None,
        description="Webhook URL notified after each upload",
    )
    webhook_username: str = Field(
        default="File Upload",
        description="Display name used in webhook messages",
    )
    webhook_avatar_url: str | None = Field(
        default=None,
        description="Avatar URL used in webhook messages",
    )
    webhook_send_link: bool = Field(
        default=True,
        description="Post the plain link message in addition to the embed",
    )
    webhook_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Outbound webhook request timeout",
    )

    # Security
    api_key: SecretStr | None = Field(
        default=None,
        description="Exact value required in the authorization header",
    )
    require_origin: str | None = Field(
        default=None,
        description="Comma-separated list of allowed origin header values",
    )

    # Limits
    max_file_size_mb: int = Field(
        default=50,
        ge=0,
        description="Maximum file size in MB (0 disables the limit)",
    )
    allowed_mimes: str = Field(
        default=DEFAULT_ALLOWED_MIMES,
        description="Comma-separated list of allowed MIME types ('*' allows all)",
    )
    sniff_bypass_mimes: str = Field(
        default="audio/webm,audio/opus",
        description="Declared MIME types trusted without magic-byte sniffing",
    )

    # Server
    bind_address: str = Field(
        default="0.0.0.0",
        description="Server bind address",
    )
    port: int = Field(
        default=30121,
        ge=1,
        le=65535,
        description="Server port",
    )

    # CORS
    cors_origin: str | None = Field(
        default=None,
        description="Comma-separated CORS origins ('*' when unset)",
    )
    cors_max_age: int = Field(
        default=86400,
        ge=0,
        description="CORS preflight cache duration in seconds",
    )

    # --- Domain properties ---

    @cached_property
    def app(self) -> AppConfig:
        """Application environment configuration."""
        return AppConfig(
            name=self.app_name,
            debug=self.debug,
            log_level=self.log_level.upper(),
            log_json=self.log_json,
        )

    @cached_property
    def storage(self) -> StorageConfig:
        """Upload storage configuration."""
        return StorageConfig(
            path=self.upload_path,
            base_url=self.base_url or None,
            preserve_metadata=self.preserve_metadata,
        )

    @cached_property
    def webhook(self) -> WebhookConfig | None:
        """Webhook configuration, or None when notifications are disabled."""
        if not self.discord_webhook:
            return None
        return WebhookConfig(
            url=self.discord_webhook,
            username=self.webhook_username,
            avatar_url=self.webhook_avatar_url or None,
            send_link=self.webhook_send_link,
            timeout_seconds=self.webhook_timeout_seconds,
        )

    @cached_property
    def security(self) -> SecurityConfig:
        """API key and origin restrictions."""
        api_key = self.api_key
        if api_key is not None and not api_key.get_secret_value():
            api_key = None
        origins = split_csv(self.require_origin)
        return SecurityConfig(
            api_key=api_key,
            allowed_origins=frozenset(origins) if origins else None,
        )

    @cached_property
    def limits(self) -> LimitsConfig:
        """File size and MIME type limits."""
        mimes = split_csv(self.allowed_mimes)
        allow_all = not mimes or ALLOW_ALL in mimes
        return LimitsConfig(
            max_file_size_mb=self.max_file_size_mb or None,
            allowed_mimes=None if allow_all else frozenset(m.lower() for m in mimes),
            sniff_bypass_mimes=frozenset(
                m.lower() for m in split_csv(self.sniff_bypass_mimes)
            ),
        )

    @cached_property
    def server(self) -> ServerConfig:
        """Server configuration."""
        return ServerConfig(
            host=self.bind_address,
            port=self.port,
        )

    @cached_property
    def cors(self) -> CorsConfig:
        """CORS middleware configuration."""
        return CorsConfig(
            origins=split_csv(self.cors_origin) or ["*"],
            max_age=self.cors_max_age,
        )

    # --- Convenience properties (delegate to domain configs) ---

    @property
    def max_file_size_bytes(self) -> int | None:
        """Get maximum file size in bytes."""
        return self.limits.max_file_size_bytes


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Provide the process-wide settings (overridden in tests)."""
    return settings
