"""Listen address configuration."""

from pydantic import BaseModel


class ServerConfig(BaseModel, frozen=True):
    """Address uvicorn binds to."""

    host: str
    port: int

    @property
    def fallback_host(self) -> str:
        """Host used for links when a request carries no Host header."""
        return f"localhost:{self.port}"
