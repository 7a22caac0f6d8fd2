"""Application environment configuration."""

from pydantic import BaseModel


class AppConfig(BaseModel, frozen=True):
    """Application environment settings."""

    name: str
    debug: bool
    log_level: str
    log_json: bool
