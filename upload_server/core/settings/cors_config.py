"""CORS configuration."""

from pydantic import BaseModel


class CorsConfig(BaseModel, frozen=True):
    """CORS middleware settings."""

    origins: list[str]
    max_age: int
