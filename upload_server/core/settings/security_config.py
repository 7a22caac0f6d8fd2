"""Upload access control configuration."""

from pydantic import BaseModel, SecretStr


class SecurityConfig(BaseModel, frozen=True):
    """API key and origin restrictions.

    ``None`` disables the corresponding check.
    """

    api_key: SecretStr | None = None
    allowed_origins: frozenset[str] | None = None

    def api_key_matches(self, header_value: str | None) -> bool:
        """Check the authorization header against the configured key."""
        if self.api_key is None:
            return True
        return header_value == self.api_key.get_secret_value()

    def origin_allowed(self, origin: str | None) -> bool:
        """Check the origin header against the configured set."""
        if self.allowed_origins is None:
            return True
        return bool(origin) and origin in self.allowed_origins
