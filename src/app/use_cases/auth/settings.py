from dataclasses import dataclass
from datetime import timedelta

from src.app.services.token_codec import parse_ttl


@dataclass(frozen=True)
class AuthSettings:
    """Token lifetimes, parsed once at startup"""

    access_token_ttl: timedelta
    refresh_token_ttl: timedelta

    @classmethod
    def from_config(cls, config) -> "AuthSettings":
        """Raises InvalidTTLFormatError for a malformed TTL setting."""
        return cls(
            access_token_ttl=parse_ttl(config.JWT_ACCESS_TOKEN_TTL),
            refresh_token_ttl=parse_ttl(config.JWT_REFRESH_TOKEN_TTL),
        )
