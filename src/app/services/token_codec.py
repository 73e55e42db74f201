"""
Token Codec

Stateless signing and verification of bearer access tokens, TTL parsing, and
generation/hashing of opaque refresh tokens.
"""

import hashlib
import re
import secrets
from datetime import UTC, datetime, timedelta
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel

from libs.result import Error, Result, Return

TTL_PATTERN = re.compile(r"^(\d+)([smhd])$")

TTL_UNITS = {
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
}

# 48 random bytes -> 64 URL-safe characters
REFRESH_TOKEN_BYTES = 48


class InvalidTTLFormatError(ValueError):
    """Raised when a TTL string is not an integer followed by s, m, h or d."""

    code = "INVALID_TTL_FORMAT"

    def __init__(self, value: object):
        self.value = value
        super().__init__(
            f"Invalid TTL format: {value!r} (expected e.g. '30s', '15m', '12h', '7d')"
        )


def parse_ttl(value: str) -> timedelta:
    """
    Parse a TTL configuration string into a duration.

    Args:
        value: Integer followed by a unit, e.g. "15m" or "7d"

    Returns:
        The duration as a timedelta

    Raises:
        InvalidTTLFormatError: On a missing/unknown unit or non-numeric amount
    """
    if not isinstance(value, str):
        raise InvalidTTLFormatError(value)

    match = TTL_PATTERN.match(value.strip())
    if match is None:
        raise InvalidTTLFormatError(value)

    amount, unit = match.groups()
    return int(amount) * TTL_UNITS[unit]


def generate_refresh_token() -> str:
    """Opaque, high-entropy refresh token with no embedded claims."""
    return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)


def hash_refresh_token(refresh_token: str) -> str:
    """SHA-256 hex digest used as the persisted lookup key."""
    return hashlib.sha256(refresh_token.encode()).hexdigest()


class TokenClaims(BaseModel):
    """Verified access token claims"""

    user_id: str
    issued_at: int
    expires_at: int

    def expires_in(self, now: Optional[datetime] = None) -> int:
        """Whole seconds until expiry, never negative."""
        now = now or datetime.now(UTC)
        return max(0, int((self.expires_at * 1000 - now.timestamp() * 1000) // 1000))


class TokenCodec:
    """
    Signs and verifies access tokens.

    Claims: {"sub": user_id, "iat": unix seconds, "exp": unix seconds}.
    The secret and algorithm are fixed for the lifetime of the process.
    """

    def __init__(self, secret: str, algorithm: str = "HS256"):
        self.secret = secret
        self.algorithm = algorithm

    def mint(self, user_id: str, ttl: timedelta, now: Optional[datetime] = None) -> str:
        """
        Create a signed access token.

        Args:
            user_id: Subject of the token
            ttl: Lifetime of the token
            now: Issue time (defaults to the current time)

        Returns:
            Encoded JWT string
        """
        now = now or datetime.now(UTC)
        payload = {
            "sub": user_id,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str, now: Optional[datetime] = None) -> Result[TokenClaims]:
        """
        Verify signature and expiry of a token.

        Never raises for bad input; the failure kind is reported as an Error code:
        TOKEN_MALFORMED, INVALID_SIGNATURE or TOKEN_EXPIRED.
        """
        try:
            unverified = jwt.get_unverified_claims(token)
        except JWTError:
            return Return.err(Error("TOKEN_MALFORMED", "Token could not be decoded"))

        if not self._has_valid_shape(unverified):
            return Return.err(Error("TOKEN_MALFORMED", "Token payload is malformed"))

        try:
            # Expiry is checked below with exp <= now
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            return Return.err(
                Error("INVALID_SIGNATURE", "Token signature verification failed")
            )

        now = now or datetime.now(UTC)
        if claims["exp"] <= int(now.timestamp()):
            return Return.err(Error("TOKEN_EXPIRED", "Token has expired"))

        return Return.ok(
            TokenClaims(
                user_id=claims["sub"],
                issued_at=claims.get("iat", 0),
                expires_at=claims["exp"],
            )
        )

    @staticmethod
    def _has_valid_shape(claims: object) -> bool:
        if not isinstance(claims, dict):
            return False
        sub = claims.get("sub")
        exp = claims.get("exp")
        iat = claims.get("iat", 0)
        return (
            isinstance(sub, str)
            and sub != ""
            and isinstance(exp, int)
            and not isinstance(exp, bool)
            and isinstance(iat, int)
        )
