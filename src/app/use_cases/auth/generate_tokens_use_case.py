"""
Generate Tokens Use Case

Issues an access/refresh token pair for an already-authenticated user and
persists the session backing the refresh token.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Optional

from libs.result import Result, Return
from src.app.services.logger import get_logger, log_event
from src.app.services.session_store import NewSession, SessionStore
from src.app.services.token_codec import TokenCodec, generate_refresh_token
from src.domain.entities import SessionEvent
from .dtos import AuthTokensResponse
from .settings import AuthSettings

logger = get_logger(__name__)


@dataclass(frozen=True)
class IssuedTokens:
    access_token: str
    refresh_token: str
    expires_in: int
    session: NewSession


class GenerateTokensUseCase:
    """
    Use case for token issuance on login.

    Business Rules:
    - Caller has already verified the user; user_id is trusted
    - Access token lifetime comes from JWT_ACCESS_TOKEN_TTL
    - Refresh token is opaque and random, stored only as a hash
    - Session expiry comes from JWT_REFRESH_TOKEN_TTL
    - Storage errors surface after retries are exhausted
    """

    def __init__(self, store: SessionStore, codec: TokenCodec, settings: AuthSettings):
        self.store = store
        self.codec = codec
        self.settings = settings

    def issue(
        self,
        user_id: str,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> IssuedTokens:
        """Mint a token pair and the session draft for it, without persisting."""
        now = datetime.now(UTC)
        access_token = self.codec.mint(user_id, self.settings.access_token_ttl, now=now)
        refresh_token = generate_refresh_token()

        log_event(
            logger,
            SessionEvent.token_minted,
            user_id=user_id,
            access_ttl=int(self.settings.access_token_ttl.total_seconds()),
        )

        return IssuedTokens(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=int(self.settings.access_token_ttl.total_seconds()),
            session=NewSession(
                user_id=user_id,
                refresh_token=refresh_token,
                expires_at=(now + self.settings.refresh_token_ttl).replace(tzinfo=None),
                device_info=device_info,
                ip_address=ip_address,
            ),
        )

    async def execute(
        self,
        user_id: str,
        device_info: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Result[AuthTokensResponse]:
        """
        Execute token generation.

        Args:
            user_id: Identifier of the user, verified upstream
            device_info: Optional client description (e.g. User-Agent)
            ip_address: Optional client address

        Returns:
            Result with AuthTokensResponse
        """
        issued = self.issue(user_id, device_info, ip_address)
        session = await self.store.create(issued.session)

        return Return.ok(
            AuthTokensResponse(
                access_token=issued.access_token,
                refresh_token=issued.refresh_token,
                expires_in=issued.expires_in,
                session_id=str(session.id),
            )
        )
