"""
Logout Use Case

Invalidates every valid session of the user owning the presented token.
"""

from libs.result import Error, Result, Return
from src.app.services.logger import bind_request_context, get_logger, log_event
from src.app.services.session_store import SessionStore
from src.app.services.token_codec import TokenCodec
from src.domain.entities import SessionEvent
from . import errors
from .dtos import LogoutResponse

logger = get_logger(__name__)


class LogoutUseCase:
    """
    Use case for logout.

    Business Rules:
    - The token may be an access token (JWT) or an opaque refresh token
    - An access token must verify; expired or tampered tokens are rejected
    - A refresh token must belong to a session that is still valid
    - All valid sessions of the owning user are invalidated together
    - SESSION_NOT_FOUND when the user has no valid session left
    """

    def __init__(self, store: SessionStore, codec: TokenCodec):
        self.store = store
        self.codec = codec

    async def _resolve_user_id(self, token: str) -> Result[str]:
        verified = self.codec.verify(token)
        if verified.is_ok():
            return Return.ok(verified.value.user_id)

        if verified.error.code != errors.TOKEN_MALFORMED:
            return Return.err(verified.error)

        # Not a JWT: treat it as an opaque refresh token
        session = await self.store.find_by_refresh_token(token)
        if session is None:
            return Return.err(Error(errors.INVALID_TOKEN, "Invalid token"))
        if not session.is_valid:
            return Return.err(
                Error(
                    errors.SESSION_NOT_FOUND,
                    "Session not found or already invalidated",
                )
            )
        return Return.ok(session.user_id)

    async def execute(self, token: str) -> Result[LogoutResponse]:
        """
        Execute logout.

        Args:
            token: Access token or refresh token of the user

        Returns:
            Result with LogoutResponse (id of the most recent invalidated
            session and the invalidation time), or Error
        """
        owner = await self._resolve_user_id(token)
        if owner.is_err():
            log_event(
                logger,
                SessionEvent.logout_rejected,
                level="warning",
                reason=owner.error.code,
            )
            return Return.err(owner.error)

        bind_request_context(user_id=owner.value)
        result = await self.store.invalidate_all_for_user(owner.value)
        if result.is_err():
            log_event(
                logger,
                SessionEvent.logout_rejected,
                level="warning",
                reason=errors.SESSION_NOT_FOUND,
                user_id=owner.value,
            )
            return Return.err(
                Error(
                    errors.SESSION_NOT_FOUND,
                    "Session not found or already invalidated",
                )
            )

        session = result.value
        return Return.ok(
            LogoutResponse(
                message="Logout successful",
                session_id=str(session.id),
                logout_time=session.invalidated_at,
            )
        )
