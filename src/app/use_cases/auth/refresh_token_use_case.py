"""
Refresh Token Use Case

Exchanges a refresh token for a new token pair, rotating the session.
"""

from libs.result import Error, Result, Return
from src.app.services.logger import bind_request_context, get_logger, log_event
from src.app.services.session_store import SessionStore
from src.domain.base import utcnow
from src.domain.entities import SessionEvent, SessionState
from . import errors
from .dtos import AuthTokensResponse
from .generate_tokens_use_case import GenerateTokensUseCase

logger = get_logger(__name__)


class RefreshTokenUseCase:
    """
    Use case for refresh token rotation.

    Business Rules:
    - A refresh token can be used at most once
    - Old session invalidation and new session creation commit together
    - Of two concurrent refreshes with the same token exactly one succeeds
    - Revoked and expired sessions cannot be refreshed
    - Provenance (device, IP) carries over to the new session
    """

    def __init__(self, store: SessionStore, generate_tokens: GenerateTokensUseCase):
        self.store = store
        self.generate_tokens = generate_tokens

    def _reject(self, code: str, message: str, **fields) -> Result[AuthTokensResponse]:
        log_event(
            logger,
            SessionEvent.token_rotation_failed,
            level="warning",
            reason=code,
            **fields,
        )
        return Return.err(Error(code, message))

    async def execute(self, refresh_token: str) -> Result[AuthTokensResponse]:
        """
        Execute refresh token rotation.

        Args:
            refresh_token: The refresh token to verify and rotate

        Returns:
            Result with AuthTokensResponse containing the new pair, or Error
            (INVALID_TOKEN, SESSION_REVOKED, SESSION_EXPIRED)
        """
        session = await self.store.find_by_refresh_token(refresh_token)
        if session is None:
            return self._reject(errors.INVALID_TOKEN, "Invalid refresh token")

        bind_request_context(user_id=session.user_id)
        state = session.state_at(utcnow())
        if state == SessionState.invalidated:
            return self._reject(
                errors.SESSION_REVOKED,
                "Session has been revoked",
                user_id=session.user_id,
                session_id=str(session.id),
            )
        if state == SessionState.expired:
            return self._reject(
                errors.SESSION_EXPIRED,
                "Session has expired",
                user_id=session.user_id,
                session_id=str(session.id),
            )

        issued = self.generate_tokens.issue(
            session.user_id,
            device_info=session.device_info,
            ip_address=session.ip_address,
        )

        rotated = await self.store.rotate(
            session.user_id, refresh_token, successor=issued.session
        )
        if rotated.is_err():
            # Lost a race against another refresh or a logout
            return self._reject(
                errors.SESSION_REVOKED,
                "Session has been revoked",
                user_id=session.user_id,
                session_id=str(session.id),
            )

        log_event(
            logger,
            SessionEvent.token_rotated,
            user_id=session.user_id,
            old_session_id=str(rotated.value.id),
            new_session_id=str(issued.session.id),
        )

        return Return.ok(
            AuthTokensResponse(
                access_token=issued.access_token,
                refresh_token=issued.refresh_token,
                expires_in=issued.expires_in,
                session_id=str(issued.session.id),
            )
        )
