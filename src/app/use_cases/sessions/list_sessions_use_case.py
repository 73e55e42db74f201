"""
List Sessions Use Case

Lists a user's sessions for administration and support tooling.
"""

from typing import Optional

from src.app.services.session_store import SessionStore
from .dtos import SessionInfo, SessionListResponse


class ListSessionsUseCase:
    def __init__(self, store: SessionStore):
        self.store = store

    async def execute(
        self,
        user_id: str,
        is_valid: Optional[bool] = None,
        active_only: bool = False,
    ) -> SessionListResponse:
        """
        List sessions of a user, newest first.

        Args:
            user_id: Owner of the sessions
            is_valid: Only sessions with this validity flag (None for all)
            active_only: Only valid sessions that have not expired yet;
                takes precedence over is_valid
        """
        if active_only:
            sessions = await self.store.find_active_for_user(user_id)
        else:
            sessions = await self.store.list_for_user(user_id, is_valid)

        return SessionListResponse(
            user_id=user_id,
            sessions=[SessionInfo.from_entity(s) for s in sessions],
        )
