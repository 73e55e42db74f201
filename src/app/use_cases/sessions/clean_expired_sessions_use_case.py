"""
Clean Expired Sessions Use Case

Maintenance job removing sessions whose expiry has passed.
"""

from src.app.services.session_store import SessionStore
from .dtos import CleanExpiredSessionsResponse


class CleanExpiredSessionsUseCase:
    def __init__(self, store: SessionStore):
        self.store = store

    async def execute(self) -> CleanExpiredSessionsResponse:
        count = await self.store.clean_expired()
        return CleanExpiredSessionsResponse(deleted_count=count)
