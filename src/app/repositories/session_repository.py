from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.domain.entities import Session


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        pass

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def find_by_refresh_token_hash(self, token_hash: str) -> Optional[Session]:
        """Find the newest session with this refresh token hash, whatever its state"""
        pass

    @abstractmethod
    async def find_valid(
        self, user_id: str, token_hash: str, now: datetime
    ) -> Optional[Session]:
        """Find the valid, unexpired session for (user, refresh token hash)"""
        pass

    @abstractmethod
    async def get_latest_valid_by_user_id(
        self, user_id: str, now: datetime
    ) -> Optional[Session]:
        """Most recently created valid, unexpired session of a user"""
        pass

    @abstractmethod
    async def get_by_user_id(
        self, user_id: str, is_valid: Optional[bool] = None
    ) -> List[Session]:
        """Get sessions for a user, optionally filtered by validity"""
        pass

    @abstractmethod
    async def get_active_by_user_id(self, user_id: str, now: datetime) -> List[Session]:
        """Get valid, unexpired sessions for a user"""
        pass

    @abstractmethod
    async def invalidate_by_id(self, session_id: UUID, now: datetime) -> bool:
        """Invalidate a session if it is still valid. Returns True if a row changed."""
        pass

    @abstractmethod
    async def invalidate_all_by_user_id(self, user_id: str, now: datetime) -> int:
        """Invalidate valid, unexpired sessions of a user. Returns changed row count."""
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete sessions whose expires_at has passed. Returns count."""
        pass
