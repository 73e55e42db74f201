from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, update
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.session_repository import ISessionRepository
from src.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        stmt = select(Session).where(Session.id == session_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    async def find_by_refresh_token_hash(self, token_hash: str) -> Optional[Session]:
        """
        Find session by refresh token hash.

        Revoked and expired sessions are returned too; callers inspect the
        state so they can report why a token is unusable.
        """
        stmt = (
            select(Session)
            .where(Session.refresh_token_hash == token_hash)
            .order_by(Session.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_valid(
        self, user_id: str, token_hash: str, now: datetime
    ) -> Optional[Session]:
        """Find the valid, unexpired session for (user, refresh token hash)"""
        stmt = select(Session).where(
            Session.user_id == user_id,
            Session.refresh_token_hash == token_hash,
            Session.is_valid == True,
            Session.expires_at > now,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_latest_valid_by_user_id(
        self, user_id: str, now: datetime
    ) -> Optional[Session]:
        """Most recently created valid, unexpired session of a user"""
        stmt = (
            select(Session)
            .where(
                Session.user_id == user_id,
                Session.is_valid == True,
                Session.expires_at > now,
            )
            .order_by(Session.created_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_user_id(
        self, user_id: str, is_valid: Optional[bool] = None
    ) -> List[Session]:
        """Get sessions for a user, newest first"""
        stmt = select(Session).where(Session.user_id == user_id)
        if is_valid is not None:
            stmt = stmt.where(Session.is_valid == is_valid)
        stmt = stmt.order_by(Session.created_at.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_active_by_user_id(self, user_id: str, now: datetime) -> List[Session]:
        """Get valid, unexpired sessions for a user"""
        stmt = (
            select(Session)
            .where(
                Session.user_id == user_id,
                Session.is_valid == True,
                Session.expires_at > now,
            )
            .order_by(Session.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def invalidate_by_id(self, session_id: UUID, now: datetime) -> bool:
        """Invalidate a specific session, only if it is still valid"""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.is_valid == True)
            .values(is_valid=False, invalidated_at=now, updated_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def invalidate_all_by_user_id(self, user_id: str, now: datetime) -> int:
        """Invalidate all valid, unexpired sessions for a user"""
        stmt = (
            update(Session)
            .where(
                Session.user_id == user_id,
                Session.is_valid == True,
                Session.expires_at > now,
            )
            .values(is_valid=False, invalidated_at=now, updated_at=now)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def delete_expired(self, now: datetime) -> int:
        """Delete sessions whose expires_at has passed"""
        stmt = delete(Session).where(Session.expires_at <= now)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
