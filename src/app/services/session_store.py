"""
Session Store

Single point of access to persisted sessions. Every public operation runs in
its own unit of work (one transaction) and is wrapped in `with_retry`; a
retried attempt always starts from a fresh unit of work.

State changes are compare-and-swap: rows are only updated while they still
match the state that was read, and the affected-row count decides the
outcome. Two callers racing on the same refresh token therefore cannot both
succeed, and no in-process locking is needed.
"""

import asyncio
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, TypeVar
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from libs.result import Error, Result, Return
from src.app.services.logger import get_logger, log_event
from src.app.services.retry import RetryPolicy, with_retry
from src.app.services.token_codec import hash_refresh_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import Session, SessionEvent

logger = get_logger(__name__)

T = TypeVar("T")


class NewSession(BaseModel):
    """
    Data for a session that is about to be persisted.

    The id is generated with the draft, so every retry of the insert targets
    the same primary key.
    """

    id: UUID = Field(default_factory=uuid4)
    user_id: str
    refresh_token: str
    expires_at: datetime
    device_info: Optional[str] = None
    ip_address: Optional[str] = None


class SessionStore:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.uow_factory = uow_factory
        self.retry_policy = retry_policy or RetryPolicy()
        self.sleep = sleep

    async def _run(
        self, operation_name: str, work: Callable[[UnitOfWork], Awaitable[T]]
    ) -> T:
        async def attempt() -> T:
            async with self.uow_factory() as uow:
                return await work(uow)

        return await with_retry(
            attempt,
            self.retry_policy,
            operation_name=operation_name,
            sleep=self.sleep,
        )

    @staticmethod
    def _build(draft: NewSession, now: datetime) -> Session:
        if draft.expires_at <= now:
            raise ValueError("Session expires_at must be after its creation time")
        return Session(
            id=draft.id,
            user_id=draft.user_id,
            refresh_token_hash=hash_refresh_token(draft.refresh_token),
            expires_at=draft.expires_at,
            device_info=draft.device_info,
            ip_address=draft.ip_address,
            created_at=now,
            updated_at=now,
        )

    async def create(self, draft: NewSession) -> Session:
        """
        Insert a new valid session.

        A retry after an ambiguous failure finds the row under the draft's id
        instead of inserting a second one.
        """

        async def work(uow: UnitOfWork) -> Session:
            existing = await uow.sessions.get_by_id(draft.id)
            if existing is not None:
                return existing
            session = await uow.sessions.create(self._build(draft, utcnow()))
            await uow.commit()
            return session

        session = await self._run("create_session", work)
        log_event(
            logger,
            SessionEvent.session_created,
            session_id=str(session.id),
            user_id=session.user_id,
            expires_at=session.expires_at.isoformat(),
        )
        return session

    async def find_valid(self, user_id: str, refresh_token: str) -> Result[Session]:
        """Session for (user, refresh token) only while it is valid and unexpired"""
        token_hash = hash_refresh_token(refresh_token)

        async def work(uow: UnitOfWork) -> Optional[Session]:
            return await uow.sessions.find_valid(user_id, token_hash, utcnow())

        session = await self._run("find_valid_session", work)
        if session is None:
            return Return.err(
                Error("SESSION_NOT_FOUND", "Session not found or invalidated")
            )
        return Return.ok(session)

    async def find_by_refresh_token(self, refresh_token: str) -> Optional[Session]:
        """Session holding this refresh token, in whatever state it is"""
        token_hash = hash_refresh_token(refresh_token)

        async def work(uow: UnitOfWork) -> Optional[Session]:
            return await uow.sessions.find_by_refresh_token_hash(token_hash)

        return await self._run("find_session_by_refresh_token", work)

    async def find_active_for_user(self, user_id: str) -> List[Session]:
        async def work(uow: UnitOfWork) -> List[Session]:
            return await uow.sessions.get_active_by_user_id(user_id, utcnow())

        return await self._run("find_active_sessions", work)

    async def list_for_user(
        self, user_id: str, is_valid: Optional[bool] = None
    ) -> List[Session]:
        async def work(uow: UnitOfWork) -> List[Session]:
            return await uow.sessions.get_by_user_id(user_id, is_valid)

        return await self._run("list_sessions", work)

    async def invalidate_all_for_user(self, user_id: str) -> Result[Session]:
        """
        Invalidate every valid, unexpired session of a user in one transaction.

        Returns:
            Result with the most recently created of the invalidated sessions,
            or SESSION_NOT_FOUND if the user had no valid, unexpired session
        """

        async def work(uow: UnitOfWork):
            now = utcnow()
            latest = await uow.sessions.get_latest_valid_by_user_id(user_id, now)
            if latest is None:
                return None, 0

            count = await uow.sessions.invalidate_all_by_user_id(user_id, now)
            if count == 0:
                # Another request invalidated them between the read and the update
                return None, 0

            await uow.commit()
            return latest, count

        latest, count = await self._run("invalidate_user_sessions", work)
        if latest is None:
            return Return.err(
                Error("SESSION_NOT_FOUND", "Session not found or already invalidated")
            )

        log_event(
            logger,
            SessionEvent.session_invalidated,
            user_id=user_id,
            session_id=str(latest.id),
            invalidated_count=count,
        )
        return Return.ok(latest)

    async def rotate(
        self,
        user_id: str,
        old_refresh_token: str,
        successor: Optional[NewSession] = None,
    ) -> Result[Session]:
        """
        Invalidate the valid session for (user, old refresh token).

        When `successor` is given, the replacement session is inserted in the
        same transaction: either the old session is invalid and the new one
        valid, or nothing changed.

        Returns:
            Result with the just-invalidated session, or UNAUTHORIZED when no
            valid session matched (unknown, already rotated, lost race)
        """
        token_hash = hash_refresh_token(old_refresh_token)

        async def work(uow: UnitOfWork) -> Optional[Session]:
            now = utcnow()
            current = await uow.sessions.find_valid(user_id, token_hash, now)
            if current is None:
                return None

            if not await uow.sessions.invalidate_by_id(current.id, now):
                return None

            if successor is not None:
                await uow.sessions.create(self._build(successor, now))

            await uow.commit()
            return current

        rotated = await self._run("rotate_session", work)
        if rotated is None:
            return Return.err(Error("UNAUTHORIZED", "Session not found or invalid"))
        return Return.ok(rotated)

    async def clean_expired(self) -> int:
        """Delete sessions past their expiry. Maintenance only."""

        async def work(uow: UnitOfWork) -> int:
            count = await uow.sessions.delete_expired(utcnow())
            await uow.commit()
            return count

        count = await self._run("clean_expired_sessions", work)
        log_event(logger, SessionEvent.expired_sessions_cleaned, deleted_count=count)
        return count
