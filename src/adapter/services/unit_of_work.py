from typing import Callable, Optional

from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.session_repository import SessionRepository
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    """
    SQLAlchemy implementation of UnitOfWork pattern.

    Each instance opens its own AsyncSession on enter and closes it on exit.
    Anything not committed is rolled back on exit, including when the
    surrounding task is cancelled.

    Entities loaded through the repositories are expunged before that
    rollback, so they leave the unit of work detached but fully loaded.
    """

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self.session_factory = session_factory
        self.session: Optional[AsyncSession] = None

    async def __aenter__(self):
        self.session = self.session_factory()
        self.sessions = SessionRepository(self.session)
        return self

    async def __aexit__(self, *args):
        # Rollback expires every instance still attached to the session
        self.session.expunge_all()
        try:
            await self.rollback()
        finally:
            await self.session.close()
            self.session = None

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()
