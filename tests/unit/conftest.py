from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from src.app.services.logger import clear_request_context
from src.app.services.token_codec import TokenCodec, hash_refresh_token
from src.app.use_cases.auth import AuthSettings
from src.domain.base import utcnow
from src.domain.entities import Session


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.sessions = MagicMock()
    uow.sessions.get_by_id = AsyncMock(return_value=None)
    uow.sessions.create = AsyncMock(side_effect=lambda s: s)
    uow.sessions.find_valid = AsyncMock(return_value=None)
    uow.sessions.find_by_refresh_token_hash = AsyncMock(return_value=None)
    uow.sessions.get_latest_valid_by_user_id = AsyncMock(return_value=None)
    uow.sessions.get_by_user_id = AsyncMock(return_value=[])
    uow.sessions.get_active_by_user_id = AsyncMock(return_value=[])
    uow.sessions.invalidate_by_id = AsyncMock(return_value=True)
    uow.sessions.invalidate_all_by_user_id = AsyncMock(return_value=0)
    uow.sessions.delete_expired = AsyncMock(return_value=0)
    return uow


@pytest.fixture
def mock_store():
    """Mock SessionStore with every operation awaitable"""
    store = MagicMock()
    store.create = AsyncMock(side_effect=lambda draft: draft)
    store.find_valid = AsyncMock()
    store.find_by_refresh_token = AsyncMock(return_value=None)
    store.find_active_for_user = AsyncMock(return_value=[])
    store.list_for_user = AsyncMock(return_value=[])
    store.invalidate_all_for_user = AsyncMock()
    store.rotate = AsyncMock()
    store.clean_expired = AsyncMock(return_value=0)
    return store


@pytest.fixture
def codec():
    return TokenCodec("unit-test-secret", "HS256")


@pytest.fixture
def settings():
    return AuthSettings(
        access_token_ttl=timedelta(minutes=15),
        refresh_token_ttl=timedelta(days=7),
    )


@pytest.fixture
def fake_sleep():
    """Async sleep replacement that records requested delays"""
    delays = []

    async def sleep(delay: float) -> None:
        delays.append(delay)

    sleep.delays = delays
    return sleep


@pytest.fixture
def make_session():
    """Factory for Session entities holding a given refresh token"""

    def factory(user_id="u1", refresh_token="refresh-token", is_valid=True, **kwargs):
        now = utcnow()
        return Session(
            id=kwargs.pop("id", uuid4()),
            user_id=user_id,
            refresh_token_hash=hash_refresh_token(refresh_token),
            is_valid=is_valid,
            invalidated_at=kwargs.pop("invalidated_at", None if is_valid else now),
            expires_at=kwargs.pop("expires_at", now + timedelta(days=7)),
            created_at=now,
            updated_at=now,
            **kwargs,
        )

    return factory


@pytest.fixture(autouse=True)
def clear_log_context():
    clear_request_context()
    yield
    clear_request_context()
