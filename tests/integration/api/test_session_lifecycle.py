from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient
from sqlalchemy import exc as sa_exc
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from structlog.testing import capture_logs

from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.retry import RetryPolicy
from src.app.services.session_store import SessionStore
from src.depends import get_session_store
from tests.utils.auth_headers import bearer


@pytest.mark.asyncio
async def test_login_refresh_logout_lifecycle(client: AsyncClient, login):
    """Full lifecycle of a user session

    Given a user logs in
    When the access token is validated, the pair refreshed and the user logs out
    Then every step succeeds
    And no refresh token of that user is usable afterwards
    """
    tokens = await login("user-42")

    validated = await client.get("/auth/validate", headers=bearer(tokens["access_token"]))
    assert validated.json()["is_valid"] is True
    assert validated.json()["user_id"] == "user-42"

    refreshed = await client.post("/auth/refresh", headers=bearer(tokens["refresh_token"]))
    assert refreshed.status_code == 200
    new_tokens = refreshed.json()

    logout = await client.post("/auth/logout", headers=bearer(new_tokens["access_token"]))
    assert logout.status_code == 200
    assert logout.json()["session_id"] == new_tokens["session_id"]

    for refresh_token in (tokens["refresh_token"], new_tokens["refresh_token"]):
        response = await client.post("/auth/refresh", headers=bearer(refresh_token))
        assert response.status_code == 401


@pytest.mark.asyncio
async def test_lifecycle_events_are_logged(client: AsyncClient, login):
    """Each state transition emits its lifecycle event"""
    with capture_logs() as logs:
        tokens = await login("user-1")
        refreshed = await client.post("/auth/refresh", headers=bearer(tokens["refresh_token"]))
        await client.post("/auth/logout", headers=bearer(refreshed.json()["access_token"]))

    events = [entry["event"] for entry in logs]
    for event in (
        "token_minted",
        "session_created",
        "token_rotated",
        "session_invalidated",
    ):
        assert event in events

    rendered = repr(logs)
    assert tokens["refresh_token"] not in rendered
    assert tokens["access_token"] not in rendered


@pytest.mark.asyncio
async def test_storage_unavailable_returns_503(app, client: AsyncClient, tmp_path):
    """Storage that stays unreachable after all retries surfaces as 503"""
    broken_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'sessions.db'}"
    )
    broken_factory = sessionmaker(broken_engine, class_=AsyncSession, expire_on_commit=False)
    broken_store = SessionStore(
        lambda: SqlAlchemyUnitOfWork(broken_factory),
        RetryPolicy(max_attempts=2, base_delay=0.001, max_delay=0.001),
    )
    app.dependency_overrides[get_session_store] = lambda: broken_store

    with capture_logs() as logs:
        response = await client.post("/auth/login", json={"user_id": "user-1"})

    assert response.status_code == 503
    assert response.json()["error"]["code"] == "STORAGE_UNAVAILABLE"
    retries = [entry for entry in logs if entry["event"] == "storage_retry"]
    assert len(retries) == 1
    assert retries[0]["operation"] == "create_session"
    await broken_engine.dispose()


@pytest.mark.asyncio
async def test_non_transient_storage_error_returns_500(app, client: AsyncClient):
    """Constraint violations are not retried and are not reported as unavailability"""
    failing_store = MagicMock(spec=SessionStore)
    failing_store.create = AsyncMock(
        side_effect=sa_exc.IntegrityError(
            "INSERT INTO sessions", {}, Exception("UNIQUE constraint failed: sessions.id")
        )
    )
    app.dependency_overrides[get_session_store] = lambda: failing_store

    response = await client.post("/auth/login", json={"user_id": "user-1"})

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "INTERNAL_ERROR"
    failing_store.create.assert_awaited_once()
