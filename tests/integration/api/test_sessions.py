from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlmodel import select

from src.app.services.token_codec import generate_refresh_token, hash_refresh_token
from src.domain.base import utcnow
from src.domain.entities import Session
from tests.utils.auth_headers import ADMIN_HEADERS, bearer


def expired_session(user_id: str) -> Session:
    now = utcnow()
    return Session(
        user_id=user_id,
        refresh_token_hash=hash_refresh_token(generate_refresh_token()),
        expires_at=now - timedelta(hours=1),
        created_at=now - timedelta(days=8),
        updated_at=now - timedelta(days=8),
    )


@pytest.mark.asyncio
async def test_list_sessions_requires_admin_key(client: AsyncClient):
    missing = await client.get("/sessions/user-1")
    wrong = await client.get("/sessions/user-1", headers={"X-Admin-API-Key": "wrong"})

    assert missing.status_code == 401
    assert missing.json()["error"]["code"] == "UNAUTHORIZED"
    assert wrong.status_code == 401
    assert wrong.json()["error"]["code"] == "INVALID_API_KEY"


@pytest.mark.asyncio
async def test_list_sessions_filters(client: AsyncClient, login, db_session):
    """Validity and activity filters"""
    db_session.add(expired_session("user-1"))
    await db_session.commit()
    tokens = await login("user-1")
    await client.post("/auth/refresh", headers=bearer(tokens["refresh_token"]))

    all_sessions = await client.get("/sessions/user-1", headers=ADMIN_HEADERS)
    invalid = await client.get("/sessions/user-1?is_valid=false", headers=ADMIN_HEADERS)
    active = await client.get("/sessions/user-1?active_only=true", headers=ADMIN_HEADERS)

    assert len(all_sessions.json()["sessions"]) == 3
    assert [s["id"] for s in invalid.json()["sessions"]] == [tokens["session_id"]]
    assert len(active.json()["sessions"]) == 1
    assert "refresh_token_hash" not in all_sessions.json()["sessions"][0]


@pytest.mark.asyncio
async def test_list_sessions_unknown_user(client: AsyncClient):
    response = await client.get("/sessions/nobody", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"user_id": "nobody", "sessions": []}


@pytest.mark.asyncio
async def test_cleanup_deletes_only_expired_sessions(client: AsyncClient, login, db_session):
    db_session.add(expired_session("user-1"))
    db_session.add(expired_session("user-2"))
    await db_session.commit()
    tokens = await login("user-1")

    response = await client.post("/admin/sessions/cleanup", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"deleted_count": 2}

    remaining = (await db_session.exec(select(Session))).all()
    assert [str(s.id) for s in remaining] == [tokens["session_id"]]


@pytest.mark.asyncio
async def test_cleanup_requires_admin_key(client: AsyncClient):
    response = await client.post("/admin/sessions/cleanup")

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_health_check(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
