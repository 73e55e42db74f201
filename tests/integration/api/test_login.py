import pytest
from httpx import AsyncClient

from tests.utils.auth_headers import ADMIN_HEADERS


@pytest.mark.asyncio
async def test_login_issues_token_pair(client: AsyncClient):
    """Successful login

    Given an already-authenticated user id
    When the caller logs the user in
    Then an access token, a refresh token and the access lifetime are returned
    And a valid session backs the refresh token
    """
    response = await client.post("/auth/login", json={"user_id": "user-1"})

    assert response.status_code == 200
    data = response.json()
    assert set(data) == {"access_token", "refresh_token", "expires_in", "session_id"}
    assert data["expires_in"] == 900
    assert data["access_token"].count(".") == 2
    assert "." not in data["refresh_token"]

    sessions = await client.get("/sessions/user-1", headers=ADMIN_HEADERS)
    assert sessions.status_code == 200
    listed = sessions.json()["sessions"]
    assert len(listed) == 1
    assert listed[0]["id"] == data["session_id"]
    assert listed[0]["is_valid"] is True


@pytest.mark.asyncio
async def test_login_records_provenance(client: AsyncClient):
    """Device and client address are stored on the session"""
    response = await client.post(
        "/auth/login", json={"user_id": "user-1"}, headers={"User-Agent": "pytest-agent/1.0"}
    )
    assert response.status_code == 200

    sessions = await client.get("/sessions/user-1", headers=ADMIN_HEADERS)
    session = sessions.json()["sessions"][0]
    assert session["device_info"] == "pytest-agent/1.0"
    assert session["ip_address"] is not None


@pytest.mark.asyncio
async def test_login_twice_creates_independent_sessions(client: AsyncClient, login):
    """Each login gets its own session and refresh token"""
    first = await login("user-1")
    second = await login("user-1")

    assert first["refresh_token"] != second["refresh_token"]
    assert first["session_id"] != second["session_id"]

    sessions = await client.get("/sessions/user-1?is_valid=true", headers=ADMIN_HEADERS)
    assert len(sessions.json()["sessions"]) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{}, {"user_id": ""}, {"user_id": "x" * 256}])
async def test_login_rejects_invalid_user_id(client: AsyncClient, payload):
    """Missing, empty or oversized user ids are rejected"""
    response = await client.post("/auth/login", json=payload)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login_echoes_request_id(client: AsyncClient):
    """The X-Request-ID header is propagated to the response"""
    response = await client.post(
        "/auth/login", json={"user_id": "user-1"}, headers={"X-Request-ID": "req-123"}
    )

    assert response.headers["X-Request-ID"] == "req-123"
