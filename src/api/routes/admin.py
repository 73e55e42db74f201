"""
Admin API Routes - Maintenance Endpoints

Authentication is via Admin API Key, not user tokens.
"""

from fastapi import APIRouter, Depends, status

from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.session_store import SessionStore
from src.app.use_cases.sessions import (
    CleanExpiredSessionsResponse,
    CleanExpiredSessionsUseCase,
)
from src.depends import get_session_store

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/sessions/cleanup",
    status_code=status.HTTP_200_OK,
    response_model=CleanExpiredSessionsResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def clean_expired_sessions(store: SessionStore = Depends(get_session_store)):
    """
    Clean Expired Sessions

    Deletes sessions whose expiry has passed. Intended for a periodic job;
    token validation and refresh do not depend on it.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 503 Service Unavailable: Session storage unavailable
    """
    use_case = CleanExpiredSessionsUseCase(store)
    return await use_case.execute()
