from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.session_store import SessionStore
from src.app.use_cases.sessions import ListSessionsUseCase, SessionListResponse
from src.depends import get_session_store

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.get(
    "/{user_id}",
    status_code=status.HTTP_200_OK,
    response_model=SessionListResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def list_user_sessions(
    user_id: str,
    is_valid: Optional[bool] = Query(None, description="Filter by validity flag"),
    active_only: bool = Query(False, description="Only valid, unexpired sessions"),
    store: SessionStore = Depends(get_session_store),
):
    """
    List User Sessions

    Lists the sessions of a user, newest first. Refresh token hashes are never
    returned.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 503 Service Unavailable: Session storage unavailable
    """
    use_case = ListSessionsUseCase(store)
    return await use_case.execute(user_id, is_valid=is_valid, active_only=active_only)
