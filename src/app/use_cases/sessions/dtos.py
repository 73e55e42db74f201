"""
Session Use Case DTOs
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from src.domain.entities import Session


class SessionInfo(BaseModel):
    """Session as exposed to callers; the refresh token hash is never included"""

    id: str
    user_id: str
    is_valid: bool
    expires_at: datetime
    invalidated_at: Optional[datetime] = None
    device_info: Optional[str] = None
    ip_address: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, session: Session) -> "SessionInfo":
        return cls(
            id=str(session.id),
            user_id=session.user_id,
            is_valid=session.is_valid,
            expires_at=session.expires_at,
            invalidated_at=session.invalidated_at,
            device_info=session.device_info,
            ip_address=session.ip_address,
            created_at=session.created_at,
            updated_at=session.updated_at,
        )


class SessionListResponse(BaseModel):
    user_id: str
    sessions: List[SessionInfo]


class CleanExpiredSessionsResponse(BaseModel):
    deleted_count: int
