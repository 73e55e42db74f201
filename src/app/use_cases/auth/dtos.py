"""
Authentication Use Case DTOs (Data Transfer Objects)

All Response classes for the auth domain.
"""

from datetime import datetime

from pydantic import BaseModel


class AuthTokensResponse(BaseModel):
    """Response for token generation and refresh use cases"""

    access_token: str
    refresh_token: str
    expires_in: int
    session_id: str


class ValidateTokenResponse(BaseModel):
    """Response for token validation use case"""

    user_id: str
    is_valid: bool
    expires_in: int

    @classmethod
    def invalid(cls) -> "ValidateTokenResponse":
        return cls(user_id="", is_valid=False, expires_in=0)


class LogoutResponse(BaseModel):
    """Response for logout use case"""

    message: str
    session_id: str
    logout_time: datetime
