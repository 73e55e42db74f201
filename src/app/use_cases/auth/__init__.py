"""
Authentication Use Cases

Token issuance, validation, rotation and logout.
"""

from .dtos import AuthTokensResponse, LogoutResponse, ValidateTokenResponse
from .errors import UNAUTHORIZED_CODES
from .generate_tokens_use_case import GenerateTokensUseCase, IssuedTokens
from .logout_use_case import LogoutUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .settings import AuthSettings
from .validate_token_use_case import ValidateTokenUseCase

__all__ = [
    # Use Cases
    "GenerateTokensUseCase",
    "ValidateTokenUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    # DTOs - Responses
    "AuthTokensResponse",
    "ValidateTokenResponse",
    "LogoutResponse",
    # Support
    "AuthSettings",
    "IssuedTokens",
    "UNAUTHORIZED_CODES",
]
