"""
Use Cases

Organized into domain folders:
- auth/: Token issuance, validation, rotation and logout
- sessions/: Session inspection and maintenance

Import from subdirectories for better organization.
"""

from .auth import (
    GenerateTokensUseCase,
    LogoutUseCase,
    RefreshTokenUseCase,
    ValidateTokenUseCase,
)
from .sessions import (
    CleanExpiredSessionsUseCase,
    ListSessionsUseCase,
)

__all__ = [
    # Auth
    "GenerateTokensUseCase",
    "ValidateTokenUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    # Sessions
    "ListSessionsUseCase",
    "CleanExpiredSessionsUseCase",
]
