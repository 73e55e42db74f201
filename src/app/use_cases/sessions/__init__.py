"""
Session Use Cases

Session inspection and maintenance.
"""

from .clean_expired_sessions_use_case import CleanExpiredSessionsUseCase
from .dtos import CleanExpiredSessionsResponse, SessionInfo, SessionListResponse
from .list_sessions_use_case import ListSessionsUseCase

__all__ = [
    "ListSessionsUseCase",
    "CleanExpiredSessionsUseCase",
    "SessionInfo",
    "SessionListResponse",
    "CleanExpiredSessionsResponse",
]
