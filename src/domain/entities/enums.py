"""
Session Service Domain Enums

Enumeration types shared across the domain.
"""

from enum import Enum


class SessionState(str, Enum):
    """Lifecycle state of a (user, refresh token) pair"""

    active = "active"
    invalidated = "invalidated"
    expired = "expired"


class SessionEvent(str, Enum):
    """Structured log events emitted at session lifecycle points"""

    token_minted = "token_minted"
    session_created = "session_created"
    token_validation_failed = "token_validation_failed"
    token_rotated = "token_rotated"
    token_rotation_failed = "token_rotation_failed"
    session_invalidated = "session_invalidated"
    logout_rejected = "logout_rejected"
    storage_retry = "storage_retry"
    expired_sessions_cleaned = "expired_sessions_cleaned"
