"""
Session Service Domain Entities

All domain entities organized by model.
"""

from .enums import SessionEvent, SessionState
from .session import Session

__all__ = [
    # Enums
    "SessionEvent",
    "SessionState",
    # Entities
    "Session",
]
