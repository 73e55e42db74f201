"""
Session Entity

Binds a user to one refresh token and its lifetime.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import text
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import SessionState


class Session(SQLModel, table=True):
    """
    Session entity - one row per issued refresh token.

    Business Rules:
    - Refresh tokens are stored as SHA-256 hashes, never in plaintext
    - is_valid only ever moves from True to False
    - invalidated_at is written once, together with that transition
    - A refresh token hash is unique among valid sessions
    - expires_at is strictly after created_at
    - device_info / ip_address are recorded at creation and never updated
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    user_id: str = Field(nullable=False, index=True, max_length=255)

    refresh_token_hash: str = Field(max_length=64)  # SHA-256 hex digest
    is_valid: bool = Field(default=True)
    invalidated_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    # Provenance
    device_info: Optional[str] = Field(default=None, max_length=512)
    ip_address: Optional[str] = Field(default=None, max_length=45)

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_session_expires_at", "expires_at"),
        Index("idx_session_user_valid", "user_id", "is_valid"),
        Index("idx_session_refresh_token_hash", "refresh_token_hash"),
        Index(
            "uq_session_valid_refresh_token",
            "refresh_token_hash",
            unique=True,
            sqlite_where=text("is_valid = 1"),
            postgresql_where=text("is_valid"),
        ),
    )

    def state_at(self, now: datetime) -> SessionState:
        if not self.is_valid:
            return SessionState.invalidated
        if self.expires_at <= now:
            return SessionState.expired
        return SessionState.active
