"""
Session Entity

Server-side anchor of the browser session cookie.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class Session(SQLModel, table=True):
    """
    Session entity - one row per issued session cookie.

    Business Rules:
    - The encrypted cookie carries session_token; the cookie is only honoured
      while this row exists and has not expired
    - Deleted on logout; independent of OAuth token lifecycle
    - Expires after SESSION_MAX_AGE seconds (default 7 days)
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    session_token: str = Field(unique=True, index=True, max_length=128)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_session_expires_at", "expires_at"),)
