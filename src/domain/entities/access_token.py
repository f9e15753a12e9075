"""
AccessToken Entity

Server-side record of an issued access token JWT.
"""

from datetime import datetime
from typing import List
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class AccessToken(SQLModel, table=True):
    """
    AccessToken entity - source of truth for access token revocation.

    Business Rules:
    - token is a random opaque identifier, carried in the JWT as jti
    - The JWT itself is never stored
    - Revoked on logout, password reset or explicit revocation
    """

    __tablename__ = "access_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    token: str = Field(unique=True, index=True, max_length=128)

    client_id: str = Field(index=True, max_length=255)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    scope: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    revoked: bool = Field(default=False)

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_access_token_expires_at", "expires_at"),
        Index("idx_access_token_user_revoked", "user_id", "revoked"),
    )
