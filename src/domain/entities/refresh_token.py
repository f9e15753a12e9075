"""
RefreshToken Entity

Long-lived opaque credential for minting new access tokens.
"""

from datetime import datetime
from typing import List
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class RefreshToken(SQLModel, table=True):
    """
    RefreshToken entity - issued once per authorization code redemption.

    Business Rules:
    - Not rotated on use: the same token keeps minting access tokens
    - Revoked tokens and expired tokens never mint anything
    - Expires after REFRESH_TOKEN_EXPIRY seconds (default 30 days)
    """

    __tablename__ = "refresh_tokens"

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
        Index("idx_refresh_token_expires_at", "expires_at"),
        Index("idx_refresh_token_user_revoked", "user_id", "revoked"),
    )
