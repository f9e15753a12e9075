"""
AuthorizationCode Entity

Short-lived, single-use credential exchanged for tokens.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow


class AuthorizationCode(SQLModel, table=True):
    """
    AuthorizationCode entity - minted on consent, redeemed at the token endpoint.

    Business Rules:
    - Single-use: flipped to used=true by a conditional update, never back
    - Bound to client, user, redirect_uri and optional PKCE challenge
    - Expires after AUTHORIZATION_CODE_EXPIRY seconds (default 600)
    """

    __tablename__ = "authorization_codes"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    code: str = Field(unique=True, index=True, max_length=128)

    client_id: str = Field(index=True, max_length=255)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    redirect_uri: str = Field(max_length=2048)
    scope: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    nonce: Optional[str] = Field(default=None, max_length=255)

    code_challenge: Optional[str] = Field(default=None, max_length=255)
    code_challenge_method: Optional[str] = Field(default=None, max_length=10)

    used: bool = Field(default=False)

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_authorization_code_expires_at", "expires_at"),)
