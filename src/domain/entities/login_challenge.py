"""
LoginChallenge Entity

Server-side state of a login that has not reached a session yet.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utcnow

from .enums import LoginState


class LoginChallenge(SQLModel, table=True):
    """
    LoginChallenge entity - correlation record between login steps.

    Business Rules:
    - Created after a successful password check that still needs a
      password change or MFA step
    - The client only ever holds the opaque token, never the user id
    - Deleted when the login reaches the authenticated state
    - Short-lived (LOGIN_CHALLENGE_EXPIRY, default 10 minutes)
    """

    __tablename__ = "login_challenges"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    token: str = Field(unique=True, index=True, max_length=128)

    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False)
    state: LoginState = Field(default=LoginState.password_change)

    # Timestamps
    expires_at: datetime = Field(sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (Index("idx_login_challenge_expires_at", "expires_at"),)
