"""
UserConsent Entity

Scopes a user has granted to a client.
"""

from datetime import datetime
from typing import List
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import JSON, Column, DateTime, Field, SQLModel

from src.domain.base import utcnow


class UserConsent(SQLModel, table=True):
    """
    UserConsent entity - upserted on every consent approval.

    Business Rules:
    - One row per (user_id, client_id)
    - When it covers every requested scope the consent prompt is skipped
    """

    __tablename__ = "user_consents"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    client_id: str = Field(max_length=255)
    scope: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (UniqueConstraint("user_id", "client_id", name="uq_user_consent"),)
