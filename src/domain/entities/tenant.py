"""
Tenant Entity

Represents an isolated partition of users, clients and tokens.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from src.domain.base import utcnow


class Tenant(SQLModel, table=True):
    """
    Tenant entity - isolation boundary for users and OAuth clients.

    Business Rules:
    - domain is unique and is what users type at login
    - Inactive tenants cannot authenticate anyone
    - Never hard-deleted while referenced
    """

    __tablename__ = "tenants"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=255)
    domain: str = Field(unique=True, index=True, max_length=255)

    is_active: bool = Field(default=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
