"""
OAuthClient Entity

A registered client application.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, DateTime, Field, SQLModel

from src.domain.base import utcnow


class OAuthClient(SQLModel, table=True):
    """
    OAuthClient entity - a client application registered inside a tenant.

    Business Rules:
    - client_id is public and globally unique
    - client secret stored as bcrypt hash
    - redirect_uris are matched by exact string equality
    - Tokens are only issued to users of the same tenant
    """

    __tablename__ = "oauth_clients"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    client_id: str = Field(unique=True, index=True, max_length=255)
    client_secret_hash: str = Field(max_length=60)
    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, max_length=1024)

    redirect_uris: List[str] = Field(default_factory=list, sa_column=Column(JSON))
    allowed_scopes: List[str] = Field(
        default_factory=lambda: ["openid", "profile", "email"], sa_column=Column(JSON)
    )
    grant_types: List[str] = Field(
        default_factory=lambda: ["authorization_code", "refresh_token"],
        sa_column=Column(JSON),
    )

    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    is_active: bool = Field(default=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
