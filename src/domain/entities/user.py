"""
User Entity

Represents a person inside exactly one tenant.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import UniqueConstraint
from sqlmodel import JSON, Column, DateTime, Field, SQLModel

from src.domain.base import utcnow

from .enums import UserRole


class User(SQLModel, table=True):
    """
    User entity - a tenant-scoped account.

    Business Rules:
    - (email, tenant_id) is unique; the same email may exist in other tenants
    - Password stored as bcrypt hash (cost factor 12)
    - mfa_secret is present from MFA setup start until MFA is disabled
    - mfa_backup_codes are single-use and removed when consumed
    - Soft-disabled via is_active
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)

    email: str = Field(index=True, max_length=255)
    password_hash: str = Field(max_length=60)  # Bcrypt output is 60 chars
    name: Optional[str] = Field(default=None, max_length=255)
    image: Optional[str] = Field(default=None, max_length=1024)
    email_verified_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    role: UserRole = Field(default=UserRole.user)
    is_active: bool = Field(default=True)

    # Login state machine flags
    require_password_change: bool = Field(default=False)
    require_mfa_setup: bool = Field(default=False)

    # MFA
    mfa_enabled: bool = Field(default=False)
    mfa_secret: Optional[str] = Field(default=None, max_length=64)
    mfa_backup_codes: List[str] = Field(default_factory=list, sa_column=Column(JSON))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime))

    __table_args__ = (UniqueConstraint("email", "tenant_id", name="uq_user_email_tenant"),)
