"""
CustomRole Entity

Tenant-defined roles carrying per-client permissions.
"""

from typing import List
from uuid import UUID, uuid4

from sqlmodel import JSON, Column, Field, SQLModel


class CustomRole(SQLModel, table=True):
    """
    CustomRole entity - named bundle of permissions per OAuth client.

    permissions is a list of {"clientId": str, "permissions": [str]} entries
    and is embedded as-is into access tokens.
    """

    __tablename__ = "custom_roles"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenants.id", nullable=False, index=True)
    name: str = Field(max_length=255)
    permissions: List[dict] = Field(default_factory=list, sa_column=Column(JSON))


class UserCustomRole(SQLModel, table=True):
    """Many-to-many link between users and custom roles"""

    __tablename__ = "user_custom_roles"

    user_id: UUID = Field(foreign_key="users.id", primary_key=True)
    role_id: UUID = Field(foreign_key="custom_roles.id", primary_key=True)
