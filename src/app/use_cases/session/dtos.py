"""Session DTOs shared by the auth and OAuth flows"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from src.domain.entities import User


class Principal(BaseModel):
    """Authenticated caller resolved from the session cookie"""

    user_id: UUID
    tenant_id: UUID
    email: str
    name: Optional[str] = None
    role: str
    session_token: str


class PrincipalInfo(BaseModel):
    """Public view of the signed-in user"""

    id: str
    tenant_id: str
    email: str
    name: Optional[str] = None
    image: Optional[str] = None
    role: str


def principal_info(user: User) -> PrincipalInfo:
    return PrincipalInfo(
        id=str(user.id),
        tenant_id=str(user.tenant_id),
        email=user.email,
        name=user.name,
        image=user.image,
        role=user.role.value,
    )


class IssuedSession(BaseModel):
    """A persisted server-side session; the router turns it into a cookie"""

    session_token: str
    expires_at: datetime
    user: PrincipalInfo
