"""
Create Session Use Case

Persists the server-side anchor of a browser session.
"""

from datetime import timedelta

from src.app.services.token_persistence import persist_with_unique_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import Session, User

from .dtos import IssuedSession, principal_info


class CreateSessionUseCase:
    """
    Creates a Session row for an authenticated user.

    Runs inside the caller's unit of work; the caller commits. The router
    turns the returned IssuedSession into the encrypted cookie.
    """

    def __init__(self, uow: UnitOfWork, max_age: int):
        self.uow = uow
        self.max_age = max_age

    async def execute(self, user: User) -> IssuedSession:
        expires_at = utcnow() + timedelta(seconds=self.max_age)
        session = await persist_with_unique_token(
            lambda token: Session(
                session_token=token,
                user_id=user.id,
                tenant_id=user.tenant_id,
                expires_at=expires_at,
            ),
            self.uow.sessions.create,
        )
        return IssuedSession(
            session_token=session.session_token,
            expires_at=expires_at,
            user=principal_info(user),
        )
