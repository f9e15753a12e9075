from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import delete, select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.errors import DuplicateTokenError
from src.app.repositories.session_repository import ISessionRepository
from src.domain.entities import Session


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_token(self, session_token: str) -> Optional[Session]:
        """Get session by its opaque token"""
        stmt = select(Session).where(Session.session_token == session_token)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        try:
            async with self.session.begin_nested():
                self.session.add(session_obj)
        except IntegrityError as exc:
            raise DuplicateTokenError("Session token already exists") from exc
        await self.session.refresh(session_obj)
        return session_obj

    async def delete_by_token(self, session_token: str) -> bool:
        stmt = delete(Session).where(Session.session_token == session_token)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def delete_all_by_user_id(self, user_id: UUID) -> int:
        """Delete every session of a user (password reset)"""
        stmt = delete(Session).where(Session.user_id == user_id)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def delete_expired(self, now: datetime) -> int:
        stmt = delete(Session).where(Session.expires_at < now)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
