from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import delete, select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.authorization_code_repository import IAuthorizationCodeRepository
from src.app.repositories.errors import DuplicateTokenError
from src.domain.entities import AuthorizationCode


class AuthorizationCodeRepository(IAuthorizationCodeRepository):
    """AuthorizationCode repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_code(self, code: str) -> Optional[AuthorizationCode]:
        """Get authorization code by its value"""
        stmt = select(AuthorizationCode).where(AuthorizationCode.code == code)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, code: AuthorizationCode) -> AuthorizationCode:
        """Create a new authorization code"""
        try:
            async with self.session.begin_nested():
                self.session.add(code)
        except IntegrityError as exc:
            raise DuplicateTokenError("Authorization code already exists") from exc
        await self.session.refresh(code)
        return code

    async def mark_used_if_unused(self, code_id: UUID) -> bool:
        """
        Flip used to true only if it is still false.

        The affected row count decides which of several concurrent
        redemptions wins; every other caller gets False.
        """
        stmt = (
            update(AuthorizationCode)
            .where(AuthorizationCode.id == code_id, AuthorizationCode.used == False)  # noqa: E712
            .values(used=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount == 1

    async def delete_expired(self, now: datetime) -> int:
        stmt = delete(AuthorizationCode).where(AuthorizationCode.expires_at < now)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
