from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import delete, select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.errors import DuplicateTokenError
from src.app.repositories.access_token_repository import IAccessTokenRepository
from src.domain.entities import AccessToken


class AccessTokenRepository(IAccessTokenRepository):
    """AccessToken repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_token(self, token: str) -> Optional[AccessToken]:
        """Get token row by its opaque value"""
        stmt = select(AccessToken).where(AccessToken.token == token)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, token: AccessToken) -> AccessToken:
        """Create a new token row"""
        try:
            async with self.session.begin_nested():
                self.session.add(token)
        except IntegrityError as exc:
            raise DuplicateTokenError("Access token already exists") from exc
        await self.session.refresh(token)
        return token

    async def revoke(self, token_id: UUID) -> bool:
        stmt = (
            update(AccessToken)
            .where(AccessToken.id == token_id, AccessToken.revoked == False)  # noqa: E712
            .values(revoked=True)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def list_active_by_user_id(self, user_id: UUID) -> List[AccessToken]:
        """Get non-revoked tokens of a user"""
        stmt = select(AccessToken).where(AccessToken.user_id == user_id, AccessToken.revoked == False)  # noqa: E712
        result = await self.session.exec(stmt)
        return list(result.all())

    async def revoke_all_by_user_id(self, user_id: UUID) -> int:
        """Revoke all active tokens of a user"""
        stmt = (
            update(AccessToken)
            .where(AccessToken.user_id == user_id, AccessToken.revoked == False)  # noqa: E712
            .values(revoked=True)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def delete_expired(self, now: datetime) -> int:
        stmt = delete(AccessToken).where(AccessToken.expires_at < now)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
