from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import delete, select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.errors import DuplicateTokenError
from src.app.repositories.refresh_token_repository import IRefreshTokenRepository
from src.domain.entities import RefreshToken


class RefreshTokenRepository(IRefreshTokenRepository):
    """RefreshToken repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_token(self, token: str) -> Optional[RefreshToken]:
        """Get token row by its opaque value"""
        stmt = select(RefreshToken).where(RefreshToken.token == token)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, token: RefreshToken) -> RefreshToken:
        """Create a new token row"""
        try:
            async with self.session.begin_nested():
                self.session.add(token)
        except IntegrityError as exc:
            raise DuplicateTokenError("Refresh token already exists") from exc
        await self.session.refresh(token)
        return token

    async def revoke(self, token_id: UUID) -> bool:
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.id == token_id, RefreshToken.revoked == False)  # noqa: E712
            .values(revoked=True)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0

    async def list_active_by_user_id(self, user_id: UUID) -> List[RefreshToken]:
        """Get non-revoked tokens of a user"""
        stmt = select(RefreshToken).where(RefreshToken.user_id == user_id, RefreshToken.revoked == False)  # noqa: E712
        result = await self.session.exec(stmt)
        return list(result.all())

    async def revoke_all_by_user_id(self, user_id: UUID) -> int:
        """Revoke all active tokens of a user"""
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.revoked == False)  # noqa: E712
            .values(revoked=True)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def delete_expired(self, now: datetime) -> int:
        stmt = delete(RefreshToken).where(RefreshToken.expires_at < now)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
