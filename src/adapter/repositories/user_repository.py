from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlmodel import delete, select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.errors import DuplicateUserError
from src.app.repositories.user_repository import IUserRepository
from src.domain.base import utcnow
from src.domain.entities import User, UserCustomRole


class UserRepository(IUserRepository):
    """User repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str, tenant_id: UUID) -> Optional[User]:
        """Get user by email address within a tenant"""
        stmt = select(User).where(User.email == email.lower(), User.tenant_id == tenant_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, user: User) -> User:
        """Create a new user"""
        email = user.email = user.email.lower()
        try:
            async with self.session.begin_nested():
                self.session.add(user)
        except IntegrityError as exc:
            raise DuplicateUserError(f"User {email} already exists") from exc
        await self.session.refresh(user)
        return user

    async def update(self, user: User) -> User:
        """Update existing user"""
        user.updated_at = utcnow()
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def delete(self, user_id: UUID) -> None:
        stmt = delete(User).where(User.id == user_id)
        await self.session.execute(stmt)
        await self.session.flush()

    async def list_active_by_custom_roles(
        self, tenant_id: UUID, role_ids: List[UUID]
    ) -> List[User]:
        holders = select(UserCustomRole.user_id).where(UserCustomRole.role_id.in_(role_ids))
        stmt = (
            select(User)
            .where(
                User.tenant_id == tenant_id,
                User.is_active == True,  # noqa: E712
                User.id.in_(holders),
            )
            .order_by(User.email)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def consume_backup_code(self, user: User, code: str) -> bool:
        """
        Remove a backup code with an optimistic check on updated_at.

        Two concurrent logins with the same code cannot both succeed: the
        second update matches no row because updated_at already moved.
        """
        remaining = [c for c in user.mfa_backup_codes or [] if c != code]
        if len(remaining) == len(user.mfa_backup_codes or []):
            return False

        now = utcnow()
        stmt = (
            update(User)
            .where(User.id == user.id, User.updated_at == user.updated_at)
            .values(mfa_backup_codes=remaining, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        if result.rowcount == 0:
            return False

        await self.session.refresh(user)
        return True
