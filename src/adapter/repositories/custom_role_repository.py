from typing import List
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.custom_role_repository import ICustomRoleRepository
from src.domain.entities import CustomRole, UserCustomRole


class CustomRoleRepository(ICustomRoleRepository):
    """CustomRole repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_id(self, user_id: UUID) -> List[CustomRole]:
        """Get the custom roles assigned to a user"""
        stmt = (
            select(CustomRole)
            .join(UserCustomRole, UserCustomRole.role_id == CustomRole.id)
            .where(UserCustomRole.user_id == user_id)
            .order_by(CustomRole.name)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    async def create(self, role: CustomRole) -> CustomRole:
        self.session.add(role)
        await self.session.flush()
        await self.session.refresh(role)
        return role

    async def assign(self, user_id: UUID, role_id: UUID) -> None:
        self.session.add(UserCustomRole(user_id=user_id, role_id=role_id))
        await self.session.flush()

    async def list_by_tenant(self, tenant_id: UUID) -> List[CustomRole]:
        stmt = select(CustomRole).where(CustomRole.tenant_id == tenant_id).order_by(CustomRole.name)
        result = await self.session.exec(stmt)
        return list(result.all())
