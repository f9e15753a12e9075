from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from src.domain.entities import CustomRole


class ICustomRoleRepository(ABC):
    """CustomRole repository interface - application layer"""

    @abstractmethod
    async def get_by_user_id(self, user_id: UUID) -> List[CustomRole]:
        """Get all custom roles assigned to a user"""
        pass

    @abstractmethod
    async def create(self, role: CustomRole) -> CustomRole:
        """Create a new custom role"""
        pass

    @abstractmethod
    async def assign(self, user_id: UUID, role_id: UUID) -> None:
        """Assign a custom role to a user"""
        pass

    @abstractmethod
    async def list_by_tenant(self, tenant_id: UUID) -> List[CustomRole]:
        """List the custom roles defined in a tenant"""
        pass
