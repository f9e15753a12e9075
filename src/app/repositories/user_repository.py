from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from src.domain.entities import User


class IUserRepository(ABC):
    """User repository interface - application layer"""

    @abstractmethod
    async def get_by_email(self, email: str, tenant_id: UUID) -> Optional[User]:
        """Get user by email within a tenant (never by email alone)"""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        """Get user by ID"""
        pass

    @abstractmethod
    async def create(self, user: User) -> User:
        """
        Create a new user.

        Raises:
            DuplicateUserError: email already registered in the tenant
        """
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update existing user"""
        pass

    @abstractmethod
    async def delete(self, user_id: UUID) -> None:
        """Delete a user"""
        pass

    @abstractmethod
    async def list_active_by_custom_roles(
        self, tenant_id: UUID, role_ids: List[UUID]
    ) -> List[User]:
        """Active users of a tenant holding any of the given custom roles, by email"""
        pass

    @abstractmethod
    async def consume_backup_code(self, user: User, code: str) -> bool:
        """
        Atomically remove one backup code from the user's set.

        Returns False when the code is no longer present or the user row
        changed concurrently, so a code can only be consumed once.
        """
        pass
