from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import OAuthClient


class IOAuthClientRepository(ABC):
    """OAuthClient repository interface - application layer"""

    @abstractmethod
    async def get_by_client_id(self, client_id: str) -> Optional[OAuthClient]:
        """Get client by its public client_id"""
        pass

    @abstractmethod
    async def get_by_client_id_and_tenant(
        self, client_id: str, tenant_id: UUID
    ) -> Optional[OAuthClient]:
        """Get client by client_id, only if it belongs to the tenant"""
        pass

    @abstractmethod
    async def create(self, client: OAuthClient) -> OAuthClient:
        """Create a new client"""
        pass

    @abstractmethod
    async def update(self, client: OAuthClient) -> OAuthClient:
        """Update existing client"""
        pass

    @abstractmethod
    async def delete(self, client_id: str) -> None:
        """Delete a client"""
        pass
