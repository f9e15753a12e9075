from typing import Optional
from uuid import UUID

from sqlmodel import delete, select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.oauth_client_repository import IOAuthClientRepository
from src.domain.entities import OAuthClient


class OAuthClientRepository(IOAuthClientRepository):
    """OAuthClient repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_client_id(self, client_id: str) -> Optional[OAuthClient]:
        """Get client by its public client_id"""
        stmt = select(OAuthClient).where(OAuthClient.client_id == client_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def get_by_client_id_and_tenant(
        self, client_id: str, tenant_id: UUID
    ) -> Optional[OAuthClient]:
        """Get client by client_id, only if registered in the given tenant"""
        stmt = select(OAuthClient).where(
            OAuthClient.client_id == client_id, OAuthClient.tenant_id == tenant_id
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, client: OAuthClient) -> OAuthClient:
        """Create a new client"""
        self.session.add(client)
        await self.session.flush()
        await self.session.refresh(client)
        return client

    async def update(self, client: OAuthClient) -> OAuthClient:
        """Update existing client"""
        self.session.add(client)
        await self.session.flush()
        await self.session.refresh(client)
        return client

    async def delete(self, client_id: str) -> None:
        stmt = delete(OAuthClient).where(OAuthClient.client_id == client_id)
        await self.session.execute(stmt)
        await self.session.flush()
