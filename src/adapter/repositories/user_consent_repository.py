from typing import Optional
from uuid import UUID

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.user_consent_repository import IUserConsentRepository
from src.domain.base import utcnow
from src.domain.entities import UserConsent


class UserConsentRepository(IUserConsentRepository):
    """UserConsent repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_and_client(self, user_id: UUID, client_id: str) -> Optional[UserConsent]:
        stmt = select(UserConsent).where(
            UserConsent.user_id == user_id, UserConsent.client_id == client_id
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, consent: UserConsent) -> UserConsent:
        self.session.add(consent)
        await self.session.flush()
        await self.session.refresh(consent)
        return consent

    async def update(self, consent: UserConsent) -> UserConsent:
        consent.updated_at = utcnow()
        self.session.add(consent)
        await self.session.flush()
        await self.session.refresh(consent)
        return consent
