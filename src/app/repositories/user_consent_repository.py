from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from src.domain.entities import UserConsent


class IUserConsentRepository(ABC):
    """UserConsent repository interface - application layer"""

    @abstractmethod
    async def get_by_user_and_client(
        self, user_id: UUID, client_id: str
    ) -> Optional[UserConsent]:
        """Get the consent a user gave to a client"""
        pass

    @abstractmethod
    async def create(self, consent: UserConsent) -> UserConsent:
        """Create a new consent record"""
        pass

    @abstractmethod
    async def update(self, consent: UserConsent) -> UserConsent:
        """Update existing consent record"""
        pass
