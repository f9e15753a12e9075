from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.domain.entities import MfaTrustedDevice


class IMfaTrustedDeviceRepository(ABC):
    """MfaTrustedDevice repository interface - application layer"""

    @abstractmethod
    async def get_by_user_and_device(
        self, user_id: UUID, device_identifier: str
    ) -> Optional[MfaTrustedDevice]:
        """Get trusted device record for a user"""
        pass

    @abstractmethod
    async def create(self, device: MfaTrustedDevice) -> MfaTrustedDevice:
        """Create a new trusted device record"""
        pass

    @abstractmethod
    async def update(self, device: MfaTrustedDevice) -> MfaTrustedDevice:
        """Update existing trusted device record"""
        pass

    @abstractmethod
    async def delete_all_by_user_id(self, user_id: UUID) -> int:
        """Forget every trusted device of a user. Returns count deleted."""
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete expired records. Returns count deleted."""
        pass
