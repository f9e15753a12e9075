from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import delete, select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.mfa_trusted_device_repository import IMfaTrustedDeviceRepository
from src.domain.entities import MfaTrustedDevice


class MfaTrustedDeviceRepository(IMfaTrustedDeviceRepository):
    """MfaTrustedDevice repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_user_and_device(
        self, user_id: UUID, device_identifier: str
    ) -> Optional[MfaTrustedDevice]:
        stmt = select(MfaTrustedDevice).where(
            MfaTrustedDevice.user_id == user_id,
            MfaTrustedDevice.device_identifier == device_identifier,
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, device: MfaTrustedDevice) -> MfaTrustedDevice:
        self.session.add(device)
        await self.session.flush()
        await self.session.refresh(device)
        return device

    async def update(self, device: MfaTrustedDevice) -> MfaTrustedDevice:
        self.session.add(device)
        await self.session.flush()
        await self.session.refresh(device)
        return device

    async def delete_all_by_user_id(self, user_id: UUID) -> int:
        stmt = delete(MfaTrustedDevice).where(MfaTrustedDevice.user_id == user_id)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount

    async def delete_expired(self, now: datetime) -> int:
        stmt = delete(MfaTrustedDevice).where(MfaTrustedDevice.expires_at < now)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
