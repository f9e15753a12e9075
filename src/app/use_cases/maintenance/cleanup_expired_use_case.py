"""
Cleanup Expired Use Case

Out-of-band deletion of rows whose expiry has passed.
"""

import logging

from pydantic import BaseModel

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow

logger = logging.getLogger(__name__)


class CleanupResponse(BaseModel):
    authorization_codes: int
    access_tokens: int
    refresh_tokens: int
    sessions: int
    login_challenges: int
    trusted_devices: int
    password_reset_tokens: int


class CleanupExpiredUseCase:
    """
    Deletes expired codes, tokens, sessions, login challenges, trusted
    devices and password reset tokens. Idempotent: a second run deletes
    nothing.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self) -> Result[CleanupResponse]:
        now = utcnow()
        async with self.uow:
            response = CleanupResponse(
                authorization_codes=await self.uow.authorization_codes.delete_expired(now),
                access_tokens=await self.uow.access_tokens.delete_expired(now),
                refresh_tokens=await self.uow.refresh_tokens.delete_expired(now),
                sessions=await self.uow.sessions.delete_expired(now),
                login_challenges=await self.uow.login_challenges.delete_expired(now),
                trusted_devices=await self.uow.trusted_devices.delete_expired(now),
                password_reset_tokens=await self.uow.password_reset_tokens.delete_expired(now),
            )
            await self.uow.commit()

        logger.info(f"Expired rows removed: {response.model_dump()}")
        return Return.ok(response)
