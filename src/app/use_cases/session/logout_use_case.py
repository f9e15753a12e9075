"""
Logout Use Case

Destroys the session and revokes every OAuth token of the user.
"""

import logging
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.cache import ICache, revocation_marker, write_revocation_markers
from src.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)


class LogoutUseCase:
    """
    Use case for logout.

    Business Rules:
    - The session row is deleted and committed first, so the cookie is dead
      even if the second step fails
    - All access and refresh token rows of the user are then revoked and
      cached access tokens are pinned as revoked
    - A failure after the session is gone is logged and reported as
      TOKEN_REVOCATION_FAILED
    """

    def __init__(self, uow: UnitOfWork, cache: ICache):
        self.uow = uow
        self.cache = cache

    async def execute(self, session_token: str, user_id: UUID) -> Result[None]:
        async with self.uow:
            await self.uow.sessions.delete_by_token(session_token)
            await self.uow.commit()

            try:
                active = await self.uow.access_tokens.list_active_by_user_id(user_id)
                markers = [revocation_marker(token) for token in active]
                revoked_access = await self.uow.access_tokens.revoke_all_by_user_id(user_id)
                revoked_refresh = await self.uow.refresh_tokens.revoke_all_by_user_id(user_id)
                await self.uow.commit()
                await write_revocation_markers(self.cache, markers)
            except Exception:
                logger.exception(f"Token revocation failed during logout for user {user_id}")
                return Return.err(
                    Error("TOKEN_REVOCATION_FAILED", "Failed to revoke tokens during logout")
                )

        logger.info(
            f"User {user_id} logged out, revoked {revoked_access} access "
            f"and {revoked_refresh} refresh tokens"
        )
        return Return.ok(None)
