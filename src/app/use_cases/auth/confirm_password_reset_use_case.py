"""
Confirm Password Reset Use Case

Handles password reset confirmation with secure token validation.
"""

import hashlib
import logging

from libs.result import Error, Result, Return
from src.api.utils.crypto import hash_password
from src.app.services.cache import ICache, revocation_marker, write_revocation_markers
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow

from .dtos import MessageResponse
from .password_policy import validate_password

logger = logging.getLogger(__name__)


class ConfirmPasswordResetUseCase:
    """
    Use case for confirming password reset.

    Business Rules:
    - Token is validated by hashing and comparing with stored hash
    - Token must not already be used and must not be expired
    - New password must satisfy the password policy
    - A pending forced password change is cleared
    - All user sessions are deleted and all OAuth tokens revoked
    """

    def __init__(self, uow: UnitOfWork, cache: ICache):
        self.uow = uow
        self.cache = cache

    async def execute(self, token: str, new_password: str) -> Result[MessageResponse]:
        """
        Errors:
            - PASSWORD_POLICY_VIOLATION: Password does not meet the policy
            - INVALID_TOKEN: Token not found or user gone
            - TOKEN_ALREADY_USED: Token has already been used
            - TOKEN_EXPIRED: Token has expired
        """
        policy = validate_password(new_password)
        if policy.is_err():
            return policy

        async with self.uow:
            token_hash = hashlib.sha256((token or "").encode()).hexdigest()
            reset_token = await self.uow.password_reset_tokens.get_by_token_hash(token_hash)
            if reset_token is None:
                return Return.err(Error("INVALID_TOKEN", "Invalid or expired password reset token"))
            if reset_token.used:
                return Return.err(
                    Error("TOKEN_ALREADY_USED", "Password reset token has already been used")
                )
            if reset_token.expires_at < utcnow():
                return Return.err(Error("TOKEN_EXPIRED", "Password reset token has expired"))

            user = await self.uow.users.get_by_id(reset_token.user_id)
            if user is None or not user.is_active:
                return Return.err(Error("INVALID_TOKEN", "Invalid or expired password reset token"))

            user.password_hash = hash_password(new_password)
            user.require_password_change = False
            await self.uow.users.update(user)

            reset_token.used = True
            await self.uow.password_reset_tokens.update(reset_token)

            active = await self.uow.access_tokens.list_active_by_user_id(user.id)
            markers = [revocation_marker(row) for row in active]
            sessions_deleted = await self.uow.sessions.delete_all_by_user_id(user.id)
            await self.uow.access_tokens.revoke_all_by_user_id(user.id)
            await self.uow.refresh_tokens.revoke_all_by_user_id(user.id)
            user_id = user.id
            await self.uow.commit()

        await write_revocation_markers(self.cache, markers)
        logger.info(f"Password reset for user {user_id}, {sessions_deleted} sessions ended")
        return Return.ok(
            MessageResponse(status="success", message="Password has been reset successfully")
        )
