"""
Request Password Reset Use Case

Handles generating and sending password reset tokens.
"""

import hashlib
import logging
from datetime import timedelta
from typing import Optional

from libs.result import Result, Return
from src.api.utils.crypto import generate_opaque_token
from src.app.services.email_notifier import IEmailNotifier, notify_safely, password_reset_email
from src.app.services.tenant_resolver import TenantResolver
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import PasswordResetToken

from .dtos import MessageResponse

logger = logging.getLogger(__name__)

RESET_REQUESTED = MessageResponse(
    status="sent",
    message="If an account exists for this email, a password reset link has been sent",
)


class RequestPasswordResetUseCase:
    """
    Use case for requesting password reset.

    Business Rules:
    - Generate cryptographically secure token
    - Hash token with SHA-256 before storing
    - Earlier unused tokens of the user are invalidated
    - No email enumeration (same response for every outcome)
    """

    def __init__(
        self,
        uow: UnitOfWork,
        base_url: str,
        expiry: int = 3600,
        notifier: Optional[IEmailNotifier] = None,
    ):
        self.uow = uow
        self.base_url = base_url.rstrip("/")
        self.expiry = expiry
        self.notifier = notifier

    async def execute(
        self, email: str, tenant_domain: Optional[str] = None
    ) -> Result[MessageResponse]:
        email = (email or "").strip().lower()

        async with self.uow:
            tenant_result = await TenantResolver(self.uow.tenants).resolve(tenant_domain or email)
            if tenant_result.is_err():
                return Return.ok(RESET_REQUESTED)

            user = await self.uow.users.get_by_email(email, tenant_result.value.id)
            if user is None or not user.is_active:
                return Return.ok(RESET_REQUESTED)

            await self.uow.password_reset_tokens.invalidate_unused_by_user_id(user.id)

            reset_token = generate_opaque_token()
            await self.uow.password_reset_tokens.create(
                PasswordResetToken(
                    user_id=user.id,
                    token_hash=hashlib.sha256(reset_token.encode()).hexdigest(),
                    used=False,
                    expires_at=utcnow() + timedelta(seconds=self.expiry),
                )
            )
            message = password_reset_email(
                user.email, f"{self.base_url}/reset-password?token={reset_token}", user.name
            )
            user_id = user.id
            await self.uow.commit()

        logger.info(f"Password reset requested for user {user_id}")
        await notify_safely(self.notifier, message)
        return Return.ok(RESET_REQUESTED)
