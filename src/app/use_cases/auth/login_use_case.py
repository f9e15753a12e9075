"""
Login Use Case

First step of the login state machine: tenant resolution and password check.
"""

import logging
from typing import Optional

from libs.result import Error, Result, Return
from src.api.utils.crypto import burn_password_check, verify_password
from src.app.services.mfa_service import MfaService
from src.app.services.tenant_resolver import TenantResolver
from src.app.services.unit_of_work import UnitOfWork

from .dtos import LoginOutcome
from .login_flow import advance, next_state

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = Error("INVALID_CREDENTIALS", "Invalid email or password")


class LoginUseCase:
    """
    Use case for password login.

    Business Rules:
    - The tenant is resolved from tenant_domain, or from the email domain
    - Unknown tenant, unknown user and wrong password are reported
      identically as INVALID_CREDENTIALS
    - A dummy bcrypt check runs when no user is found, keeping timing uniform
    - Inactive users are only reported after the password verified
    - Trusted devices skip the MFA step
    """

    def __init__(self, uow: UnitOfWork, challenge_ttl: int, session_max_age: int):
        self.uow = uow
        self.challenge_ttl = challenge_ttl
        self.session_max_age = session_max_age

    async def execute(
        self,
        email: str,
        password: str,
        tenant_domain: Optional[str] = None,
        user_agent: str = "",
        ip: str = "",
    ) -> Result[LoginOutcome]:
        """
        Execute login use case.

        Returns:
            Result with the next LoginOutcome, or Error

        Errors:
            - INVALID_CREDENTIALS: Tenant, user or password did not match
            - TENANT_INACTIVE: Tenant is disabled
            - ACCOUNT_INACTIVE: User is disabled
        """
        email = (email or "").strip().lower()

        async with self.uow:
            tenant_result = await TenantResolver(self.uow.tenants).resolve(tenant_domain or email)
            if tenant_result.is_err():
                if tenant_result.error.code == "TENANT_INACTIVE":
                    return tenant_result
                burn_password_check()
                return Return.err(INVALID_CREDENTIALS)
            tenant = tenant_result.value

            user = await self.uow.users.get_by_email(email, tenant.id)
            if user is None:
                burn_password_check()
                return Return.err(INVALID_CREDENTIALS)

            if not verify_password(password, user.password_hash):
                logger.warning(f"Failed login for user {user.id} in tenant {tenant.id}")
                return Return.err(INVALID_CREDENTIALS)

            if not user.is_active:
                return Return.err(Error("ACCOUNT_INACTIVE", "Account is not active"))

            trusted = False
            if user.mfa_enabled:
                trusted = await MfaService(self.uow).is_trusted_device(user, user_agent, ip)

            outcome = await advance(
                self.uow,
                user,
                next_state(user, device_trusted=trusted),
                None,
                self.challenge_ttl,
                self.session_max_age,
            )
            await self.uow.commit()

            logger.info(f"User {user.id} passed password step, next state {outcome.status.value}")
            return Return.ok(outcome)
