"""
Register Use Case

Self-service account creation inside an existing tenant.
"""

import logging
from typing import Optional

from libs.result import Error, Result, Return
from src.api.utils.crypto import hash_password
from src.app.repositories.errors import DuplicateUserError
from src.app.services.email_notifier import IEmailNotifier, account_created_email, notify_safely
from src.app.services.tenant_resolver import TenantResolver
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.session import CreateSessionUseCase, IssuedSession
from src.domain.entities import User, UserRole

from .dtos import RegisterCommand
from .password_policy import validate_password

logger = logging.getLogger(__name__)

ALREADY_EXISTS = Error("USER_ALREADY_EXISTS", "An account with this email already exists")


class RegisterUseCase:
    """
    Register Use Case

    Command/Response Pattern:
    - Input: RegisterCommand (validated business intent)
    - Output: Result[IssuedSession] (the new user is signed in)

    Business Logic:
    1. Resolve the tenant by domain
    2. Enforce the password policy
    3. Reject an email already registered in that tenant
    4. Create the user with role=user and a session
    5. Send the account-created email (best effort)
    """

    def __init__(
        self, uow: UnitOfWork, session_max_age: int, notifier: Optional[IEmailNotifier] = None
    ):
        self.uow = uow
        self.session_max_age = session_max_age
        self.notifier = notifier

    async def execute(self, command: RegisterCommand) -> Result[IssuedSession]:
        """
        Errors:
            - TENANT_NOT_FOUND / TENANT_INACTIVE
            - PASSWORD_POLICY_VIOLATION
            - USER_ALREADY_EXISTS
        """
        email = command.email.strip().lower()

        async with self.uow:
            tenant_result = await TenantResolver(self.uow.tenants).resolve(command.tenant_domain)
            if tenant_result.is_err():
                return tenant_result
            tenant = tenant_result.value
            tenant_id = tenant.id

            policy = validate_password(command.password)
            if policy.is_err():
                return policy

            existing = await self.uow.users.get_by_email(email, tenant.id)
            if existing is not None:
                return Return.err(ALREADY_EXISTS)

            user = User(
                tenant_id=tenant_id,
                email=email,
                password_hash=hash_password(command.password),
                name=command.name,
                role=UserRole.user,
            )
            try:
                user = await self.uow.users.create(user)
            except DuplicateUserError:
                logger.warning(f"Concurrent registration of {email} in tenant {tenant_id}")
                return Return.err(ALREADY_EXISTS)

            session = await CreateSessionUseCase(self.uow, self.session_max_age).execute(user)
            message = account_created_email(user.email, user.name)
            await self.uow.commit()

        logger.info(f"Registered user {session.user.id} in tenant {session.user.tenant_id}")
        await notify_safely(self.notifier, message)
        return Return.ok(session)
