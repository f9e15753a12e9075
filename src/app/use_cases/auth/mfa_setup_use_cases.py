"""
MFA Setup Use Cases

Enrolment runs either as the mfa_setup step of the login flow (identified
by a login_token) or voluntarily for a signed-in user.
"""

import logging
from typing import Optional, Tuple
from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.email_notifier import IEmailNotifier, mfa_enabled_email, notify_safely
from src.app.services.mfa_service import MfaService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import LoginChallenge, LoginState, User

from .dtos import LoginOutcome, MfaSetupResponse
from .login_flow import advance, load_challenge

logger = logging.getLogger(__name__)


async def _resolve_user(
    uow: UnitOfWork, login_token: Optional[str], user_id: Optional[UUID]
) -> Result[Tuple[Optional[LoginChallenge], User]]:
    if login_token:
        return await load_challenge(uow, login_token, LoginState.mfa_setup)
    if user_id is not None:
        user = await uow.users.get_by_id(user_id)
        if user is not None and user.is_active:
            return Return.ok((None, user))
    return Return.err(Error("UNAUTHORIZED", "Authentication required"))


class BeginMfaSetupUseCase:
    """Generates a pending TOTP secret, QR code and backup codes"""

    def __init__(self, uow: UnitOfWork, issuer: str):
        self.uow = uow
        self.issuer = issuer

    async def execute(
        self, login_token: Optional[str] = None, user_id: Optional[UUID] = None
    ) -> Result[MfaSetupResponse]:
        """
        Errors:
            - INVALID_LOGIN_TOKEN / UNAUTHORIZED: No login step or session
            - ALREADY_ENABLED: MFA already enrolled
        """
        async with self.uow:
            resolved = await _resolve_user(self.uow, login_token, user_id)
            if resolved.is_err():
                return resolved
            _, user = resolved.value

            setup = await MfaService(self.uow, self.issuer).begin_setup(user)
            if setup.is_err():
                return setup
            await self.uow.commit()

            data = setup.value
            return Return.ok(
                MfaSetupResponse(
                    secret=data.secret,
                    otpauth_uri=data.otpauth_uri,
                    qr_code=data.qr_code,
                    backup_codes=data.backup_codes,
                    login_token=login_token,
                )
            )


class CompleteMfaSetupUseCase:
    """
    Enables MFA after the first valid TOTP code.

    In the login flow this is the last step and creates the session.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        challenge_ttl: int,
        session_max_age: int,
        notifier: Optional[IEmailNotifier] = None,
    ):
        self.uow = uow
        self.challenge_ttl = challenge_ttl
        self.session_max_age = session_max_age
        self.notifier = notifier

    async def execute(
        self, code: str, login_token: Optional[str] = None, user_id: Optional[UUID] = None
    ) -> Result[LoginOutcome]:
        """
        Errors:
            - INVALID_LOGIN_TOKEN / UNAUTHORIZED: No login step or session
            - ALREADY_ENABLED: MFA already enrolled
            - MFA_NOT_INITIATED: Setup was never started
            - INVALID_CODE: Code does not match the pending secret
        """
        async with self.uow:
            resolved = await _resolve_user(self.uow, login_token, user_id)
            if resolved.is_err():
                return resolved
            challenge, user = resolved.value

            completed = await MfaService(self.uow).complete_setup(user, code)
            if completed.is_err():
                return completed
            user = completed.value

            if challenge is not None:
                outcome = await advance(
                    self.uow,
                    user,
                    LoginState.authenticated,
                    challenge,
                    self.challenge_ttl,
                    self.session_max_age,
                )
            else:
                outcome = LoginOutcome(status=LoginState.authenticated)
            enabled_user_id = user.id
            message = mfa_enabled_email(user.email, user.name)
            await self.uow.commit()

        logger.info(f"MFA enabled for user {enabled_user_id}")
        await notify_safely(self.notifier, message)
        return Return.ok(outcome)


class DisableMfaUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID, code: str) -> Result[None]:
        """
        Disable MFA for a signed-in user after a valid TOTP or backup code.

        Errors:
            - UNAUTHORIZED: User not found or inactive
            - MFA_NOT_ENABLED: MFA is not enrolled
            - INVALID_CODE: Code did not verify
        """
        async with self.uow:
            resolved = await _resolve_user(self.uow, None, user_id)
            if resolved.is_err():
                return resolved
            _, user = resolved.value

            disabled = await MfaService(self.uow).disable(user, code)
            if disabled.is_err():
                return disabled
            await self.uow.commit()

        logger.info(f"MFA disabled for user {user_id}")
        return Return.ok(None)
