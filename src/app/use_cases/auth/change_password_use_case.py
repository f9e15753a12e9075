"""
Change Password Use Case

Forced password change step of the login state machine.
"""

from libs.result import Error, Result, Return
from src.api.utils.crypto import hash_password, verify_password
from src.app.services.mfa_service import MfaService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import LoginState

from .dtos import LoginOutcome
from .login_flow import advance, load_challenge, next_state
from .password_policy import validate_password


class ChangePasswordUseCase:
    """
    Use case for the password_change login step.

    Business Rules:
    - Current password is re-verified
    - New password must differ from the current one and satisfy the policy
    - Nothing is written when a check fails
    - On success require_password_change is cleared and the MFA branch of
      the login flow is re-evaluated
    """

    def __init__(self, uow: UnitOfWork, challenge_ttl: int, session_max_age: int):
        self.uow = uow
        self.challenge_ttl = challenge_ttl
        self.session_max_age = session_max_age

    async def execute(
        self,
        login_token: str,
        current_password: str,
        new_password: str,
        user_agent: str = "",
        ip: str = "",
    ) -> Result[LoginOutcome]:
        """
        Errors:
            - INVALID_LOGIN_TOKEN: No pending password change
            - INVALID_CREDENTIALS: Current password is wrong
            - PASSWORD_POLICY_VIOLATION: New password rejected
        """
        async with self.uow:
            loaded = await load_challenge(self.uow, login_token, LoginState.password_change)
            if loaded.is_err():
                return loaded
            challenge, user = loaded.value

            if not verify_password(current_password, user.password_hash):
                return Return.err(Error("INVALID_CREDENTIALS", "Current password is incorrect"))

            if new_password == current_password:
                return Return.err(
                    Error(
                        "PASSWORD_POLICY_VIOLATION",
                        "New password must be different from the current password",
                    )
                )

            policy = validate_password(new_password)
            if policy.is_err():
                return policy

            user.password_hash = hash_password(new_password)
            user.require_password_change = False
            user = await self.uow.users.update(user)

            trusted = False
            if user.mfa_enabled:
                trusted = await MfaService(self.uow).is_trusted_device(user, user_agent, ip)

            outcome = await advance(
                self.uow,
                user,
                next_state(user, device_trusted=trusted),
                challenge,
                self.challenge_ttl,
                self.session_max_age,
            )
            await self.uow.commit()
            return Return.ok(outcome)
