"""
Verify MFA Login Use Case

Final step of the login state machine for enrolled users.
"""

from libs.result import Result, Return
from src.app.services.mfa_service import MfaService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import LoginState

from .dtos import LoginOutcome
from .login_flow import advance, load_challenge


class VerifyMfaLoginUseCase:
    """
    Use case for the mfa login step.

    Business Rules:
    - Accepts a TOTP code or an unused backup code
    - A consumed backup code cannot be used again
    - Optionally trusts the device for 30 days
    """

    def __init__(self, uow: UnitOfWork, challenge_ttl: int, session_max_age: int):
        self.uow = uow
        self.challenge_ttl = challenge_ttl
        self.session_max_age = session_max_age

    async def execute(
        self,
        login_token: str,
        code: str,
        trust_device: bool = False,
        user_agent: str = "",
        ip: str = "",
    ) -> Result[LoginOutcome]:
        """
        Errors:
            - INVALID_LOGIN_TOKEN: No pending MFA step
            - INVALID_CODE: Neither a backup code nor a valid TOTP code
        """
        async with self.uow:
            loaded = await load_challenge(self.uow, login_token, LoginState.mfa)
            if loaded.is_err():
                return loaded
            challenge, user = loaded.value

            mfa = MfaService(self.uow)
            verified = await mfa.verify_login(user, code)
            if verified.is_err():
                return verified

            if trust_device:
                await mfa.trust_device(user, user_agent, ip)

            outcome = await advance(
                self.uow,
                user,
                LoginState.authenticated,
                challenge,
                self.challenge_ttl,
                self.session_max_age,
            )
            await self.uow.commit()
            return Return.ok(outcome)
