"""
Login state machine

    login -> [password_change] -> [mfa_setup] -> [mfa] -> authenticated

Intermediate states live in a server-side LoginChallenge keyed by an opaque
login_token. Each step reloads the challenge and re-validates the user before
advancing, so no client-supplied user id is ever trusted.
"""

from datetime import timedelta
from typing import Iterable, Optional, Tuple, Union

from libs.result import Error, Result, Return
from src.app.services.token_persistence import persist_with_unique_token
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.session.create_session_use_case import CreateSessionUseCase
from src.domain.base import utcnow
from src.domain.entities import LoginChallenge, LoginState, User

from .dtos import LoginOutcome

INVALID_LOGIN_TOKEN = Error("INVALID_LOGIN_TOKEN", "Login session is invalid or has expired")


def next_state(user: User, device_trusted: bool = False) -> LoginState:
    """State that follows a verified password (or a completed step)"""
    if user.require_password_change:
        return LoginState.password_change
    if user.require_mfa_setup and not user.mfa_enabled:
        return LoginState.mfa_setup
    if user.mfa_enabled and not device_trusted:
        return LoginState.mfa
    return LoginState.authenticated


async def load_challenge(
    uow: UnitOfWork,
    login_token: Optional[str],
    expected: Union[LoginState, Iterable[LoginState]],
) -> Result[Tuple[LoginChallenge, User]]:
    """
    Load a pending login step and its user.

    Errors:
        - INVALID_LOGIN_TOKEN: unknown, expired or wrong-state challenge,
          or a user that no longer belongs to the challenge's tenant
        - ACCOUNT_INACTIVE: user was deactivated mid-flow
    """
    expected_states = {expected} if isinstance(expected, LoginState) else set(expected)

    challenge = await uow.login_challenges.get_by_token(login_token) if login_token else None
    if challenge is None or challenge.expires_at < utcnow():
        return Return.err(INVALID_LOGIN_TOKEN)
    if challenge.state not in expected_states:
        return Return.err(INVALID_LOGIN_TOKEN)

    user = await uow.users.get_by_id(challenge.user_id)
    if user is None or user.tenant_id != challenge.tenant_id:
        return Return.err(INVALID_LOGIN_TOKEN)
    if not user.is_active:
        return Return.err(Error("ACCOUNT_INACTIVE", "Account is not active"))

    tenant = await uow.tenants.get_by_id(user.tenant_id)
    if tenant is None or not tenant.is_active:
        return Return.err(Error("TENANT_INACTIVE", "Tenant is not active"))

    return Return.ok((challenge, user))


async def advance(
    uow: UnitOfWork,
    user: User,
    state: LoginState,
    challenge: Optional[LoginChallenge],
    challenge_ttl: int,
    session_max_age: int,
) -> LoginOutcome:
    """
    Move the flow to state.

    authenticated consumes the challenge and creates the session; any other
    state creates or updates the challenge with a fresh expiry.
    """
    if state == LoginState.authenticated:
        if challenge is not None:
            await uow.login_challenges.delete(challenge)
        session = await CreateSessionUseCase(uow, session_max_age).execute(user)
        return LoginOutcome(status=state, session=session)

    expires_at = utcnow() + timedelta(seconds=challenge_ttl)
    if challenge is None:
        challenge = await persist_with_unique_token(
            lambda token: LoginChallenge(
                token=token,
                user_id=user.id,
                tenant_id=user.tenant_id,
                state=state,
                expires_at=expires_at,
            ),
            uow.login_challenges.create,
        )
    else:
        challenge.state = state
        challenge.expires_at = expires_at
        challenge = await uow.login_challenges.update(challenge)

    return LoginOutcome(status=state, login_token=challenge.token)
