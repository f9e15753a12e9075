"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from typing import List, Optional

from pydantic import BaseModel

from src.app.use_cases.session.dtos import IssuedSession, PrincipalInfo
from src.domain.entities import LoginState


# ============================================================================
# Command DTOs
# ============================================================================


class RegisterCommand(BaseModel):
    email: str
    password: str
    name: Optional[str] = None
    tenant_domain: str


# ============================================================================
# Response DTOs
# ============================================================================


class LoginOutcome(BaseModel):
    """
    Result of one login step.

    session is set only when status is authenticated and a new session was
    created; login_token is set for every intermediate state.
    """

    status: LoginState
    login_token: Optional[str] = None
    session: Optional[IssuedSession] = None


class LoginStepResponse(BaseModel):
    """HTTP body for login steps"""

    status: LoginState
    login_token: Optional[str] = None
    user: Optional[PrincipalInfo] = None


class MfaSetupResponse(BaseModel):
    secret: str
    otpauth_uri: str
    qr_code: str
    backup_codes: List[str]
    login_token: Optional[str] = None


class MeResponse(PrincipalInfo):
    mfa_enabled: bool


class MessageResponse(BaseModel):
    status: str
    message: str
