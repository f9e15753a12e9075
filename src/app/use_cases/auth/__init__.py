"""
Authentication Use Cases

Login state machine, MFA enrolment, registration and password reset.
"""

from .change_password_use_case import ChangePasswordUseCase
from .confirm_password_reset_use_case import ConfirmPasswordResetUseCase
from .dtos import (
    LoginOutcome,
    LoginStepResponse,
    MeResponse,
    MessageResponse,
    MfaSetupResponse,
    RegisterCommand,
)
from .get_me_use_case import GetMeUseCase
from .login_use_case import LoginUseCase
from .mfa_setup_use_cases import BeginMfaSetupUseCase, CompleteMfaSetupUseCase, DisableMfaUseCase
from .register_use_case import RegisterUseCase
from .request_password_reset_use_case import RequestPasswordResetUseCase
from .verify_mfa_login_use_case import VerifyMfaLoginUseCase

__all__ = [
    "LoginUseCase",
    "ChangePasswordUseCase",
    "BeginMfaSetupUseCase",
    "CompleteMfaSetupUseCase",
    "DisableMfaUseCase",
    "VerifyMfaLoginUseCase",
    "RegisterUseCase",
    "RequestPasswordResetUseCase",
    "ConfirmPasswordResetUseCase",
    "GetMeUseCase",
    "LoginOutcome",
    "LoginStepResponse",
    "MeResponse",
    "MessageResponse",
    "MfaSetupResponse",
    "RegisterCommand",
]
