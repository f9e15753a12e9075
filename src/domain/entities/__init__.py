"""
Authorization Server Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    UserRole,
    LoginState,
    CodeChallengeMethod,
    GrantType,
)

# Export all entities
from .tenant import Tenant
from .user import User
from .custom_role import CustomRole, UserCustomRole
from .oauth_client import OAuthClient
from .authorization_code import AuthorizationCode
from .access_token import AccessToken
from .refresh_token import RefreshToken
from .session import Session
from .login_challenge import LoginChallenge
from .mfa_trusted_device import MfaTrustedDevice
from .user_consent import UserConsent
from .password_reset_token import PasswordResetToken

__all__ = [
    # Enums
    "UserRole",
    "LoginState",
    "CodeChallengeMethod",
    "GrantType",
    # Entities
    "Tenant",
    "User",
    "CustomRole",
    "UserCustomRole",
    "OAuthClient",
    "AuthorizationCode",
    "AccessToken",
    "RefreshToken",
    "Session",
    "LoginChallenge",
    "MfaTrustedDevice",
    "UserConsent",
    "PasswordResetToken",
]
