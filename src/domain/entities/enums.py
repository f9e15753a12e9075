"""
Authorization Server Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserRole(str, Enum):
    """Built-in user role within a tenant"""

    admin = "admin"
    user = "user"


class LoginState(str, Enum):
    """Intermediate steps of the login state machine"""

    password_change = "password_change"
    mfa_setup = "mfa_setup"
    mfa = "mfa"
    authenticated = "authenticated"


class CodeChallengeMethod(str, Enum):
    """PKCE code challenge method"""

    plain = "plain"
    S256 = "S256"


class GrantType(str, Enum):
    """Supported OAuth2 grant types"""

    authorization_code = "authorization_code"
    refresh_token = "refresh_token"
