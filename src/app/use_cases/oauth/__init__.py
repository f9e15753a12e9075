"""
OAuth Use Cases

Authorization, consent, token issuance, userinfo and revocation.
"""

from .authorize_use_case import AuthorizeUseCase
from .consent_use_case import ConsentUseCase
from .dtos import (
    AuthorizationRequest,
    AuthorizeOutcome,
    ConsentRequest,
    ConsentResponse,
    RevokeRequest,
    TokenRequest,
    TokenResponse,
    UserInfoResponse,
)
from .revoke_token_use_case import RevokeTokenUseCase
from .token_use_case import TokenUseCase
from .userinfo_use_case import UserInfoUseCase

__all__ = [
    "AuthorizeUseCase",
    "ConsentUseCase",
    "TokenUseCase",
    "UserInfoUseCase",
    "RevokeTokenUseCase",
    "AuthorizationRequest",
    "AuthorizeOutcome",
    "ConsentRequest",
    "ConsentResponse",
    "RevokeRequest",
    "TokenRequest",
    "TokenResponse",
    "UserInfoResponse",
]
