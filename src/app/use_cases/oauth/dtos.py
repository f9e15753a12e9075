"""
OAuth Use Case DTOs (Data Transfer Objects)

Request and response shapes of the protocol endpoints.
"""

from typing import List, Literal, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator, model_validator

from src.domain.entities import CodeChallengeMethod

DEFAULT_SCOPE = "openid profile email"


def split_scope(scope: Optional[str]) -> List[str]:
    return [item for item in (scope or "").split(" ") if item]


# ============================================================================
# Command DTOs
# ============================================================================


class AuthorizationRequest(BaseModel):
    """Validated parameters of an authorization request"""

    response_type: Literal["code"]
    client_id: str = Field(..., min_length=1)
    redirect_uri: str = Field(..., min_length=1)
    scope: str = DEFAULT_SCOPE
    state: Optional[str] = None
    code_challenge: Optional[str] = None
    code_challenge_method: Optional[CodeChallengeMethod] = None
    nonce: Optional[str] = None

    @field_validator("redirect_uri")
    @classmethod
    def redirect_uri_is_absolute_url(cls, value: str) -> str:
        parts = urlsplit(value)
        if not parts.scheme or not parts.netloc:
            raise ValueError("redirect_uri must be an absolute URL")
        return value

    @field_validator("scope")
    @classmethod
    def scope_not_empty(cls, value: str) -> str:
        if not split_scope(value):
            raise ValueError("scope must not be empty")
        return value

    @model_validator(mode="after")
    def challenge_method_needs_challenge(self):
        if self.code_challenge_method is not None and not self.code_challenge:
            raise ValueError("code_challenge_method requires code_challenge")
        if self.code_challenge and self.code_challenge_method is None:
            self.code_challenge_method = CodeChallengeMethod.plain
        return self

    @property
    def scopes(self) -> List[str]:
        return split_scope(self.scope)


class ConsentRequest(AuthorizationRequest):
    response_type: Literal["code"] = "code"
    approved: bool


class TokenRequest(BaseModel):
    """Token endpoint body (JSON or form) merged with HTTP Basic credentials"""

    grant_type: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    code: Optional[str] = None
    redirect_uri: Optional[str] = None
    code_verifier: Optional[str] = None
    refresh_token: Optional[str] = None


class RevokeRequest(BaseModel):
    token: Optional[str] = None
    token_type_hint: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class AuthorizeOutcome(BaseModel):
    """Where to send the browser after a valid authorization request"""

    action: Literal["consent", "redirect"]
    location: str


class ConsentResponse(BaseModel):
    redirect_uri: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int
    refresh_token: Optional[str] = None
    scope: str
    id_token: Optional[str] = None


class UserInfoResponse(BaseModel):
    sub: str
    tenant_id: str
    email: Optional[str] = None
    email_verified: Optional[bool] = None
    name: Optional[str] = None
    picture: Optional[str] = None
