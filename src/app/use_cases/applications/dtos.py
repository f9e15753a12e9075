"""
Application API DTOs

Machine-to-machine requests made by registered clients about the users of
their tenant, and client provisioning.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.app.use_cases.oauth.dtos import split_scope


class ClientCredentials(BaseModel):
    """Credentials from the body, or copied in from a Basic header"""

    client_id: Optional[str] = None
    client_secret: Optional[str] = None


class UsersQuery(ClientCredentials):
    """Users holding a custom role (by name) or a permission"""

    model_config = ConfigDict(populate_by_name=True)

    role: Optional[str] = None
    permission: Optional[str] = None
    application_id: Optional[str] = Field(default=None, alias="applicationId")


class UserQuery(ClientCredentials):
    model_config = ConfigDict(populate_by_name=True)

    sub: Optional[str] = None
    application_id: Optional[str] = Field(default=None, alias="applicationId")


class ApplicationUser(BaseModel):
    id: str
    email: str
    name: Optional[str] = None


class ApplicationUsersResponse(BaseModel):
    users: List[ApplicationUser]
    count: int


class ApplicationUserDetail(ApplicationUser):
    image: Optional[str] = None


class ApplicationUserResponse(BaseModel):
    user: ApplicationUserDetail


class RegisterClientCommand(BaseModel):
    tenant_domain: str
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1024)
    redirect_uris: List[str] = Field(min_length=1)
    allowed_scopes: List[str] = Field(default_factory=lambda: ["openid", "profile", "email"])
    grant_types: List[str] = Field(
        default_factory=lambda: ["authorization_code", "refresh_token"]
    )

    @field_validator("allowed_scopes", mode="before")
    @classmethod
    def scopes_from_string(cls, value):
        if isinstance(value, str):
            return split_scope(value)
        return value

    @field_validator("grant_types")
    @classmethod
    def supported_grant_types(cls, value: List[str]) -> List[str]:
        unsupported = set(value) - {"authorization_code", "refresh_token"}
        if unsupported:
            raise ValueError(f"Unsupported grant types: {', '.join(sorted(unsupported))}")
        return value

    @field_validator("redirect_uris")
    @classmethod
    def absolute_redirect_uris(cls, value: List[str]) -> List[str]:
        for uri in value:
            if not uri.startswith(("https://", "http://")):
                raise ValueError(f"redirect_uri must be an absolute URL: {uri}")
        return value


class RegisteredClient(BaseModel):
    """The only response that ever carries the plaintext client secret"""

    client_id: str
    client_secret: str
    name: str
    tenant_id: str
    redirect_uris: List[str]
    allowed_scopes: List[str]
    grant_types: List[str]
