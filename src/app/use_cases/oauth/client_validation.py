"""Checks shared by the authorization and consent endpoints"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import GrantType, OAuthClient

from .dtos import AuthorizationRequest
from .errors import (
    INVALID_CLIENT,
    INVALID_REQUEST,
    INVALID_SCOPE,
    UNAUTHORIZED_CLIENT,
)


async def validate_authorization_request(
    uow: UnitOfWork, request: AuthorizationRequest, tenant_id: UUID
) -> Result[OAuthClient]:
    """
    Resolve the client in the caller's tenant and check the request against it.

    Order: client exists and is active, redirect_uri is registered (exact
    string match), every requested scope is allowed.
    """
    client = await uow.oauth_clients.get_by_client_id_and_tenant(request.client_id, tenant_id)
    if client is None or not client.is_active:
        return Return.err(Error(INVALID_CLIENT, "Client not found or inactive"))

    if request.redirect_uri not in (client.redirect_uris or []):
        return Return.err(Error(INVALID_REQUEST, "Invalid redirect URI"))

    allowed = client.allowed_scopes or []
    invalid_scopes = [scope for scope in request.scopes if scope not in allowed]
    if invalid_scopes:
        return Return.err(
            Error(INVALID_SCOPE, f"Invalid scopes: {', '.join(invalid_scopes)}")
        )

    if GrantType.authorization_code.value not in (client.grant_types or []):
        return Return.err(
            Error(UNAUTHORIZED_CLIENT, "Client is not allowed to use the authorization code grant")
        )

    return Return.ok(client)
