"""
OAuth 2.0 / OpenID Connect protocol endpoints

Errors are rendered as RFC 6749 error objects through OAuthError.
"""

import base64
import binascii
from typing import Optional
from urllib.parse import unquote, urlencode

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from pydantic import ValidationError

from libs.result import Error
from src.api.error import OAuthError
from src.api.utils.jwt import JwtService
from src.app.services.cache import ICache
from src.app.services.token_persistence import TokenGenerationError
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.oauth import (
    AuthorizationRequest,
    AuthorizeUseCase,
    ConsentRequest,
    ConsentResponse,
    ConsentUseCase,
    RevokeRequest,
    RevokeTokenUseCase,
    TokenRequest,
    TokenUseCase,
    UserInfoUseCase,
)
from src.app.use_cases.session import Principal
from src.depends import get_cache, get_config, get_current_user, get_jwt_service, get_unit_of_work

router = APIRouter(prefix="/oauth", tags=["OAuth"])

NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}

ERROR_STATUS = {
    "invalid_client": status.HTTP_401_UNAUTHORIZED,
    "invalid_token": status.HTTP_401_UNAUTHORIZED,
    "server_error": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def raise_oauth_error(error: Error, status_code: Optional[int] = None):
    # Front-channel endpoints answer every validation failure with 400
    if status_code is None:
        status_code = ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST)
    headers = None
    if error.code == "invalid_token":
        headers = {"WWW-Authenticate": 'Bearer error="invalid_token"'}
    raise OAuthError(error.code, error.message, status_code=status_code, headers=headers)


def first_validation_message(exc: ValidationError) -> str:
    errors = exc.errors()
    return errors[0].get("msg", "Invalid request") if errors else "Invalid request"


async def read_params(request: Request) -> dict:
    """Form-encoded or JSON request body as a flat dict"""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise OAuthError("invalid_request", "Malformed JSON body")
        if not isinstance(body, dict):
            raise OAuthError("invalid_request", "Request body must be an object")
        return body
    form = await request.form()
    return {key: value for key, value in form.items() if isinstance(value, str)}


def basic_credentials(request: Request) -> tuple[Optional[str], Optional[str]]:
    """client_id and client_secret from an HTTP Basic Authorization header"""
    header = request.headers.get("authorization", "")
    scheme, _, encoded = header.partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return None, None
    try:
        decoded = base64.b64decode(encoded, validate=True).decode()
    except (binascii.Error, UnicodeDecodeError):
        raise OAuthError(
            "invalid_client", "Malformed Basic credentials", status.HTTP_401_UNAUTHORIZED
        )
    client_id, separator, client_secret = decoded.partition(":")
    if not separator:
        raise OAuthError(
            "invalid_client", "Malformed Basic credentials", status.HTTP_401_UNAUTHORIZED
        )
    return unquote(client_id), unquote(client_secret)


async def client_request_params(request: Request) -> dict:
    params = await read_params(request)
    client_id, client_secret = basic_credentials(request)
    if client_id is not None:
        params["client_id"] = client_id
        params["client_secret"] = client_secret
    return params


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


@router.get("/authorize")
async def authorize(
    request: Request,
    principal: Optional[Principal] = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    config=Depends(get_config),
):
    """
    Authorization endpoint (authorization code flow with PKCE)

    Unauthenticated users are sent to the login page with a returnTo back
    here. Otherwise redirects to the consent page, or straight back to the
    client with a code when consent was already granted.

    Raises:
        - 400 Bad Request: invalid_request, invalid_client, invalid_scope,
          unauthorized_client
    """
    try:
        auth_request = AuthorizationRequest.model_validate(dict(request.query_params))
    except ValidationError as exc:
        raise OAuthError("invalid_request", first_validation_message(exc))

    if principal is None:
        login_url = f"{config.BASE_URL.rstrip('/')}/login?" + urlencode(
            {"returnTo": str(request.url)}
        )
        return RedirectResponse(login_url, status_code=status.HTTP_302_FOUND)

    use_case = AuthorizeUseCase(uow, config.BASE_URL, config.AUTHORIZATION_CODE_EXPIRY)
    result = await use_case.execute(auth_request, principal)

    if result.is_err():
        raise_oauth_error(result.error, status.HTTP_400_BAD_REQUEST)

    return RedirectResponse(result.value.location, status_code=status.HTTP_302_FOUND)


@router.post("/consent", status_code=status.HTTP_200_OK, response_model=ConsentResponse)
async def consent(
    body: ConsentRequest,
    principal: Optional[Principal] = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    config=Depends(get_config),
):
    """
    Record the user's consent decision

    Returns the client redirect URI carrying either a code or
    error=access_denied, plus the original state.
    """
    if principal is None:
        raise OAuthError(
            "invalid_request", "Authentication required", status.HTTP_401_UNAUTHORIZED
        )

    result = await ConsentUseCase(uow, config.AUTHORIZATION_CODE_EXPIRY).execute(body, principal)

    if result.is_err():
        raise_oauth_error(result.error, status.HTTP_400_BAD_REQUEST)

    return result.value


@router.post("/token", status_code=status.HTTP_200_OK)
async def token(
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    jwt_service: JwtService = Depends(get_jwt_service),
    config=Depends(get_config),
):
    """
    Token endpoint

    Supports authorization_code (with PKCE) and refresh_token grants.
    Client credentials come from the body or HTTP Basic.

    Raises:
        - 400 Bad Request: invalid_request, invalid_grant,
          unsupported_grant_type, unauthorized_client
        - 401 Unauthorized: invalid_client
        - 500 Internal Server Error: server_error
    """
    try:
        token_request = TokenRequest.model_validate(await client_request_params(request))
    except ValidationError as exc:
        raise OAuthError("invalid_request", first_validation_message(exc))

    use_case = TokenUseCase(
        uow, jwt_service, config.ACCESS_TOKEN_EXPIRY, config.REFRESH_TOKEN_EXPIRY
    )
    try:
        result = await use_case.execute(token_request)
    except TokenGenerationError as exc:
        raise OAuthError("server_error", str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)

    if result.is_err():
        raise_oauth_error(result.error)

    return JSONResponse(
        content=result.value.model_dump(exclude_none=True), headers=NO_STORE_HEADERS
    )


@router.api_route("/userinfo", methods=["GET", "POST"])
async def userinfo(
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    jwt_service: JwtService = Depends(get_jwt_service),
    cache: ICache = Depends(get_cache),
    config=Depends(get_config),
):
    """
    OpenID Connect UserInfo endpoint

    Raises:
        - 401 Unauthorized: invalid_token
    """
    use_case = UserInfoUseCase(uow, jwt_service, cache, config.CACHE_TTL)
    result = await use_case.execute(bearer_token(request))

    if result.is_err():
        raise_oauth_error(result.error)

    return JSONResponse(content=result.value.model_dump(exclude_none=True))


@router.post("/revoke", status_code=status.HTTP_200_OK)
async def revoke(
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    cache: ICache = Depends(get_cache),
):
    """
    Token revocation (RFC 7009)

    Returns 200 with an empty body for unknown and already revoked tokens.

    Raises:
        - 400 Bad Request: invalid_request
        - 401 Unauthorized: invalid_client
    """
    try:
        revoke_request = RevokeRequest.model_validate(await client_request_params(request))
    except ValidationError as exc:
        raise OAuthError("invalid_request", first_validation_message(exc))

    result = await RevokeTokenUseCase(uow, cache).execute(revoke_request)

    if result.is_err():
        raise_oauth_error(result.error)

    return Response(status_code=status.HTTP_200_OK, headers=NO_STORE_HEADERS)
