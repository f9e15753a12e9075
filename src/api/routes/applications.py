"""
Application API

Client-authenticated lookups of the users in the client's tenant. Clients
send credentials with HTTP Basic or client_id/client_secret in the body.
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from libs.result import Error
from src.api.error import OAuthError
from src.api.routes.oauth import NO_STORE_HEADERS, client_request_params, first_validation_message
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.applications import (
    ApplicationUserResponse,
    ApplicationUsersResponse,
    GetApplicationUserUseCase,
    ListApplicationUsersUseCase,
    UserQuery,
    UsersQuery,
)
from src.depends import get_unit_of_work

router = APIRouter(prefix="/applications", tags=["Applications"])

ERROR_STATUS = {
    "invalid_client": status.HTTP_401_UNAUTHORIZED,
    "not_found": status.HTTP_404_NOT_FOUND,
}


def raise_application_error(error: Error):
    raise OAuthError(
        error.code,
        error.message,
        status_code=ERROR_STATUS.get(error.code, status.HTTP_400_BAD_REQUEST),
    )


async def parse_query(request: Request, model):
    params = await client_request_params(request)
    try:
        return model.model_validate(params)
    except ValidationError as exc:
        raise OAuthError("invalid_request", first_validation_message(exc))


@router.post("/users", response_model=ApplicationUsersResponse)
async def list_users(request: Request, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Users by custom role or permission

    Body: role or permission, optional applicationId to narrow permission
    matching to one client's entries.

    Raises:
        - 400 Bad Request: invalid_request
        - 401 Unauthorized: invalid_client
    """
    query = await parse_query(request, UsersQuery)
    result = await ListApplicationUsersUseCase(uow).execute(query)
    if result.is_err():
        raise_application_error(result.error)
    return JSONResponse(
        content=result.value.model_dump(exclude_none=True), headers=NO_STORE_HEADERS
    )


@router.post("/users/byId", response_model=ApplicationUserResponse)
async def get_user(request: Request, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    User profile by subject id

    Raises:
        - 400 Bad Request: invalid_request
        - 401 Unauthorized: invalid_client
        - 404 Not Found: no such active user in the client's tenant
    """
    query = await parse_query(request, UserQuery)
    result = await GetApplicationUserUseCase(uow).execute(query)
    if result.is_err():
        raise_application_error(result.error)
    return JSONResponse(content=result.value.model_dump(), headers=NO_STORE_HEADERS)
