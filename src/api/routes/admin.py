"""
Admin API Routes - Maintenance and Provisioning Endpoints

Called by the scheduler that runs out-of-band jobs and by provisioning
scripts. Authentication is via Admin API Key, not user sessions.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from src.api.error import ClientError, ServerError
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.applications import (
    RegisterClientCommand,
    RegisteredClient,
    RegisterClientUseCase,
)
from src.app.use_cases.maintenance import CleanupExpiredUseCase, CleanupResponse
from src.depends import get_unit_of_work

router = APIRouter(prefix="/admin", tags=["Admin"])

ERROR_STATUS = {
    "TENANT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "TENANT_INACTIVE": status.HTTP_403_FORBIDDEN,
}


@router.post(
    "/cleanup",
    status_code=status.HTTP_200_OK,
    response_model=CleanupResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def cleanup_expired(uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Cleanup Expired Rows

    Deletes expired authorization codes, tokens, sessions, login challenges,
    trusted devices and password reset tokens. Safe to run repeatedly.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 500 Internal Server Error: Server error
    """
    result = await CleanupExpiredUseCase(uow).execute()

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.post(
    "/clients",
    status_code=status.HTTP_201_CREATED,
    response_model=RegisteredClient,
    dependencies=[Depends(verify_admin_api_key)],
)
async def register_client(
    command: RegisterClientCommand, uow: UnitOfWork = Depends(get_unit_of_work)
):
    """
    Register Client

    Creates a confidential client in the tenant owning tenant_domain. The
    generated client_secret is in this response only.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
        - 403 Forbidden: Tenant inactive
        - 404 Not Found: Tenant not found
        - 422 Unprocessable Entity: Invalid redirect URIs or grant types
    """
    result = await RegisterClientUseCase(uow).execute(command)

    if result.is_err():
        status_code = ERROR_STATUS.get(result.error.code)
        if status_code is None:
            raise ServerError(result.error)
        raise ClientError(result.error, status_code)

    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=result.value.model_dump(),
        headers={"Cache-Control": "no-store"},
    )
