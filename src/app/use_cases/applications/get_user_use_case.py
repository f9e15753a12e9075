"""
Get Application User Use Case

Profile lookup by subject id for client applications.
"""

from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.oauth.client_authentication import authenticate_client
from src.app.use_cases.oauth.errors import INVALID_REQUEST

from .dtos import ApplicationUserDetail, ApplicationUserResponse, UserQuery

USER_NOT_FOUND = Error("not_found", "User not found")


class GetApplicationUserUseCase:
    """
    Use case for POST /applications/users/byId.

    A user of another tenant, an inactive user and a malformed sub all read
    as not found.
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, query: UserQuery) -> Result[ApplicationUserResponse]:
        async with self.uow:
            authenticated = await authenticate_client(
                self.uow, query.client_id, query.client_secret
            )
            if authenticated.is_err():
                return authenticated
            client = authenticated.value

            if not query.sub:
                return Return.err(Error(INVALID_REQUEST, "sub is required"))
            try:
                user_id = UUID(query.sub)
            except ValueError:
                return Return.err(USER_NOT_FOUND)

            user = await self.uow.users.get_by_id(user_id)
            if user is None or user.tenant_id != client.tenant_id or not user.is_active:
                return Return.err(USER_NOT_FOUND)

            return Return.ok(
                ApplicationUserResponse(
                    user=ApplicationUserDetail(
                        id=str(user.id), email=user.email, name=user.name, image=user.image
                    )
                )
            )
