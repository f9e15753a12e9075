"""
List Application Users Use Case

Distribution lists for client applications: the users of the client's
tenant that hold a custom role or a permission.
"""

import logging
from typing import List

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.oauth.client_authentication import authenticate_client
from src.app.use_cases.oauth.errors import INVALID_REQUEST
from src.domain.entities import CustomRole

from .dtos import ApplicationUser, ApplicationUsersResponse, UsersQuery

logger = logging.getLogger(__name__)


def grants_permission(role: CustomRole, permission: str, application_id: str = None) -> bool:
    for entry in role.permissions or []:
        if application_id and entry.get("clientId") != application_id:
            continue
        if permission in (p.lower() for p in entry.get("permissions", [])):
            return True
    return False


class ListApplicationUsersUseCase:
    """
    Use case for POST /applications/users.

    Business Rules:
    - The client authenticates with its id and secret
    - Only users of the client's own tenant are returned, active ones only
    - role matches a custom role name, case-insensitively
    - permission matches case-insensitively, optionally only within the
      entries of one application (clientId)
    - role wins when both are given
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, query: UsersQuery) -> Result[ApplicationUsersResponse]:
        """
        Errors:
            - invalid_client: Client authentication failed
            - invalid_request: Neither role nor permission given
        """
        async with self.uow:
            authenticated = await authenticate_client(
                self.uow, query.client_id, query.client_secret
            )
            if authenticated.is_err():
                return authenticated
            client = authenticated.value

            if not query.role and not query.permission:
                return Return.err(
                    Error(INVALID_REQUEST, "Either 'role' or 'permission' must be provided")
                )

            roles = await self.uow.custom_roles.list_by_tenant(client.tenant_id)
            if query.role:
                wanted = query.role.strip().lower()
                matched: List[CustomRole] = [r for r in roles if r.name.lower() == wanted]
            else:
                permission = query.permission.strip().lower()
                matched = [
                    r for r in roles if grants_permission(r, permission, query.application_id)
                ]

            users = []
            if matched:
                users = await self.uow.users.list_active_by_custom_roles(
                    client.tenant_id, [role.id for role in matched]
                )

            listed = [
                ApplicationUser(id=str(user.id), email=user.email, name=user.name)
                for user in users
            ]
            logger.info(f"Client {client.client_id} listed {len(listed)} users")
            return Return.ok(ApplicationUsersResponse(users=listed, count=len(listed)))
