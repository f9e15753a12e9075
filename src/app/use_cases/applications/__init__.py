"""
Application Use Cases

Client-authenticated user lookups and client provisioning.
"""

from .dtos import (
    ApplicationUserResponse,
    ApplicationUsersResponse,
    RegisterClientCommand,
    RegisteredClient,
    UserQuery,
    UsersQuery,
)
from .get_user_use_case import GetApplicationUserUseCase
from .list_users_use_case import ListApplicationUsersUseCase
from .register_client_use_case import RegisterClientUseCase

__all__ = [
    "ListApplicationUsersUseCase",
    "GetApplicationUserUseCase",
    "RegisterClientUseCase",
    "ApplicationUserResponse",
    "ApplicationUsersResponse",
    "RegisterClientCommand",
    "RegisteredClient",
    "UserQuery",
    "UsersQuery",
]
