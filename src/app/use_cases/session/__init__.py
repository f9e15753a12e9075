from .create_session_use_case import CreateSessionUseCase
from .dtos import IssuedSession, Principal, PrincipalInfo, principal_info
from .logout_use_case import LogoutUseCase

__all__ = [
    "CreateSessionUseCase",
    "LogoutUseCase",
    "IssuedSession",
    "Principal",
    "PrincipalInfo",
    "principal_info",
]
