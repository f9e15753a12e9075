from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.domain.entities import AuthorizationCode


class IAuthorizationCodeRepository(ABC):
    """AuthorizationCode repository interface - application layer"""

    @abstractmethod
    async def get_by_code(self, code: str) -> Optional[AuthorizationCode]:
        """Get authorization code by its value"""
        pass

    @abstractmethod
    async def create(self, code: AuthorizationCode) -> AuthorizationCode:
        """
        Create a new authorization code.

        Raises DuplicateTokenError when the code value already exists.
        """
        pass

    @abstractmethod
    async def mark_used_if_unused(self, code_id: UUID) -> bool:
        """
        Atomically flip used=false to used=true.

        Returns True only for the single caller that performed the flip.
        """
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete expired codes. Returns count deleted."""
        pass
