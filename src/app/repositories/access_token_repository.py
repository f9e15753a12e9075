from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from src.domain.entities import AccessToken


class IAccessTokenRepository(ABC):
    """AccessToken repository interface - application layer"""

    @abstractmethod
    async def get_by_token(self, token: str) -> Optional[AccessToken]:
        """Get token row by its opaque value"""
        pass

    @abstractmethod
    async def create(self, token: AccessToken) -> AccessToken:
        """
        Create a new token row.

        Raises DuplicateTokenError when the token value already exists.
        """
        pass

    @abstractmethod
    async def revoke(self, token_id: UUID) -> bool:
        """Revoke a token. Returns True if it was active."""
        pass

    @abstractmethod
    async def list_active_by_user_id(self, user_id: UUID) -> List[AccessToken]:
        """List non-revoked tokens of a user"""
        pass

    @abstractmethod
    async def revoke_all_by_user_id(self, user_id: UUID) -> int:
        """Revoke all tokens of a user. Returns count revoked."""
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete expired tokens. Returns count deleted."""
        pass
