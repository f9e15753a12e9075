from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from src.domain.entities import Session


class ISessionRepository(ABC):
    """Session repository interface - application layer"""

    @abstractmethod
    async def get_by_token(self, session_token: str) -> Optional[Session]:
        """Get session by its token"""
        pass

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """
        Create a new session.

        Raises DuplicateTokenError when the session token already exists.
        """
        pass

    @abstractmethod
    async def delete_by_token(self, session_token: str) -> bool:
        """Delete a session. Returns True if it existed."""
        pass

    @abstractmethod
    async def delete_all_by_user_id(self, user_id: UUID) -> int:
        """Delete all sessions of a user. Returns count deleted."""
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete expired sessions. Returns count deleted."""
        pass
