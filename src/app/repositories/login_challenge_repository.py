from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from src.domain.entities import LoginChallenge


class ILoginChallengeRepository(ABC):
    """LoginChallenge repository interface - application layer"""

    @abstractmethod
    async def get_by_token(self, token: str) -> Optional[LoginChallenge]:
        """Get login challenge by its correlation token"""
        pass

    @abstractmethod
    async def create(self, challenge: LoginChallenge) -> LoginChallenge:
        """
        Create a new login challenge.

        Raises DuplicateTokenError when the token already exists.
        """
        pass

    @abstractmethod
    async def update(self, challenge: LoginChallenge) -> LoginChallenge:
        """Update existing login challenge"""
        pass

    @abstractmethod
    async def delete(self, challenge: LoginChallenge) -> None:
        """Delete a login challenge"""
        pass

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete expired challenges. Returns count deleted."""
        pass
