from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel

from src.domain.base import utcnow
from src.domain.entities import AccessToken


class ICache(ABC):
    """Key/value cache with per-entry TTL - application layer"""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Get a cached value, None on miss"""
        pass

    @abstractmethod
    async def set(self, key: str, value: str, ttl: int) -> None:
        """Store a value for ttl seconds, replacing any existing entry"""
        pass

    @abstractmethod
    async def add(self, key: str, value: str, ttl: int) -> bool:
        """Store a value only if the key is absent; True when stored"""
        pass

    @abstractmethod
    async def delete(self, *keys: str) -> None:
        """Remove keys; missing keys are ignored"""
        pass


class CachedAccessToken(BaseModel):
    """Access token row as stored in the cache"""

    token: str
    user_id: str
    client_id: str
    scope: List[str]
    revoked: bool
    expires_at: datetime


def access_token_key(token: str) -> str:
    return f"oauth:access_token:{token}"


def cached_access_token(row: AccessToken) -> CachedAccessToken:
    return CachedAccessToken(
        token=row.token,
        user_id=str(row.user_id),
        client_id=row.client_id,
        scope=list(row.scope or []),
        revoked=row.revoked,
        expires_at=row.expires_at,
    )


def remaining_seconds(expires_at: datetime) -> int:
    return int((expires_at - utcnow()).total_seconds())


def revocation_marker(row: AccessToken) -> Tuple[str, str, int]:
    """
    Cache entry pinning an access token as revoked until it expires.

    Built from the row while its session is open; written after commit so a
    concurrent read-through cannot re-cache the token as valid.
    """
    entry = cached_access_token(row)
    entry.revoked = True
    ttl = remaining_seconds(row.expires_at) + 1
    return access_token_key(row.token), entry.model_dump_json(), ttl


async def write_revocation_markers(cache: ICache, markers: List[Tuple[str, str, int]]) -> None:
    for key, value, ttl in markers:
        await cache.set(key, value, ttl)
