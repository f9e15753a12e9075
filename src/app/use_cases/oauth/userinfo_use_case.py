"""
UserInfo Use Case

OpenID Connect UserInfo for a bearer access token.
"""

import logging
from typing import Optional
from uuid import UUID

from pydantic import ValidationError

from libs.result import Error, Result, Return
from src.api.utils.jwt import JwtService, TokenVerificationError
from src.app.services.cache import (
    CachedAccessToken,
    ICache,
    access_token_key,
    cached_access_token,
    remaining_seconds,
)
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow

from .dtos import UserInfoResponse
from .errors import INVALID_TOKEN

logger = logging.getLogger(__name__)


class UserInfoUseCase:
    """
    Use case for GET /oauth/userinfo.

    Business Rules:
    - The token row is found through the JWT's jti, read through the cache
    - Missing, revoked and expired rows are rejected before the signature
      is checked
    - Signature and issuer are verified independently of the row
    - Claims are released by scope: email -> email, email_verified;
      profile -> name, picture
    """

    def __init__(self, uow: UnitOfWork, jwt_service: JwtService, cache: ICache, cache_ttl: int):
        self.uow = uow
        self.jwt_service = jwt_service
        self.cache = cache
        self.cache_ttl = cache_ttl

    async def _load_token(self, jti: str) -> Optional[CachedAccessToken]:
        key = access_token_key(jti)
        cached = await self.cache.get(key)
        if cached is not None:
            try:
                return CachedAccessToken.model_validate_json(cached)
            except ValidationError:
                logger.warning(f"Discarding malformed cache entry {key}")
                await self.cache.delete(key)

        row = await self.uow.access_tokens.get_by_token(jti)
        if row is None:
            return None

        entry = cached_access_token(row)
        # add, not set: a revocation marker written meanwhile must win
        ttl = min(self.cache_ttl, remaining_seconds(row.expires_at))
        if not row.revoked and ttl > 0:
            await self.cache.add(key, entry.model_dump_json(), ttl)
        return entry

    async def execute(self, bearer_token: Optional[str]) -> Result[UserInfoResponse]:
        """
        Errors:
            - invalid_token: Missing, malformed, revoked, expired or badly
              signed token, or inactive user
        """
        if not bearer_token:
            return Return.err(Error(INVALID_TOKEN, "Missing or invalid authorization header"))

        try:
            jti = self.jwt_service.unverified_claims(bearer_token).get("jti")
        except TokenVerificationError:
            return Return.err(Error(INVALID_TOKEN, "Malformed access token"))
        if not isinstance(jti, str) or not jti:
            return Return.err(Error(INVALID_TOKEN, "Malformed access token"))

        async with self.uow:
            entry = await self._load_token(jti)
            if entry is None or entry.revoked:
                return Return.err(Error(INVALID_TOKEN, "Token not found or revoked"))
            if entry.expires_at < utcnow():
                return Return.err(Error(INVALID_TOKEN, "Token expired"))

            try:
                self.jwt_service.verify(bearer_token)
            except TokenVerificationError:
                return Return.err(Error(INVALID_TOKEN, "Invalid token signature"))

            user = await self.uow.users.get_by_id(UUID(entry.user_id))
            if user is None or not user.is_active:
                return Return.err(Error(INVALID_TOKEN, "Token not found or revoked"))

            response = UserInfoResponse(sub=str(user.id), tenant_id=str(user.tenant_id))
            if "email" in entry.scope:
                response.email = user.email
                response.email_verified = user.email_verified_at is not None
            if "profile" in entry.scope:
                response.name = user.name
                response.picture = user.image
            return Return.ok(response)
