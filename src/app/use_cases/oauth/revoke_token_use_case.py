"""
Revoke Token Use Case

Token revocation endpoint (RFC 7009).
"""

import logging
from typing import Optional, Tuple

from libs.result import Error, Result, Return
from src.api.utils.jwt import JwtService, TokenVerificationError
from src.app.services.cache import ICache, revocation_marker, write_revocation_markers
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import OAuthClient

from .client_authentication import authenticate_client
from .dtos import RevokeRequest
from .errors import INVALID_REQUEST

logger = logging.getLogger(__name__)


class RevokeTokenUseCase:
    """
    Use case for POST /oauth/revoke.

    Business Rules:
    - The client must authenticate
    - A refresh token or an access token (identified by its jti) may be revoked
    - Tokens issued to another client, unknown tokens and already revoked
      tokens are silently ignored; the response is the same in every case
    """

    def __init__(self, uow: UnitOfWork, cache: ICache):
        self.uow = uow
        self.cache = cache

    async def _revoke_refresh_token(self, client: OAuthClient, token: str) -> bool:
        row = await self.uow.refresh_tokens.get_by_token(token)
        if row is None or row.client_id != client.client_id:
            return False
        await self.uow.refresh_tokens.revoke(row.id)
        return True

    async def _revoke_access_token(
        self, client: OAuthClient, token: str
    ) -> Optional[Tuple[str, str, int]]:
        """Revoke the row behind an access JWT and return its cache marker"""
        try:
            jti = JwtService.unverified_claims(token).get("jti")
        except TokenVerificationError:
            return None
        if not isinstance(jti, str) or not jti:
            return None

        row = await self.uow.access_tokens.get_by_token(jti)
        if row is None or row.client_id != client.client_id:
            return None
        marker = revocation_marker(row)
        await self.uow.access_tokens.revoke(row.id)
        return marker

    async def execute(self, request: RevokeRequest) -> Result[None]:
        """
        Errors:
            - invalid_client: Client authentication failed
            - invalid_request: token parameter missing
        """
        marker = None
        async with self.uow:
            authenticated = await authenticate_client(
                self.uow, request.client_id, request.client_secret
            )
            if authenticated.is_err():
                return authenticated
            client = authenticated.value

            if not request.token:
                return Return.err(Error(INVALID_REQUEST, "Missing token"))

            if request.token_type_hint == "access_token":
                marker = await self._revoke_access_token(client, request.token)
                if marker is None:
                    await self._revoke_refresh_token(client, request.token)
            elif not await self._revoke_refresh_token(client, request.token):
                marker = await self._revoke_access_token(client, request.token)

            await self.uow.commit()

        if marker is not None:
            await write_revocation_markers(self.cache, [marker])
            logger.info("Access token revoked")
        return Return.ok(None)
