"""
Refresh token grant (RFC 6749 section 6)

Refresh tokens are not rotated: the response carries a new access token
only, and the same refresh token stays valid until it expires or is revoked.
"""

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import OAuthClient

from .dtos import TokenRequest, TokenResponse
from .errors import INVALID_GRANT, INVALID_REQUEST
from .token_minter import TokenMinter


class RefreshTokenGrant:
    def __init__(self, uow: UnitOfWork, minter: TokenMinter):
        self.uow = uow
        self.minter = minter

    async def execute(self, client: OAuthClient, request: TokenRequest) -> Result[TokenResponse]:
        """
        Errors:
            - invalid_request: refresh_token missing
            - invalid_grant: unknown, revoked, foreign or expired token, or
              inactive user
        """
        if not request.refresh_token:
            return Return.err(Error(INVALID_REQUEST, "Missing refresh_token"))

        row = await self.uow.refresh_tokens.get_by_token(request.refresh_token)
        if row is None or row.revoked or row.client_id != client.client_id:
            return Return.err(Error(INVALID_GRANT, "Invalid refresh token"))

        if row.expires_at < utcnow():
            return Return.err(Error(INVALID_GRANT, "Refresh token expired"))

        user = await self.uow.users.get_by_id(row.user_id)
        if user is None or not user.is_active or user.tenant_id != client.tenant_id:
            return Return.err(Error(INVALID_GRANT, "User is not active"))

        scope = list(row.scope or [])
        custom_roles = await self.minter.custom_role_claims(user, client)
        access_token = await self.minter.mint_access_token(user, client, scope, custom_roles)

        return Return.ok(
            TokenResponse(
                access_token=access_token,
                expires_in=self.minter.access_token_expiry,
                scope=" ".join(scope),
            )
        )
