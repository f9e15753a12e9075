"""
Authorization code grant (RFC 6749 section 4.1.3, RFC 7636)
"""

import logging

from libs.result import Error, Result, Return
from src.api.utils.crypto import InvalidInputError, verify_pkce
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import OAuthClient

from .dtos import TokenRequest, TokenResponse
from .errors import INVALID_GRANT, INVALID_REQUEST
from .token_minter import TokenMinter

logger = logging.getLogger(__name__)


class AuthorizationCodeGrant:
    """
    Redeems an authorization code.

    Business Rules:
    - Checks in order: code found, unused and issued to this client; not
      expired; redirect_uri identical; PKCE verifier; user still active in
      the client's tenant
    - The code is then flipped to used with a conditional update; only the
      request that wins that update mints tokens
    - An ID token is issued only when openid was granted
    """

    def __init__(self, uow: UnitOfWork, minter: TokenMinter):
        self.uow = uow
        self.minter = minter

    async def execute(self, client: OAuthClient, request: TokenRequest) -> Result[TokenResponse]:
        if not request.code or not request.redirect_uri:
            return Return.err(Error(INVALID_REQUEST, "Missing code or redirect_uri"))

        auth_code = await self.uow.authorization_codes.get_by_code(request.code)
        if auth_code is None or auth_code.used or auth_code.client_id != client.client_id:
            return Return.err(Error(INVALID_GRANT, "Invalid authorization code"))

        if auth_code.expires_at < utcnow():
            return Return.err(Error(INVALID_GRANT, "Authorization code expired"))

        if auth_code.redirect_uri != request.redirect_uri:
            return Return.err(Error(INVALID_GRANT, "Redirect URI mismatch"))

        if auth_code.code_challenge:
            if not request.code_verifier:
                return Return.err(Error(INVALID_REQUEST, "Missing code_verifier"))
            try:
                pkce_valid = verify_pkce(
                    request.code_verifier,
                    auth_code.code_challenge,
                    auth_code.code_challenge_method or "plain",
                )
            except InvalidInputError:
                pkce_valid = False
            if not pkce_valid:
                return Return.err(Error(INVALID_GRANT, "Invalid PKCE code_verifier"))

        user = await self.uow.users.get_by_id(auth_code.user_id)
        if user is None or not user.is_active or user.tenant_id != client.tenant_id:
            return Return.err(Error(INVALID_GRANT, "User is not active"))

        if not await self.uow.authorization_codes.mark_used_if_unused(auth_code.id):
            logger.warning(f"Authorization code {auth_code.id} redeemed concurrently")
            return Return.err(Error(INVALID_GRANT, "Invalid authorization code"))

        scope = list(auth_code.scope or [])
        custom_roles = await self.minter.custom_role_claims(user, client)
        access_token = await self.minter.mint_access_token(user, client, scope, custom_roles)
        refresh_token = await self.minter.mint_refresh_token(user, client, scope)
        id_token = None
        if "openid" in scope:
            id_token = self.minter.mint_id_token(user, client, auth_code.nonce, custom_roles)

        return Return.ok(
            TokenResponse(
                access_token=access_token,
                expires_in=self.minter.access_token_expiry,
                refresh_token=refresh_token,
                scope=" ".join(scope),
                id_token=id_token,
            )
        )
