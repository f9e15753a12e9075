"""
Token minting

Access tokens are RS256 JWTs whose jti is the opaque key of a server-side
AccessToken row; revocation and expiry are decided by that row. Refresh
tokens are opaque strings stored as-is.
"""

from datetime import timedelta
from typing import List, Optional

from src.api.utils.jwt import (
    AccessTokenClaims,
    CustomRoleClaim,
    IdTokenClaims,
    JwtService,
    PermissionClaim,
)
from src.app.services.token_persistence import persist_with_unique_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AccessToken, OAuthClient, RefreshToken, User

REFRESH_TOKEN_BYTES = 48


class TokenMinter:
    def __init__(
        self,
        uow: UnitOfWork,
        jwt_service: JwtService,
        access_token_expiry: int,
        refresh_token_expiry: int,
    ):
        self.uow = uow
        self.jwt_service = jwt_service
        self.access_token_expiry = access_token_expiry
        self.refresh_token_expiry = refresh_token_expiry

    async def custom_role_claims(
        self, user: User, client: OAuthClient
    ) -> Optional[List[CustomRoleClaim]]:
        """
        Custom roles of the user, narrowed to permissions granted for this client.

        None when the user has no custom roles, so the claim is omitted.
        """
        roles = await self.uow.custom_roles.get_by_user_id(user.id)
        if not roles:
            return None
        return [
            CustomRoleClaim(
                id=str(role.id),
                name=role.name,
                permissions=[
                    PermissionClaim(**entry)
                    for entry in role.permissions or []
                    if entry.get("clientId") == client.client_id
                ],
            )
            for role in roles
        ]

    async def mint_access_token(
        self,
        user: User,
        client: OAuthClient,
        scope: List[str],
        custom_roles: Optional[List[CustomRoleClaim]] = None,
    ) -> str:
        """Persist an AccessToken row and return the signed JWT carrying its key as jti"""
        expires_at = utcnow() + timedelta(seconds=self.access_token_expiry)
        row = await persist_with_unique_token(
            lambda token: AccessToken(
                token=token,
                client_id=client.client_id,
                user_id=user.id,
                scope=scope,
                expires_at=expires_at,
            ),
            self.uow.access_tokens.create,
        )
        claims = AccessTokenClaims(
            sub=str(user.id),
            tenant_id=str(user.tenant_id),
            client_id=client.client_id,
            scope=scope,
            email=user.email,
            name=user.name,
            role=user.role.value,
            custom_roles=custom_roles,
        )
        return self.jwt_service.sign_access_token(
            claims, audience=client.client_id, expires_in=self.access_token_expiry, jti=row.token
        )

    async def mint_refresh_token(self, user: User, client: OAuthClient, scope: List[str]) -> str:
        expires_at = utcnow() + timedelta(seconds=self.refresh_token_expiry)
        row = await persist_with_unique_token(
            lambda token: RefreshToken(
                token=token,
                client_id=client.client_id,
                user_id=user.id,
                scope=scope,
                expires_at=expires_at,
            ),
            self.uow.refresh_tokens.create,
            byte_length=REFRESH_TOKEN_BYTES,
        )
        return row.token

    def mint_id_token(
        self,
        user: User,
        client: OAuthClient,
        nonce: Optional[str] = None,
        custom_roles: Optional[List[CustomRoleClaim]] = None,
    ) -> str:
        claims = IdTokenClaims(
            sub=str(user.id),
            tenant_id=str(user.tenant_id),
            email=user.email,
            email_verified=user.email_verified_at is not None,
            name=user.name,
            picture=user.image,
            role=user.role.value,
            custom_roles=custom_roles,
        )
        return self.jwt_service.sign_id_token(claims, audience=client.client_id, nonce=nonce)
