"""
Token Use Case

POST /oauth/token: client authentication and grant dispatch.
"""

import logging

from libs.result import Error, Result, Return
from src.api.utils.jwt import JwtService
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import GrantType

from .authorization_code_grant import AuthorizationCodeGrant
from .client_authentication import authenticate_client
from .dtos import TokenRequest, TokenResponse
from .errors import INVALID_REQUEST, UNAUTHORIZED_CLIENT, UNSUPPORTED_GRANT_TYPE
from .refresh_token_grant import RefreshTokenGrant
from .token_minter import TokenMinter

logger = logging.getLogger(__name__)


class TokenUseCase:
    """
    Use case for the token endpoint.

    Business Rules:
    - Client credentials are verified before anything else
    - Only authorization_code and refresh_token are supported
    - The client must be registered for the requested grant type
    - All rows written by a grant are committed together
    """

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

    async def execute(self, request: TokenRequest) -> Result[TokenResponse]:
        """
        Errors:
            - invalid_client: Client authentication failed
            - invalid_request: grant_type or a grant parameter missing
            - unsupported_grant_type: Unknown grant type
            - unauthorized_client: Client not registered for the grant
            - invalid_grant: Code or refresh token rejected
        """
        async with self.uow:
            authenticated = await authenticate_client(
                self.uow, request.client_id, request.client_secret
            )
            if authenticated.is_err():
                return authenticated
            client = authenticated.value

            if not request.grant_type:
                return Return.err(Error(INVALID_REQUEST, "Missing grant_type"))

            minter = TokenMinter(
                self.uow, self.jwt_service, self.access_token_expiry, self.refresh_token_expiry
            )
            if request.grant_type == GrantType.authorization_code.value:
                grant = AuthorizationCodeGrant(self.uow, minter)
            elif request.grant_type == GrantType.refresh_token.value:
                grant = RefreshTokenGrant(self.uow, minter)
            else:
                return Return.err(Error(UNSUPPORTED_GRANT_TYPE, "Grant type not supported"))

            if request.grant_type not in (client.grant_types or []):
                return Return.err(
                    Error(UNAUTHORIZED_CLIENT, "Client is not allowed to use this grant type")
                )

            result = await grant.execute(client, request)
            if result.is_err():
                return result

            await self.uow.commit()
            logger.info(f"Issued tokens to client {client.client_id} via {request.grant_type}")
            return result
