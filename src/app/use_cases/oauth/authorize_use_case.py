"""
Authorize Use Case

Validates an authorization request for a signed-in user and decides whether
the consent screen is needed.
"""

import logging

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.session import Principal

from .client_validation import validate_authorization_request
from .code_issuance import code_redirect, issue_authorization_code
from .dtos import AuthorizationRequest, AuthorizeOutcome
from .urls import with_query

logger = logging.getLogger(__name__)


class AuthorizeUseCase:
    """
    Use case for GET /oauth/authorize.

    Business Rules:
    - Client is looked up in the session's tenant only
    - Validation errors are returned, never redirected to the unverified URI
    - A stored consent covering every requested scope skips the consent
      screen and mints the code immediately
    """

    def __init__(self, uow: UnitOfWork, base_url: str, code_expiry: int):
        self.uow = uow
        self.base_url = base_url.rstrip("/")
        self.code_expiry = code_expiry

    async def execute(
        self, request: AuthorizationRequest, principal: Principal
    ) -> Result[AuthorizeOutcome]:
        """
        Errors:
            - invalid_client: Unknown or inactive client in this tenant
            - invalid_request: redirect_uri not registered
            - invalid_scope: Scope not allowed for the client
            - unauthorized_client: Client may not use this grant
        """
        async with self.uow:
            validated = await validate_authorization_request(
                self.uow, request, principal.tenant_id
            )
            if validated.is_err():
                return validated

            consent = await self.uow.user_consents.get_by_user_and_client(
                principal.user_id, request.client_id
            )
            if consent is not None and all(scope in consent.scope for scope in request.scopes):
                code = await issue_authorization_code(
                    self.uow, request, principal.user_id, self.code_expiry
                )
                location = code_redirect(request, code.code)
                await self.uow.commit()
                logger.info(
                    f"Consent auto-approved for user {principal.user_id} "
                    f"and client {request.client_id}"
                )
                return Return.ok(AuthorizeOutcome(action="redirect", location=location))

        params = request.model_dump(mode="json", exclude_none=True)
        return Return.ok(
            AuthorizeOutcome(
                action="consent", location=with_query(f"{self.base_url}/consent", params)
            )
        )
