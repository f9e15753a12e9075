"""
Consent Use Case

Records the user's decision and mints the authorization code.
"""

import logging

from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.session import Principal
from src.domain.entities import UserConsent

from .client_validation import validate_authorization_request
from .code_issuance import code_redirect, issue_authorization_code
from .dtos import ConsentRequest, ConsentResponse
from .errors import ACCESS_DENIED
from .urls import with_query

logger = logging.getLogger(__name__)


class ConsentUseCase:
    """
    Use case for POST /oauth/consent.

    Business Rules:
    - The request is re-validated against the client before anything is
      redirected, including on denial
    - Denial returns access_denied to the client's redirect_uri
    - Approval upserts the stored consent and mints a code
    """

    def __init__(self, uow: UnitOfWork, code_expiry: int):
        self.uow = uow
        self.code_expiry = code_expiry

    async def execute(self, request: ConsentRequest, principal: Principal) -> Result[ConsentResponse]:
        async with self.uow:
            validated = await validate_authorization_request(
                self.uow, request, principal.tenant_id
            )
            if validated.is_err():
                return validated

            if not request.approved:
                logger.info(f"User {principal.user_id} denied client {request.client_id}")
                return Return.ok(
                    ConsentResponse(
                        redirect_uri=with_query(
                            request.redirect_uri,
                            {
                                "error": ACCESS_DENIED,
                                "error_description": "User denied authorization",
                                "state": request.state,
                            },
                        )
                    )
                )

            consent = await self.uow.user_consents.get_by_user_and_client(
                principal.user_id, request.client_id
            )
            if consent is None:
                await self.uow.user_consents.create(
                    UserConsent(
                        user_id=principal.user_id,
                        client_id=request.client_id,
                        scope=request.scopes,
                    )
                )
            else:
                consent.scope = request.scopes
                await self.uow.user_consents.update(consent)

            code = await issue_authorization_code(
                self.uow, request, principal.user_id, self.code_expiry
            )
            location = code_redirect(request, code.code)
            await self.uow.commit()

        return Return.ok(ConsentResponse(redirect_uri=location))
