"""
Register Client Use Case

Provisions a confidential client application inside a tenant.
"""

import logging

from libs.result import Result, Return
from src.api.utils.crypto import generate_client_credentials, hash_password
from src.app.services.tenant_resolver import TenantResolver
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import OAuthClient

from .dtos import RegisterClientCommand, RegisteredClient

logger = logging.getLogger(__name__)


class RegisterClientUseCase:
    """
    Business Rules:
    - client_id and client_secret are generated, never chosen by the caller
    - Only the bcrypt hash of the secret is stored; the plaintext is
      returned once
    - The tenant must exist and be active
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, command: RegisterClientCommand) -> Result[RegisteredClient]:
        """
        Errors:
            - TENANT_NOT_FOUND / TENANT_INACTIVE
        """
        async with self.uow:
            tenant_result = await TenantResolver(self.uow.tenants).resolve(command.tenant_domain)
            if tenant_result.is_err():
                return tenant_result
            tenant = tenant_result.value

            client_id, client_secret = generate_client_credentials()
            client = await self.uow.oauth_clients.create(
                OAuthClient(
                    client_id=client_id,
                    client_secret_hash=hash_password(client_secret),
                    name=command.name,
                    description=command.description,
                    redirect_uris=command.redirect_uris,
                    allowed_scopes=command.allowed_scopes,
                    grant_types=command.grant_types,
                    tenant_id=tenant.id,
                )
            )
            registered = RegisteredClient(
                client_id=client.client_id,
                client_secret=client_secret,
                name=client.name,
                tenant_id=str(client.tenant_id),
                redirect_uris=list(client.redirect_uris),
                allowed_scopes=list(client.allowed_scopes),
                grant_types=list(client.grant_types),
            )
            await self.uow.commit()

        logger.info(f"Registered client {registered.client_id} in tenant {registered.tenant_id}")
        return Return.ok(registered)
