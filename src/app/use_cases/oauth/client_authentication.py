from typing import Optional

from libs.result import Error, Result, Return
from src.api.utils.crypto import burn_password_check, verify_password
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import OAuthClient

from .errors import INVALID_CLIENT


async def authenticate_client(
    uow: UnitOfWork, client_id: Optional[str], client_secret: Optional[str]
) -> Result[OAuthClient]:
    """
    Verify client credentials against the stored bcrypt hash.

    Unknown clients still pay for a bcrypt check so that response time does
    not reveal which client ids exist.
    """
    if not client_id or not client_secret:
        return Return.err(Error(INVALID_CLIENT, "Client authentication required"))

    client = await uow.oauth_clients.get_by_client_id(client_id)
    if client is None:
        burn_password_check()
        return Return.err(Error(INVALID_CLIENT, "Client not found or inactive"))

    if not verify_password(client_secret, client.client_secret_hash):
        return Return.err(Error(INVALID_CLIENT, "Invalid client credentials"))

    if not client.is_active:
        return Return.err(Error(INVALID_CLIENT, "Client not found or inactive"))

    return Return.ok(client)
