from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import bcrypt
import pytest

from src.domain.entities import OAuthClient, Tenant, User

PASSWORD = "SecurePass123!"
# Cost 4 keeps unit tests fast; verify_password reads the cost from the hash
PASSWORD_HASH = bcrypt.hashpw(PASSWORD.encode(), bcrypt.gensalt(4)).decode()

REPOSITORIES = (
    "tenants",
    "users",
    "custom_roles",
    "oauth_clients",
    "authorization_codes",
    "access_tokens",
    "refresh_tokens",
    "sessions",
    "login_challenges",
    "trusted_devices",
    "user_consents",
    "password_reset_tokens",
)


async def echo(entity):
    return entity


@pytest.fixture
def mock_uow():
    """Mock UnitOfWork; every repository method is awaitable, create/update echo"""
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    for name in REPOSITORIES:
        repository = AsyncMock()
        repository.create = AsyncMock(side_effect=echo)
        repository.update = AsyncMock(side_effect=echo)
        setattr(uow, name, repository)

    return uow


@pytest.fixture
def tenant():
    return Tenant(id=uuid4(), name="Acme", domain="acme.com", is_active=True)


@pytest.fixture
def user(tenant):
    return User(
        id=uuid4(),
        tenant_id=tenant.id,
        email="user@acme.com",
        password_hash=PASSWORD_HASH,
        name="Test User",
    )


@pytest.fixture
def oauth_client(tenant):
    return OAuthClient(
        client_id="acme-web",
        client_secret_hash=PASSWORD_HASH,
        name="Acme Web",
        redirect_uris=["https://app.acme.com/callback"],
        tenant_id=tenant.id,
    )
