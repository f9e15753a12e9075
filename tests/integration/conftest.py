from typing import List
from uuid import UUID

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.custom_role_repository import CustomRoleRepository
from src.adapter.services.cache import MemoryCache
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.utils.crypto import hash_password
from src.api.utils.jwt import KeyMaterial
from src.app.services.email_notifier import EmailMessage, IEmailNotifier
from src.depends import get_unit_of_work
from src.domain.entities import CustomRole, OAuthClient, Tenant, User, UserRole
from tests.integration.flows import CLIENT_SECRET, DEFAULT_PASSWORD, REDIRECT_URI


class RecordingEmailNotifier(IEmailNotifier):
    def __init__(self):
        self.sent: List[EmailMessage] = []

    async def send(self, message: EmailMessage) -> None:
        self.sent.append(message)


class Seeder:
    """Inserts fixture rows and hands back plain values"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def tenant(self, domain: str = "acme.com", is_active: bool = True) -> str:
        tenant = Tenant(name=domain.split(".")[0].title(), domain=domain, is_active=is_active)
        self.session.add(tenant)
        await self.session.commit()
        return str(tenant.id)

    async def user(
        self,
        tenant_id: str,
        email: str = "user@acme.com",
        password: str = DEFAULT_PASSWORD,
        **fields,
    ) -> str:
        user = User(
            tenant_id=UUID(tenant_id),
            email=email,
            password_hash=hash_password(password),
            name=fields.pop("name", "Test User"),
            role=fields.pop("role", UserRole.user),
            **fields,
        )
        self.session.add(user)
        await self.session.commit()
        return str(user.id)

    async def client(
        self,
        tenant_id: str,
        client_id: str = "acme-web",
        redirect_uris: List[str] = None,
        **fields,
    ) -> str:
        client = OAuthClient(
            client_id=client_id,
            client_secret_hash=hash_password(CLIENT_SECRET),
            name=client_id,
            redirect_uris=redirect_uris or [REDIRECT_URI],
            tenant_id=UUID(tenant_id),
            **fields,
        )
        self.session.add(client)
        await self.session.commit()
        return client_id

    async def custom_role(
        self, tenant_id: str, name: str, permissions: List[dict], *holders: str
    ) -> str:
        repository = CustomRoleRepository(self.session)
        role = await repository.create(
            CustomRole(tenant_id=UUID(tenant_id), name=name, permissions=permissions)
        )
        for user_id in holders:
            await repository.assign(UUID(user_id), role.id)
        await self.session.commit()
        return str(role.id)


@pytest.fixture(scope="session")
def key_material():
    return KeyMaterial.generate()


@pytest.fixture
def email_notifier():
    return RecordingEmailNotifier()


@pytest.fixture
def cache():
    return MemoryCache()


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine("sqlite+aiosqlite:///./test.db")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield session


@pytest_asyncio.fixture
async def seed(engine):
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with Session() as session:
        yield Seeder(session)


@pytest_asyncio.fixture
async def client(db_session, key_material, cache, email_notifier):
    from src.api.app import create_app

    app = create_app(
        ApplicationConfig,
        key_material=key_material,
        cache=cache,
        email_notifier=email_notifier,
    )

    async def override_get_unit_of_work():
        yield SqlAlchemyUnitOfWork(db_session)

    app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
