import asyncio
from datetime import timedelta
from uuid import UUID

import pytest
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.authorization_code_repository import AuthorizationCodeRepository
from src.adapter.repositories.user_repository import UserRepository
from src.domain.base import utcnow
from src.domain.entities import AuthorizationCode
from tests.integration.flows import REDIRECT_URI

BACKUP_CODES = ["A1B2C3D4", "E5F6A7B8"]


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.mark.asyncio
async def test_concurrent_code_redemption_has_one_winner(seed, session_factory):
    tenant_id = await seed.tenant()
    user_id = await seed.user(tenant_id)
    async with session_factory() as session:
        code = AuthorizationCode(
            code="concurrent-code",
            client_id="acme-web",
            user_id=UUID(user_id),
            redirect_uri=REDIRECT_URI,
            scope=["openid"],
            expires_at=utcnow() + timedelta(minutes=10),
        )
        session.add(code)
        await session.commit()
        code_id = code.id

    async def redeem() -> bool:
        async with session_factory() as session:
            won = await AuthorizationCodeRepository(session).mark_used_if_unused(code_id)
            await session.commit()
            return won

    outcomes = await asyncio.gather(redeem(), redeem(), redeem())

    assert sorted(outcomes) == [False, False, True]
    async with session_factory() as session:
        stored = await AuthorizationCodeRepository(session).get_by_code("concurrent-code")
        assert stored.used is True


@pytest.mark.asyncio
async def test_concurrent_backup_code_use_has_one_winner(seed, session_factory):
    tenant_id = await seed.tenant()
    user_id = await seed.user(
        tenant_id, mfa_enabled=True, mfa_secret="JBSWY3DPEHPK3PXP", mfa_backup_codes=BACKUP_CODES
    )

    first = session_factory()
    second = session_factory()
    async with first, second:
        # both contenders hold the same snapshot before either consumes
        contenders = [
            (session, await UserRepository(session).get_by_id(UUID(user_id)))
            for session in (first, second)
        ]

        async def consume(session, user) -> bool:
            used = await UserRepository(session).consume_backup_code(user, "A1B2C3D4")
            await session.commit()
            return used

        outcomes = await asyncio.gather(*(consume(s, u) for s, u in contenders))

    assert sorted(outcomes) == [False, True]
    async with session_factory() as session:
        user = await UserRepository(session).get_by_id(UUID(user_id))
        assert user.mfa_backup_codes == ["E5F6A7B8"]
