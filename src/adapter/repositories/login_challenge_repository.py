from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import delete, select
from sqlmodel.ext.asyncio.session import AsyncSession

from src.app.repositories.errors import DuplicateTokenError
from src.app.repositories.login_challenge_repository import ILoginChallengeRepository
from src.domain.entities import LoginChallenge


class LoginChallengeRepository(ILoginChallengeRepository):
    """LoginChallenge repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_token(self, token: str) -> Optional[LoginChallenge]:
        stmt = select(LoginChallenge).where(LoginChallenge.token == token)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    async def create(self, challenge: LoginChallenge) -> LoginChallenge:
        try:
            async with self.session.begin_nested():
                self.session.add(challenge)
        except IntegrityError as exc:
            raise DuplicateTokenError("Login challenge token already exists") from exc
        await self.session.refresh(challenge)
        return challenge

    async def update(self, challenge: LoginChallenge) -> LoginChallenge:
        self.session.add(challenge)
        await self.session.flush()
        await self.session.refresh(challenge)
        return challenge

    async def delete(self, challenge: LoginChallenge) -> None:
        await self.session.delete(challenge)
        await self.session.flush()

    async def delete_expired(self, now: datetime) -> int:
        stmt = delete(LoginChallenge).where(LoginChallenge.expires_at < now)
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount
