from uuid import UUID

from libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.session import principal_info

from .dtos import MeResponse


class GetMeUseCase:
    """Profile of the signed-in user"""

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, user_id: UUID) -> Result[MeResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None or not user.is_active:
                return Return.err(Error("UNAUTHORIZED", "Authentication required"))

            return Return.ok(
                MeResponse(**principal_info(user).model_dump(), mfa_enabled=user.mfa_enabled)
            )
