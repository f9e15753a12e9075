from typing import Optional

from fastapi import Depends, Request, status
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from libs.result import Error
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.api.utils.jwt import JwtService
from src.api.utils.session import SessionCodec
from src.app.services.cache import ICache
from src.app.services.email_notifier import IEmailNotifier
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.session import Principal
from src.domain.base import utcnow

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


async def get_unit_of_work():
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


def get_config(request: Request):
    return request.app.state.config


def get_jwt_service(request: Request) -> JwtService:
    return request.app.state.jwt_service


def get_session_codec(request: Request) -> SessionCodec:
    return request.app.state.session_codec


def get_cache(request: Request) -> ICache:
    return request.app.state.cache


def get_email_notifier(request: Request) -> IEmailNotifier:
    return request.app.state.email_notifier


async def get_current_user(
    request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    codec: SessionCodec = Depends(get_session_codec),
    config=Depends(get_config),
) -> Optional[Principal]:
    """
    Resolve the signed-in user from the session cookie.

    The cookie is honoured only while its Session row exists, has not
    expired and belongs to the user named in the cookie.

    Returns:
        Principal, or None when there is no valid session
    """
    payload = codec.decode(request.cookies.get(config.SESSION_COOKIE_NAME))
    if payload is None:
        return None

    async with uow:
        session = await uow.sessions.get_by_token(payload.sid)
        if (
            session is None
            or session.expires_at < utcnow()
            or str(session.user_id) != payload.userId
        ):
            return None

        return Principal(
            user_id=session.user_id,
            tenant_id=session.tenant_id,
            email=payload.email,
            name=payload.name,
            role=payload.role,
            session_token=session.session_token,
        )


async def require_current_user(
    principal: Optional[Principal] = Depends(get_current_user),
) -> Principal:
    """
    Dependency for endpoints that need a signed-in user.

    Raises:
        ClientError: 401 if there is no valid session
    """
    if principal is None:
        raise ClientError(
            Error("UNAUTHORIZED", "Authentication required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )
    return principal
