from datetime import timedelta
from uuid import UUID

from src.app.services.token_persistence import persist_with_unique_token
from src.app.services.unit_of_work import UnitOfWork
from src.domain.base import utcnow
from src.domain.entities import AuthorizationCode

from .dtos import AuthorizationRequest
from .urls import with_query

CODE_BYTES = 32  # 43 URL-safe characters


async def issue_authorization_code(
    uow: UnitOfWork, request: AuthorizationRequest, user_id: UUID, expiry: int
) -> AuthorizationCode:
    """Mint a single-use code bound to client, user, redirect_uri, PKCE and nonce"""
    expires_at = utcnow() + timedelta(seconds=expiry)
    return await persist_with_unique_token(
        lambda code: AuthorizationCode(
            code=code,
            client_id=request.client_id,
            user_id=user_id,
            redirect_uri=request.redirect_uri,
            scope=request.scopes,
            nonce=request.nonce,
            code_challenge=request.code_challenge,
            code_challenge_method=(
                request.code_challenge_method.value if request.code_challenge_method else None
            ),
            expires_at=expires_at,
        ),
        uow.authorization_codes.create,
        byte_length=CODE_BYTES,
    )


def code_redirect(request: AuthorizationRequest, code: str) -> str:
    return with_query(request.redirect_uri, {"code": code, "state": request.state})
