from datetime import timedelta

import pytest

from src.adapter.services.cache import MemoryCache
from src.app.services.cache import CachedAccessToken, access_token_key
from src.app.use_cases.session import LogoutUseCase
from src.domain.base import utcnow
from src.domain.entities import AccessToken


@pytest.fixture
def cache():
    return MemoryCache()


@pytest.mark.asyncio
async def test_logout_deletes_session_and_revokes_tokens(mock_uow, cache, user):
    active = AccessToken(
        token="jti-1",
        client_id="acme-web",
        user_id=user.id,
        scope=["openid"],
        expires_at=utcnow() + timedelta(hours=1),
    )
    mock_uow.access_tokens.list_active_by_user_id.return_value = [active]
    mock_uow.access_tokens.revoke_all_by_user_id.return_value = 1
    mock_uow.refresh_tokens.revoke_all_by_user_id.return_value = 1
    await cache.set(access_token_key("jti-1"), "{}", 60)

    result = await LogoutUseCase(mock_uow, cache).execute("session-token", user.id)

    assert result.is_ok()
    mock_uow.sessions.delete_by_token.assert_awaited_once_with("session-token")
    mock_uow.access_tokens.revoke_all_by_user_id.assert_awaited_once_with(user.id)
    mock_uow.refresh_tokens.revoke_all_by_user_id.assert_awaited_once_with(user.id)
    assert mock_uow.commit.await_count == 2
    cached = CachedAccessToken.model_validate_json(await cache.get(access_token_key("jti-1")))
    assert cached.revoked is True


@pytest.mark.asyncio
async def test_revocation_failure_is_reported(mock_uow, cache, user):
    mock_uow.access_tokens.list_active_by_user_id.return_value = []
    mock_uow.refresh_tokens.revoke_all_by_user_id.side_effect = RuntimeError("database down")

    result = await LogoutUseCase(mock_uow, cache).execute("session-token", user.id)

    assert result.error.code == "TOKEN_REVOCATION_FAILED"
    mock_uow.sessions.delete_by_token.assert_awaited_once_with("session-token")
    assert mock_uow.commit.await_count == 1
