import hashlib
from datetime import timedelta

import pytest

from src.adapter.services.cache import MemoryCache
from src.api.utils.crypto import verify_password
from src.app.services.cache import CachedAccessToken, access_token_key
from src.app.use_cases.auth.confirm_password_reset_use_case import ConfirmPasswordResetUseCase
from src.domain.base import utcnow
from src.domain.entities import AccessToken, PasswordResetToken

RAW_TOKEN = "raw-reset-token"


@pytest.fixture
def reset_token(user):
    return PasswordResetToken(
        user_id=user.id,
        token_hash=hashlib.sha256(RAW_TOKEN.encode()).hexdigest(),
        expires_at=utcnow() + timedelta(hours=1),
    )


@pytest.fixture
def cache():
    return MemoryCache()


@pytest.fixture
def use_case(mock_uow, cache, user, reset_token):
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = reset_token
    mock_uow.users.get_by_id.return_value = user
    mock_uow.access_tokens.list_active_by_user_id.return_value = []
    return ConfirmPasswordResetUseCase(mock_uow, cache)


@pytest.mark.asyncio
async def test_reset_password(use_case, mock_uow, cache, user, reset_token):
    user.require_password_change = True
    active = AccessToken(
        token="jti-1",
        client_id="acme-web",
        user_id=user.id,
        scope=["openid"],
        expires_at=utcnow() + timedelta(hours=1),
    )
    mock_uow.access_tokens.list_active_by_user_id.return_value = [active]
    await cache.set(access_token_key("jti-1"), "{}", 60)

    result = await use_case.execute(RAW_TOKEN, "BrandNewPass456!")

    assert result.value.status == "success"
    assert verify_password("BrandNewPass456!", user.password_hash)
    assert user.require_password_change is False
    assert reset_token.used is True
    mock_uow.sessions.delete_all_by_user_id.assert_awaited_once_with(user.id)
    mock_uow.access_tokens.revoke_all_by_user_id.assert_awaited_once_with(user.id)
    mock_uow.refresh_tokens.revoke_all_by_user_id.assert_awaited_once_with(user.id)
    mock_uow.commit.assert_awaited_once()
    cached = CachedAccessToken.model_validate_json(await cache.get(access_token_key("jti-1")))
    assert cached.revoked is True


@pytest.mark.asyncio
async def test_policy_is_checked_before_token(use_case, mock_uow):
    result = await use_case.execute(RAW_TOKEN, "weak")

    assert result.error.code == "PASSWORD_POLICY_VIOLATION"
    mock_uow.password_reset_tokens.get_by_token_hash.assert_not_awaited()


@pytest.mark.asyncio
async def test_token_errors(use_case, mock_uow, reset_token):
    mock_uow.password_reset_tokens.get_by_token_hash.return_value = None
    unknown = await use_case.execute("other", "BrandNewPass456!")

    mock_uow.password_reset_tokens.get_by_token_hash.return_value = reset_token
    reset_token.expires_at = utcnow() - timedelta(seconds=1)
    expired = await use_case.execute(RAW_TOKEN, "BrandNewPass456!")

    reset_token.used = True
    used = await use_case.execute(RAW_TOKEN, "BrandNewPass456!")

    assert unknown.error.code == "INVALID_TOKEN"
    assert expired.error.code == "TOKEN_EXPIRED"
    assert used.error.code == "TOKEN_ALREADY_USED"
    mock_uow.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_inactive_user(use_case, user):
    user.is_active = False

    result = await use_case.execute(RAW_TOKEN, "BrandNewPass456!")

    assert result.error.code == "INVALID_TOKEN"
