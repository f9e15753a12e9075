import hashlib
from unittest.mock import AsyncMock

import pytest

from src.app.services.email_notifier import IEmailNotifier
from src.app.use_cases.auth.request_password_reset_use_case import (
    RESET_REQUESTED,
    RequestPasswordResetUseCase,
)


@pytest.fixture
def notifier():
    notifier = AsyncMock(spec=IEmailNotifier)
    return notifier


@pytest.fixture
def use_case(mock_uow, notifier):
    return RequestPasswordResetUseCase(mock_uow, "https://auth.acme.com/", 3600, notifier)


@pytest.mark.asyncio
async def test_reset_token_is_stored_hashed_and_emailed(use_case, mock_uow, notifier, tenant, user):
    mock_uow.tenants.get_by_domain.return_value = tenant
    mock_uow.users.get_by_email.return_value = user

    result = await use_case.execute("User@acme.com")

    assert result.value == RESET_REQUESTED
    mock_uow.password_reset_tokens.invalidate_unused_by_user_id.assert_awaited_once_with(user.id)
    stored = mock_uow.password_reset_tokens.create.call_args.args[0]
    message = notifier.send.call_args.args[0]
    assert message.to == "user@acme.com"
    raw_token = message.text.split("reset-password?token=")[1].split()[0]
    assert "https://auth.acme.com/reset-password?token=" in message.text
    assert stored.token_hash == hashlib.sha256(raw_token.encode()).hexdigest()
    assert stored.token_hash != raw_token
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_unknown_email_gets_same_response(use_case, mock_uow, notifier, tenant):
    mock_uow.tenants.get_by_domain.return_value = tenant
    mock_uow.users.get_by_email.return_value = None

    result = await use_case.execute("ghost@acme.com")

    assert result.value == RESET_REQUESTED
    mock_uow.password_reset_tokens.create.assert_not_awaited()
    notifier.send.assert_not_awaited()


@pytest.mark.asyncio
async def test_unknown_tenant_gets_same_response(use_case, mock_uow, notifier):
    mock_uow.tenants.get_by_domain.return_value = None

    result = await use_case.execute("user@nowhere.org")

    assert result.value == RESET_REQUESTED
    notifier.send.assert_not_awaited()


@pytest.mark.asyncio
async def test_mail_failure_does_not_fail_request(use_case, mock_uow, notifier, tenant, user):
    mock_uow.tenants.get_by_domain.return_value = tenant
    mock_uow.users.get_by_email.return_value = user
    notifier.send.side_effect = RuntimeError("smtp down")

    result = await use_case.execute("user@acme.com")

    assert result.value == RESET_REQUESTED
    mock_uow.commit.assert_awaited_once()
