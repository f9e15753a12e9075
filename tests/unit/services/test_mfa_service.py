from datetime import timedelta

import pytest

from src.api.utils.totp import generate_totp
from src.app.services.mfa_service import MfaService, device_identifier
from src.domain.base import utcnow
from src.domain.entities import MfaTrustedDevice

SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


@pytest.fixture
def service(mock_uow):
    return MfaService(mock_uow, issuer="PrismAuth")


@pytest.fixture
def mfa_user(user):
    user.mfa_enabled = True
    user.mfa_secret = SECRET
    user.mfa_backup_codes = ["AAAA1111", "BBBB2222"]
    return user


@pytest.mark.asyncio
async def test_begin_setup(service, mock_uow, user):
    result = await service.begin_setup(user)

    data = result.value
    assert len(data.backup_codes) == 10
    assert len(set(data.backup_codes)) == 10
    assert all(len(code) == 8 for code in data.backup_codes)
    assert all(set(code) <= set("0123456789ABCDEF") for code in data.backup_codes)
    assert "PrismAuth" in data.otpauth_uri
    assert user.mfa_secret == data.secret
    assert user.mfa_enabled is False
    mock_uow.users.update.assert_awaited_once_with(user)


@pytest.mark.asyncio
async def test_begin_setup_when_enabled(service, mfa_user):
    result = await service.begin_setup(mfa_user)

    assert result.error.code == "ALREADY_ENABLED"


@pytest.mark.asyncio
async def test_complete_setup(service, user):
    user.mfa_secret = SECRET
    user.require_mfa_setup = True

    result = await service.complete_setup(user, generate_totp(SECRET))

    assert result.is_ok()
    assert user.mfa_enabled is True
    assert user.require_mfa_setup is False


@pytest.mark.asyncio
async def test_complete_setup_errors(service, user):
    not_started = await service.complete_setup(user, "123456")
    user.mfa_secret = SECRET
    wrong = await service.complete_setup(user, "12345")

    assert not_started.error.code == "MFA_NOT_INITIATED"
    assert wrong.error.code == "INVALID_CODE"
    assert user.mfa_enabled is False


@pytest.mark.asyncio
async def test_verify_with_totp(service, mock_uow, mfa_user):
    result = await service.verify_login(mfa_user, generate_totp(SECRET))

    assert result.is_ok()
    mock_uow.users.consume_backup_code.assert_not_awaited()


@pytest.mark.asyncio
async def test_verify_with_backup_code_consumes_it(service, mock_uow, mfa_user):
    mock_uow.users.consume_backup_code.return_value = True

    result = await service.verify_login(mfa_user, " bbbb2222 ")

    assert result.is_ok()
    mock_uow.users.consume_backup_code.assert_awaited_once_with(mfa_user, "BBBB2222")


@pytest.mark.asyncio
async def test_backup_code_lost_race(service, mock_uow, mfa_user):
    mock_uow.users.consume_backup_code.return_value = False

    result = await service.verify_login(mfa_user, "AAAA1111")

    assert result.error.code == "INVALID_CODE"


@pytest.mark.asyncio
async def test_verify_when_not_enabled(service, user):
    result = await service.verify_login(user, "123456")

    assert result.error.code == "MFA_NOT_ENABLED"


@pytest.mark.asyncio
async def test_disable(service, mock_uow, mfa_user):
    result = await service.disable(mfa_user, generate_totp(SECRET))

    assert result.is_ok()
    assert mfa_user.mfa_enabled is False
    assert mfa_user.mfa_secret is None
    assert mfa_user.mfa_backup_codes == []
    mock_uow.trusted_devices.delete_all_by_user_id.assert_awaited_once_with(mfa_user.id)


@pytest.mark.asyncio
async def test_trust_device_creates_then_extends(service, mock_uow, user):
    mock_uow.trusted_devices.get_by_user_and_device.return_value = None

    created = await service.trust_device(user, "browser", "10.0.0.1")

    assert created.device_identifier == device_identifier("browser", "10.0.0.1")
    assert created.expires_at > utcnow() + timedelta(days=29)

    created.expires_at = utcnow() + timedelta(days=1)
    mock_uow.trusted_devices.get_by_user_and_device.return_value = created

    extended = await service.trust_device(user, "browser", "10.0.0.1")

    assert extended.expires_at > utcnow() + timedelta(days=29)
    mock_uow.trusted_devices.update.assert_awaited_once()


@pytest.mark.asyncio
async def test_expired_trusted_device_is_not_trusted(service, mock_uow, user):
    mock_uow.trusted_devices.get_by_user_and_device.return_value = MfaTrustedDevice(
        user_id=user.id,
        device_identifier=device_identifier("browser", "10.0.0.1"),
        expires_at=utcnow() - timedelta(seconds=1),
    )

    assert not await service.is_trusted_device(user, "browser", "10.0.0.1")


def test_device_identifier_depends_on_agent_and_ip():
    assert device_identifier("a", "1") == device_identifier("a", "1")
    assert device_identifier("a", "1") != device_identifier("a", "2")
    assert device_identifier("a", "1") != device_identifier("b", "1")
