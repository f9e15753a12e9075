from datetime import timedelta
from uuid import uuid4

import pytest

from src.api.utils.crypto import s256_challenge
from src.api.utils.jwt import JwtService, KeyMaterial
from src.app.use_cases.oauth import TokenRequest, TokenUseCase
from src.domain.base import utcnow
from src.domain.entities import AuthorizationCode, RefreshToken
from tests.unit.conftest import PASSWORD

VERIFIER = "dBjftJeZ4CVP-mJ0zTRiUwrRLrSY1nbf7gWI3hqEwM"
REDIRECT_URI = "https://app.acme.com/callback"


@pytest.fixture(scope="module")
def jwt_service():
    return JwtService(KeyMaterial.generate(), issuer="https://auth.acme.com")


@pytest.fixture
def auth_code(user):
    return AuthorizationCode(
        code="the-code",
        client_id="acme-web",
        user_id=user.id,
        redirect_uri=REDIRECT_URI,
        scope=["openid", "email"],
        nonce="nonce-1",
        code_challenge=s256_challenge(VERIFIER),
        code_challenge_method="S256",
        expires_at=utcnow() + timedelta(minutes=5),
    )


@pytest.fixture
def use_case(mock_uow, jwt_service, oauth_client, user, auth_code):
    mock_uow.oauth_clients.get_by_client_id.return_value = oauth_client
    mock_uow.authorization_codes.get_by_code.return_value = auth_code
    mock_uow.authorization_codes.mark_used_if_unused.return_value = True
    mock_uow.users.get_by_id.return_value = user
    mock_uow.custom_roles.get_by_user_id.return_value = []
    return TokenUseCase(mock_uow, jwt_service, access_token_expiry=3600, refresh_token_expiry=86400)


def code_request(**overrides):
    data = {
        "grant_type": "authorization_code",
        "client_id": "acme-web",
        "client_secret": PASSWORD,
        "code": "the-code",
        "redirect_uri": REDIRECT_URI,
        "code_verifier": VERIFIER,
    }
    data.update(overrides)
    return TokenRequest(**data)


@pytest.mark.asyncio
async def test_code_exchange_issues_tokens(use_case, mock_uow, jwt_service, user, auth_code):
    result = await use_case.execute(code_request())

    assert result.is_ok()
    response = result.value
    assert response.token_type == "Bearer"
    assert response.expires_in == 3600
    assert response.scope == "openid email"
    assert response.refresh_token

    access_row = mock_uow.access_tokens.create.call_args.args[0]
    claims = jwt_service.verify(response.access_token, audience="acme-web")
    assert claims["jti"] == access_row.token
    assert claims["sub"] == str(user.id)
    assert "custom_roles" not in claims
    assert jwt_service.verify(response.id_token)["nonce"] == "nonce-1"

    mock_uow.authorization_codes.mark_used_if_unused.assert_awaited_once_with(auth_code.id)
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_no_id_token_without_openid(use_case, auth_code):
    auth_code.scope = ["email"]

    result = await use_case.execute(code_request())

    assert result.value.id_token is None


@pytest.mark.asyncio
async def test_concurrent_redemption_loser_gets_invalid_grant(use_case, mock_uow):
    mock_uow.authorization_codes.mark_used_if_unused.return_value = False

    result = await use_case.execute(code_request())

    assert result.error.code == "invalid_grant"
    mock_uow.access_tokens.create.assert_not_awaited()
    mock_uow.refresh_tokens.create.assert_not_awaited()
    mock_uow.commit.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "mutate, overrides, code",
    [
        (lambda c: setattr(c, "used", True), {}, "invalid_grant"),
        (lambda c: setattr(c, "client_id", "other"), {}, "invalid_grant"),
        (lambda c: setattr(c, "expires_at", utcnow() - timedelta(seconds=1)), {}, "invalid_grant"),
        (None, {"redirect_uri": "https://app.acme.com/other"}, "invalid_grant"),
        (None, {"code_verifier": "x" * 43}, "invalid_grant"),
        (None, {"code_verifier": None}, "invalid_request"),
        (None, {"code": None}, "invalid_request"),
    ],
)
async def test_code_rejections(use_case, mock_uow, auth_code, mutate, overrides, code):
    if mutate:
        mutate(auth_code)

    result = await use_case.execute(code_request(**overrides))

    assert result.error.code == code
    mock_uow.authorization_codes.mark_used_if_unused.assert_not_awaited()


@pytest.mark.asyncio
async def test_user_of_another_tenant(use_case, user):
    user.tenant_id = uuid4()

    result = await use_case.execute(code_request())

    assert result.error.code == "invalid_grant"


@pytest.mark.asyncio
async def test_client_authentication_comes_first(use_case, mock_uow):
    result = await use_case.execute(code_request(client_secret="wrong", grant_type="password"))

    assert result.error.code == "invalid_client"
    mock_uow.authorization_codes.get_by_code.assert_not_awaited()


@pytest.mark.asyncio
async def test_inactive_client(use_case, oauth_client):
    oauth_client.is_active = False

    result = await use_case.execute(code_request())

    assert result.error.code == "invalid_client"


@pytest.mark.asyncio
async def test_grant_type_checks(use_case, oauth_client):
    missing = await use_case.execute(code_request(grant_type=None))
    unsupported = await use_case.execute(code_request(grant_type="client_credentials"))
    oauth_client.grant_types = ["authorization_code"]
    unauthorized = await use_case.execute(code_request(grant_type="refresh_token"))

    assert missing.error.code == "invalid_request"
    assert unsupported.error.code == "unsupported_grant_type"
    assert unauthorized.error.code == "unauthorized_client"


@pytest.mark.asyncio
async def test_refresh_grant(use_case, mock_uow, user):
    mock_uow.refresh_tokens.get_by_token.return_value = RefreshToken(
        token="refresh-1",
        client_id="acme-web",
        user_id=user.id,
        scope=["openid", "profile"],
        expires_at=utcnow() + timedelta(days=1),
    )

    result = await use_case.execute(
        TokenRequest(
            grant_type="refresh_token",
            refresh_token="refresh-1",
            client_id="acme-web",
            client_secret=PASSWORD,
        )
    )

    assert result.value.refresh_token is None
    assert result.value.id_token is None
    assert result.value.scope == "openid profile"
    mock_uow.refresh_tokens.create.assert_not_awaited()
    mock_uow.access_tokens.create.assert_awaited_once()


@pytest.mark.asyncio
async def test_revoked_or_expired_refresh_token(use_case, mock_uow, user):
    row = RefreshToken(
        token="refresh-1",
        client_id="acme-web",
        user_id=user.id,
        scope=["openid"],
        revoked=True,
        expires_at=utcnow() + timedelta(days=1),
    )
    mock_uow.refresh_tokens.get_by_token.return_value = row
    request = TokenRequest(
        grant_type="refresh_token",
        refresh_token="refresh-1",
        client_id="acme-web",
        client_secret=PASSWORD,
    )

    revoked = await use_case.execute(request)
    row.revoked = False
    row.expires_at = utcnow() - timedelta(seconds=1)
    expired = await use_case.execute(request)

    assert revoked.error.code == "invalid_grant"
    assert expired.error.code == "invalid_grant"
