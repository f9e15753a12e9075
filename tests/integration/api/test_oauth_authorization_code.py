import pytest
import pytest_asyncio
from httpx import AsyncClient
from jose import jwt

from config import ApplicationConfig
from tests.integration.flows import (
    CODE_VERIFIER,
    REDIRECT_URI,
    authorize_params,
    exchange_code,
    login,
    obtain_code,
    query_of,
)


@pytest_asyncio.fixture
async def signed_in(client: AsyncClient, seed):
    tenant_id = await seed.tenant("acme.com")
    user_id = await seed.user(tenant_id)
    await seed.client(tenant_id)
    response = await login(client)
    assert response.status_code == 200
    assert response.json()["status"] == "authenticated"
    return {"tenant_id": tenant_id, "user_id": user_id}


@pytest.mark.asyncio
async def test_authorization_code_flow_with_pkce(client: AsyncClient, signed_in, key_material):
    """Authorize, consent and exchange the code for access, refresh and ID tokens"""
    code = await obtain_code(client)

    response = await exchange_code(client, code)

    assert response.status_code == 200
    assert response.headers["cache-control"] == "no-store"
    data = response.json()
    assert data["token_type"] == "Bearer"
    assert data["expires_in"] == ApplicationConfig.ACCESS_TOKEN_EXPIRY
    assert data["scope"] == "openid profile email"
    assert data["refresh_token"]

    access_claims = jwt.decode(
        data["access_token"],
        key_material.public_pem,
        algorithms=["RS256"],
        audience="acme-web",
        issuer=ApplicationConfig.OAUTH2_ISSUER,
    )
    assert access_claims["sub"] == signed_in["user_id"]
    assert access_claims["tenant_id"] == signed_in["tenant_id"]
    assert access_claims["client_id"] == "acme-web"
    assert access_claims["jti"]

    id_claims = jwt.decode(
        data["id_token"],
        key_material.public_pem,
        algorithms=["RS256"],
        audience="acme-web",
        issuer=ApplicationConfig.OAUTH2_ISSUER,
    )
    assert id_claims["sub"] == signed_in["user_id"]
    assert id_claims["email"] == "user@acme.com"
    assert id_claims["nonce"] == "n-0S6_WzA2Mj"


@pytest.mark.asyncio
async def test_code_is_single_use(client: AsyncClient, signed_in):
    code = await obtain_code(client)

    first = await exchange_code(client, code)
    replay = await exchange_code(client, code)

    assert first.status_code == 200
    assert replay.status_code == 400
    assert replay.json()["error"] == "invalid_grant"


@pytest.mark.asyncio
async def test_wrong_code_verifier_is_rejected(client: AsyncClient, signed_in):
    code = await obtain_code(client)

    response = await exchange_code(client, code, verifier="x" * 43)

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_grant"


@pytest.mark.asyncio
async def test_missing_code_verifier_is_invalid_request(client: AsyncClient, signed_in):
    code = await obtain_code(client)

    response = await exchange_code(client, code, verifier=None)

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_request"


@pytest.mark.asyncio
async def test_redirect_uri_must_match_the_code(client: AsyncClient, signed_in):
    code = await obtain_code(client)

    response = await exchange_code(client, code, redirect_uri="https://app.acme.com/other")

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_grant"


@pytest.mark.asyncio
async def test_plain_challenge(client: AsyncClient, signed_in):
    code = await obtain_code(
        client, code_challenge=CODE_VERIFIER, code_challenge_method="plain"
    )

    response = await exchange_code(client, code)

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_unauthenticated_authorize_redirects_to_login(client: AsyncClient, seed):
    tenant_id = await seed.tenant("acme.com")
    await seed.client(tenant_id)

    response = await client.get("/oauth/authorize", params=authorize_params())

    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith(f"{ApplicationConfig.BASE_URL}/login?")
    return_to = query_of(location)["returnTo"]
    assert "/oauth/authorize?" in return_to
    assert query_of(return_to)["state"] == "xyz"


@pytest.mark.asyncio
async def test_unregistered_redirect_uri_is_not_redirected_to(client: AsyncClient, signed_in):
    response = await client.get(
        "/oauth/authorize", params=authorize_params(redirect_uri="https://evil.example/cb")
    )

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_request"
    assert "location" not in response.headers


@pytest.mark.asyncio
async def test_scope_outside_allowed_scopes(client: AsyncClient, signed_in):
    response = await client.get(
        "/oauth/authorize", params=authorize_params(scope="openid admin")
    )

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_scope"


@pytest.mark.asyncio
async def test_response_type_must_be_code(client: AsyncClient, signed_in):
    response = await client.get(
        "/oauth/authorize", params=authorize_params(response_type="token")
    )

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_request"


@pytest.mark.asyncio
async def test_authorize_first_time_goes_to_consent(client: AsyncClient, signed_in):
    response = await client.get("/oauth/authorize", params=authorize_params())

    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith(f"{ApplicationConfig.BASE_URL}/consent?")
    query = query_of(location)
    assert query["client_id"] == "acme-web"
    assert query["redirect_uri"] == REDIRECT_URI
    assert query["code_challenge_method"] == "S256"


@pytest.mark.asyncio
async def test_remembered_consent_skips_consent_screen(client: AsyncClient, signed_in):
    await obtain_code(client)

    response = await client.get("/oauth/authorize", params=authorize_params())

    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith(REDIRECT_URI)
    assert query_of(location)["code"]


@pytest.mark.asyncio
async def test_consent_denied_redirects_with_access_denied(client: AsyncClient, signed_in):
    response = await client.post(
        "/oauth/consent", json={**authorize_params(), "approved": False}
    )

    assert response.status_code == 200
    redirect = response.json()["redirect_uri"]
    assert redirect.startswith(REDIRECT_URI)
    query = query_of(redirect)
    assert query["error"] == "access_denied"
    assert query["state"] == "xyz"
    assert "code" not in query


@pytest.mark.asyncio
async def test_consent_requires_session(client: AsyncClient, seed):
    tenant_id = await seed.tenant("acme.com")
    await seed.client(tenant_id)

    response = await client.post("/oauth/consent", json={**authorize_params(), "approved": True})

    assert response.status_code == 401
    assert response.json()["error"] == "invalid_request"


@pytest.mark.asyncio
async def test_client_of_another_tenant_is_invisible(client: AsyncClient, signed_in, seed):
    other_tenant = await seed.tenant("globex.com")
    await seed.client(other_tenant, client_id="globex-web")

    response = await client.get(
        "/oauth/authorize", params=authorize_params(client_id="globex-web")
    )

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_client"
