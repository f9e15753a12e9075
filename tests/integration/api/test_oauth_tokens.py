import base64

import pytest
import pytest_asyncio
from httpx import AsyncClient
from jose import jwt

from tests.integration.flows import CLIENT_SECRET, issue_tokens, login


@pytest_asyncio.fixture
async def tokens(client: AsyncClient, seed):
    tenant_id = await seed.tenant("acme.com")
    await seed.user(tenant_id)
    await seed.client(tenant_id)
    await login(client)
    return await issue_tokens(client)


def basic_auth(client_id: str, client_secret: str) -> dict:
    encoded = base64.b64encode(f"{client_id}:{client_secret}".encode()).decode()
    return {"Authorization": f"Basic {encoded}"}


@pytest.mark.asyncio
async def test_refresh_grant_returns_new_access_token_only(client: AsyncClient, tokens):
    response = await client.post(
        "/oauth/token",
        data={
            "grant_type": "refresh_token",
            "refresh_token": tokens["refresh_token"],
            "client_id": "acme-web",
            "client_secret": CLIENT_SECRET,
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["access_token"] != tokens["access_token"]
    assert data["scope"] == "openid profile email"
    assert "refresh_token" not in data
    assert "id_token" not in data


@pytest.mark.asyncio
async def test_refresh_token_is_reusable(client: AsyncClient, tokens):
    body = {
        "grant_type": "refresh_token",
        "refresh_token": tokens["refresh_token"],
        "client_id": "acme-web",
        "client_secret": CLIENT_SECRET,
    }

    first = await client.post("/oauth/token", data=body)
    second = await client.post("/oauth/token", data=body)

    assert first.status_code == 200
    assert second.status_code == 200


@pytest.mark.asyncio
async def test_token_endpoint_accepts_json_and_basic_auth(client: AsyncClient, tokens):
    response = await client.post(
        "/oauth/token",
        json={"grant_type": "refresh_token", "refresh_token": tokens["refresh_token"]},
        headers=basic_auth("acme-web", CLIENT_SECRET),
    )

    assert response.status_code == 200
    assert response.json()["access_token"]


@pytest.mark.asyncio
async def test_wrong_client_secret_is_invalid_client(client: AsyncClient, tokens):
    response = await client.post(
        "/oauth/token",
        data={
            "grant_type": "refresh_token",
            "refresh_token": tokens["refresh_token"],
            "client_id": "acme-web",
            "client_secret": "wrong",
        },
    )

    assert response.status_code == 401
    assert response.json()["error"] == "invalid_client"


@pytest.mark.asyncio
async def test_client_is_authenticated_before_grant_type(client: AsyncClient, tokens):
    response = await client.post(
        "/oauth/token",
        data={"grant_type": "password", "client_id": "acme-web", "client_secret": "wrong"},
    )

    assert response.status_code == 401
    assert response.json()["error"] == "invalid_client"


@pytest.mark.asyncio
async def test_unsupported_grant_type(client: AsyncClient, tokens):
    response = await client.post(
        "/oauth/token",
        data={"grant_type": "password", "client_id": "acme-web", "client_secret": CLIENT_SECRET},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "unsupported_grant_type"


@pytest.mark.asyncio
async def test_refresh_token_of_another_client(client: AsyncClient, tokens, seed):
    tenant_id = await seed.tenant("globex.com")
    await seed.client(tenant_id, client_id="globex-web")

    response = await client.post(
        "/oauth/token",
        data={
            "grant_type": "refresh_token",
            "refresh_token": tokens["refresh_token"],
            "client_id": "globex-web",
            "client_secret": CLIENT_SECRET,
        },
    )

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_grant"


@pytest.mark.asyncio
async def test_userinfo_returns_scoped_claims(client: AsyncClient, tokens):
    response = await client.get(
        "/oauth/userinfo", headers={"Authorization": f"Bearer {tokens['access_token']}"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "user@acme.com"
    assert data["email_verified"] is False
    assert data["name"] == "Test User"
    assert data["sub"]
    assert data["tenant_id"]


@pytest.mark.asyncio
async def test_userinfo_without_profile_scope(client: AsyncClient, seed):
    tenant_id = await seed.tenant("acme.com")
    await seed.user(tenant_id)
    await seed.client(tenant_id)
    await login(client)
    tokens = await issue_tokens(client, scope="openid email")

    response = await client.post(
        "/oauth/userinfo", headers={"Authorization": f"Bearer {tokens['access_token']}"}
    )

    assert response.status_code == 200
    data = response.json()
    assert data["email"] == "user@acme.com"
    assert "name" not in data


@pytest.mark.asyncio
async def test_userinfo_requires_bearer_token(client: AsyncClient):
    response = await client.get("/oauth/userinfo")

    assert response.status_code == 401
    assert response.json()["error"] == "invalid_token"
    assert response.headers["www-authenticate"].startswith("Bearer")


@pytest.mark.asyncio
async def test_userinfo_rejects_tampered_token(client: AsyncClient, tokens):
    header, payload, signature = tokens["access_token"].split(".")
    tampered = f"{header}.{payload}.{signature[:-4]}AAAA"

    response = await client.get("/oauth/userinfo", headers={"Authorization": f"Bearer {tampered}"})

    assert response.status_code == 401
    assert response.json()["error"] == "invalid_token"


@pytest.mark.asyncio
async def test_revoked_access_token_is_rejected(client: AsyncClient, tokens):
    auth = {"Authorization": f"Bearer {tokens['access_token']}"}
    assert (await client.get("/oauth/userinfo", headers=auth)).status_code == 200

    revoke = await client.post(
        "/oauth/revoke",
        data={
            "token": tokens["access_token"],
            "token_type_hint": "access_token",
            "client_id": "acme-web",
            "client_secret": CLIENT_SECRET,
        },
    )

    assert revoke.status_code == 200
    response = await client.get("/oauth/userinfo", headers=auth)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_revoked_refresh_token_cannot_be_used(client: AsyncClient, tokens):
    revoke = await client.post(
        "/oauth/revoke",
        data={"token": tokens["refresh_token"]},
        headers=basic_auth("acme-web", CLIENT_SECRET),
    )
    assert revoke.status_code == 200

    response = await client.post(
        "/oauth/token",
        data={
            "grant_type": "refresh_token",
            "refresh_token": tokens["refresh_token"],
            "client_id": "acme-web",
            "client_secret": CLIENT_SECRET,
        },
    )

    assert response.status_code == 400
    assert response.json()["error"] == "invalid_grant"


@pytest.mark.asyncio
async def test_revoking_unknown_token_succeeds(client: AsyncClient, tokens):
    response = await client.post(
        "/oauth/revoke",
        data={"token": "not-a-token", "client_id": "acme-web", "client_secret": CLIENT_SECRET},
    )

    assert response.status_code == 200


@pytest.mark.asyncio
async def test_revoke_requires_client_authentication(client: AsyncClient, tokens):
    response = await client.post("/oauth/revoke", data={"token": tokens["refresh_token"]})

    assert response.status_code == 401
    assert response.json()["error"] == "invalid_client"


@pytest.mark.asyncio
async def test_access_token_carries_custom_roles_for_requesting_client(
    client: AsyncClient, seed
):
    tenant_id = await seed.tenant("acme.com")
    user_id = await seed.user(tenant_id)
    await seed.client(tenant_id)
    role_id = await seed.custom_role(
        tenant_id,
        "Billing Admin",
        [
            {"clientId": "acme-web", "permissions": ["invoices:read", "invoices:write"]},
            {"clientId": "acme-mobile", "permissions": ["invoices:read"]},
        ],
        user_id,
    )
    await login(client)

    tokens = await issue_tokens(client)
    claims = jwt.get_unverified_claims(tokens["access_token"])

    assert claims["custom_roles"] == [
        {
            "id": role_id,
            "name": "Billing Admin",
            "permissions": [
                {"clientId": "acme-web", "permissions": ["invoices:read", "invoices:write"]}
            ],
        }
    ]
