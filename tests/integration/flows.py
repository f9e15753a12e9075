from typing import Optional
from urllib.parse import parse_qs, urlsplit

from httpx import AsyncClient

from src.api.utils.crypto import s256_challenge

DEFAULT_PASSWORD = "SecurePass123!"
CLIENT_SECRET = "client-secret-value"
REDIRECT_URI = "https://app.acme.com/callback"
CODE_VERIFIER = "dBjftJeZ4CVP-mJ0zTRiUwrRLrSY1nbf7gWI3hqEwM1kzLmQ"


def query_of(url: str) -> dict:
    return {key: values[0] for key, values in parse_qs(urlsplit(url).query).items()}


async def login(
    client: AsyncClient, email: str = "user@acme.com", password: str = DEFAULT_PASSWORD, **extra
):
    return await client.post("/auth/login", json={"email": email, "password": password, **extra})


def authorize_params(client_id: str = "acme-web", **overrides) -> dict:
    params = {
        "response_type": "code",
        "client_id": client_id,
        "redirect_uri": REDIRECT_URI,
        "scope": "openid profile email",
        "state": "xyz",
        "code_challenge": s256_challenge(CODE_VERIFIER),
        "code_challenge_method": "S256",
        "nonce": "n-0S6_WzA2Mj",
    }
    params.update(overrides)
    return {key: value for key, value in params.items() if value is not None}


async def obtain_code(client: AsyncClient, **overrides) -> str:
    """Walk authorize and consent for the signed-in user and return the code"""
    params = authorize_params(**overrides)
    response = await client.get("/oauth/authorize", params=params)
    assert response.status_code == 302

    location = response.headers["location"]
    if "/consent?" in location:
        consent = await client.post("/oauth/consent", json={**query_of(location), "approved": True})
        assert consent.status_code == 200
        location = consent.json()["redirect_uri"]

    assert location.startswith(REDIRECT_URI)
    query = query_of(location)
    assert query.get("state") == params.get("state")
    return query["code"]


async def exchange_code(
    client: AsyncClient,
    code: str,
    verifier: Optional[str] = CODE_VERIFIER,
    client_id: str = "acme-web",
    redirect_uri: str = REDIRECT_URI,
):
    data = {
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": redirect_uri,
        "client_id": client_id,
        "client_secret": CLIENT_SECRET,
    }
    if verifier is not None:
        data["code_verifier"] = verifier
    return await client.post("/oauth/token", data=data)


async def issue_tokens(client: AsyncClient, **overrides) -> dict:
    code = await obtain_code(client, **overrides)
    response = await exchange_code(client, code)
    assert response.status_code == 200
    return response.json()
