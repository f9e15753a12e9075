"""
OpenID Connect discovery endpoints
"""

from fastapi import APIRouter, Depends

from src.api.utils.jwt import ALGORITHM, JwtService
from src.depends import get_config, get_jwt_service

router = APIRouter(prefix="/.well-known", tags=["Discovery"])


@router.get("/openid-configuration")
async def openid_configuration(config=Depends(get_config)):
    """Provider metadata document"""
    issuer = config.OAUTH2_ISSUER
    base_url = config.BASE_URL.rstrip("/")
    return {
        "issuer": issuer,
        "authorization_endpoint": f"{base_url}/oauth/authorize",
        "token_endpoint": f"{base_url}/oauth/token",
        "userinfo_endpoint": f"{base_url}/oauth/userinfo",
        "revocation_endpoint": f"{base_url}/oauth/revoke",
        "jwks_uri": f"{base_url}/.well-known/jwks.json",
        "response_types_supported": ["code"],
        "subject_types_supported": ["public"],
        "id_token_signing_alg_values_supported": [ALGORITHM],
        "scopes_supported": ["openid", "profile", "email"],
        "token_endpoint_auth_methods_supported": ["client_secret_post", "client_secret_basic"],
        "claims_supported": ["sub", "email", "email_verified", "name", "picture", "tenant_id"],
        "code_challenge_methods_supported": ["plain", "S256"],
        "grant_types_supported": ["authorization_code", "refresh_token"],
    }


@router.get("/jwks.json")
async def jwks(jwt_service: JwtService = Depends(get_jwt_service)):
    """Public signing key as a JWK Set"""
    return jwt_service.export_jwks()
