"""
JWT signing and verification

RS256 access and ID tokens signed with a single process-wide keypair.
The keypair is an immutable KeyMaterial value built once at startup and
injected into JwtService.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import List, Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import ExpiredSignatureError, JWTError, jwk, jwt
from jose.exceptions import JWTClaimsError
from pydantic import BaseModel, Field

ALGORITHM = "RS256"


class TokenVerificationError(Exception):
    """Base class for JWT verification failures"""


class InvalidSignatureError(TokenVerificationError):
    pass


class TokenExpiredError(TokenVerificationError):
    pass


class IssuerMismatchError(TokenVerificationError):
    pass


class AudienceMismatchError(TokenVerificationError):
    pass


@dataclass(frozen=True)
class KeyMaterial:
    """RSA signing keypair in PEM form plus its key id"""

    private_pem: str
    public_pem: str
    kid: str = "1"

    @classmethod
    def from_pem(
        cls, private_pem: Optional[str], public_pem: Optional[str] = None, kid: str = "1"
    ) -> "KeyMaterial":
        """
        Build key material from configured PEM strings.

        The public key is derived from the private key when not configured.

        Raises:
            ValueError: private key missing or not an RSA key
        """
        if not private_pem:
            raise ValueError("JWT private key not configured")
        private_key = serialization.load_pem_private_key(private_pem.encode(), password=None)
        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise ValueError("JWT private key must be an RSA key")
        if not public_pem:
            public_pem = (
                private_key.public_key()
                .public_bytes(
                    serialization.Encoding.PEM,
                    serialization.PublicFormat.SubjectPublicKeyInfo,
                )
                .decode()
            )
        return cls(private_pem=private_pem, public_pem=public_pem, kid=kid)

    @classmethod
    def generate(cls, kid: str = "1", key_size: int = 2048) -> "KeyMaterial":
        """Generate a fresh keypair (key provisioning and tests)"""
        private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
        private_pem = private_key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.NoEncryption(),
        ).decode()
        return cls.from_pem(private_pem, kid=kid)


class PermissionClaim(BaseModel):
    clientId: str
    permissions: List[str] = Field(default_factory=list)


class CustomRoleClaim(BaseModel):
    id: str
    name: str
    permissions: List[PermissionClaim] = Field(default_factory=list)


class AccessTokenClaims(BaseModel):
    """Custom claims carried by an access token"""

    sub: str
    tenant_id: str
    client_id: str
    scope: List[str]
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    custom_roles: Optional[List[CustomRoleClaim]] = None


class IdTokenClaims(BaseModel):
    """Identity claims carried by an OIDC ID token"""

    sub: str
    tenant_id: str
    email: str
    email_verified: bool
    name: Optional[str] = None
    picture: Optional[str] = None
    role: Optional[str] = None
    custom_roles: Optional[List[CustomRoleClaim]] = None


class JwtService:
    """Signs and verifies RS256 tokens for one issuer"""

    def __init__(self, keys: KeyMaterial, issuer: str, id_token_expiry: int = 3600):
        self.keys = keys
        self.issuer = issuer
        self.id_token_expiry = id_token_expiry

    def _sign(self, payload: dict, audience: str, expires_in: int) -> str:
        now = datetime.now(UTC)
        payload.update(
            {
                "iss": self.issuer,
                "aud": audience,
                "iat": now,
                "exp": now + timedelta(seconds=expires_in),
            }
        )
        return jwt.encode(
            payload,
            self.keys.private_pem,
            algorithm=ALGORITHM,
            headers={"kid": self.keys.kid, "typ": "JWT"},
        )

    def sign_access_token(
        self, claims: AccessTokenClaims, audience: str, expires_in: int, jti: str
    ) -> str:
        """
        Sign an access token.

        Args:
            claims: User and grant claims
            audience: client_id of the requesting client
            expires_in: Lifetime in seconds
            jti: Opaque id of the server-side AccessToken row

        Returns:
            Compact JWS string
        """
        payload = claims.model_dump(exclude_none=True)
        payload["jti"] = jti
        payload["token_type"] = "access_token"
        return self._sign(payload, audience, expires_in)

    def sign_id_token(
        self, claims: IdTokenClaims, audience: str, nonce: Optional[str] = None
    ) -> str:
        """Sign an OIDC ID token with the fixed ID token lifetime"""
        payload = claims.model_dump(exclude_none=True)
        if nonce:
            payload["nonce"] = nonce
            payload["jti"] = nonce
        return self._sign(payload, audience, self.id_token_expiry)

    def verify(self, token: str, audience: Optional[str] = None) -> dict:
        """
        Verify signature, issuer and expiry and return the claims.

        Raises:
            InvalidSignatureError: malformed token or bad signature
            TokenExpiredError: exp has passed
            IssuerMismatchError: iss is not this server
            AudienceMismatchError: audience given and not matched
        """
        try:
            return jwt.decode(
                token,
                self.keys.public_pem,
                algorithms=[ALGORITHM],
                issuer=self.issuer,
                audience=audience,
                options={"verify_aud": audience is not None},
            )
        except ExpiredSignatureError as exc:
            raise TokenExpiredError("Token has expired") from exc
        except JWTClaimsError as exc:
            message = str(exc).lower()
            if "issuer" in message:
                raise IssuerMismatchError("Token issuer mismatch") from exc
            if "audience" in message:
                raise AudienceMismatchError("Token audience mismatch") from exc
            raise InvalidSignatureError("Invalid token claims") from exc
        except JWTError as exc:
            raise InvalidSignatureError("Invalid token signature") from exc

    @staticmethod
    def unverified_claims(token: str) -> dict:
        """Read claims without verification (row lookup before verify)"""
        try:
            return jwt.get_unverified_claims(token)
        except JWTError as exc:
            raise InvalidSignatureError("Malformed token") from exc

    def export_jwks(self) -> dict:
        """Public key as a JWK Set with a single signing key"""
        public_jwk = jwk.construct(self.keys.public_pem, algorithm=ALGORITHM).to_dict()
        return {
            "keys": [
                {
                    "kty": public_jwk["kty"],
                    "n": public_jwk["n"],
                    "e": public_jwk["e"],
                    "use": "sig",
                    "alg": ALGORITHM,
                    "kid": self.keys.kid,
                }
            ]
        }
