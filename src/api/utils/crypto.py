"""
Crypto primitives

Password hashing, opaque token generation and PKCE verification.
"""

import base64
import hashlib
import hmac
import secrets
from functools import lru_cache
from typing import Tuple

import bcrypt

BCRYPT_ROUNDS = 12
BCRYPT_MAX_PASSWORD_BYTES = 72
PKCE_METHODS = ("plain", "S256")


class InvalidInputError(ValueError):
    """Raised when a crypto primitive is given malformed input"""


def _require_text(value, name: str) -> str:
    if not isinstance(value, str) or value == "":
        raise InvalidInputError(f"{name} must be a non-empty string")
    return value


def hash_password(plain: str) -> str:
    """
    Hash a password (or client secret) with bcrypt.

    Args:
        plain: Plain text password

    Returns:
        Bcrypt hash string (60 chars, cost factor 12)

    Raises:
        InvalidInputError: empty password or longer than bcrypt's 72 bytes
    """
    encoded = _require_text(plain, "password").encode()
    if len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
        raise InvalidInputError("password must be at most 72 bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(BCRYPT_ROUNDS)).decode()


def verify_password(plain: str, password_hash: str) -> bool:
    """
    Verify a password against a bcrypt hash in constant time.

    Raises:
        InvalidInputError: password_hash is not a bcrypt hash
    """
    _require_text(password_hash, "password_hash")
    if not isinstance(plain, str):
        raise InvalidInputError("password must be a string")
    encoded = plain.encode()
    if not encoded or len(encoded) > BCRYPT_MAX_PASSWORD_BYTES:
        # Could never have been hashed, so it can never match
        return False
    try:
        return bcrypt.checkpw(encoded, password_hash.encode())
    except ValueError as exc:
        raise InvalidInputError("password_hash is not a valid bcrypt hash") from exc


@lru_cache(maxsize=1)
def _dummy_hash() -> bytes:
    return bcrypt.hashpw(b"dummy_password", bcrypt.gensalt(BCRYPT_ROUNDS))


def burn_password_check() -> None:
    """Spend the same time as a real check when there is no user to check"""
    bcrypt.checkpw(b"not_the_dummy_password", _dummy_hash())


def generate_opaque_token(byte_length: int = 32) -> str:
    """
    Generate a URL-safe random token.

    Used for authorization codes, refresh tokens, access token ids,
    session tokens and client secrets.
    """
    if not isinstance(byte_length, int) or byte_length < 16:
        raise InvalidInputError("byte_length must be an integer >= 16")
    return secrets.token_urlsafe(byte_length)


def generate_client_credentials() -> Tuple[str, str]:
    """Return a new (client_id, client_secret) pair"""
    return f"client_{secrets.token_urlsafe(18)}", secrets.token_urlsafe(36)


def s256_challenge(verifier: str) -> str:
    """BASE64URL(SHA256(verifier)) without padding (RFC 7636)"""
    digest = hashlib.sha256(_require_text(verifier, "code_verifier").encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def verify_pkce(verifier: str, challenge: str, method: str) -> bool:
    """
    Verify a PKCE code_verifier against the stored challenge.

    Both methods compare in constant time.

    Raises:
        InvalidInputError: empty values, non-ASCII verifier or unknown method
    """
    _require_text(challenge, "code_challenge")
    _require_text(verifier, "code_verifier")
    if method not in PKCE_METHODS:
        raise InvalidInputError(f"unsupported code_challenge_method: {method!r}")
    if not verifier.isascii():
        raise InvalidInputError("code_verifier must be ASCII")

    if method == "plain":
        expected = verifier
    else:
        expected = s256_challenge(verifier)
    return hmac.compare_digest(expected.encode(), challenge.encode())
