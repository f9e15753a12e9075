"""
Session cookie codec

The browser session is an encrypted and authenticated cookie (JWE, direct
key agreement, A256GCM). The key is derived from SESSION_SECRET.
"""

import hashlib
import json
import time
from typing import Optional

from fastapi import Response
from jose import jwe
from jose.exceptions import JOSEError
from pydantic import BaseModel, ValidationError


class SessionPayload(BaseModel):
    """Contents of the session cookie"""

    sid: str
    userId: str
    tenantId: str
    email: str
    name: Optional[str] = None
    role: str
    isLoggedIn: bool = True
    exp: int


class SessionCodec:
    def __init__(self, secret: str, max_age: int):
        if not secret:
            raise ValueError("Session secret not configured")
        self._key = hashlib.sha256(secret.encode()).digest()
        self.max_age = max_age

    def encode(self, payload: SessionPayload) -> str:
        plaintext = json.dumps(payload.model_dump(), separators=(",", ":"))
        token = jwe.encrypt(plaintext, self._key, algorithm="dir", encryption="A256GCM")
        return token.decode() if isinstance(token, bytes) else token

    def decode(self, cookie: Optional[str]) -> Optional[SessionPayload]:
        """
        Decrypt and validate a cookie value.

        Returns None for a missing, tampered, malformed, expired or
        logged-out cookie.
        """
        if not cookie:
            return None
        try:
            plaintext = jwe.decrypt(cookie, self._key)
            payload = SessionPayload.model_validate_json(plaintext)
        except (JOSEError, ValidationError, ValueError):
            return None
        if not payload.isLoggedIn or payload.exp < int(time.time()):
            return None
        return payload

    def expiry(self) -> int:
        return int(time.time()) + self.max_age


def set_session_cookie(response: Response, codec: SessionCodec, config, issued) -> None:
    """Encrypt an issued session into the HttpOnly, SameSite=Lax session cookie"""
    payload = SessionPayload(
        sid=issued.session_token,
        userId=issued.user.id,
        tenantId=issued.user.tenant_id,
        email=issued.user.email,
        name=issued.user.name,
        role=issued.user.role,
        isLoggedIn=True,
        exp=codec.expiry(),
    )
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=codec.encode(payload),
        max_age=codec.max_age,
        httponly=True,
        samesite="lax",
        secure=config.SESSION_COOKIE_SECURE,
        path="/",
    )


def clear_session_cookie(response: Response, config) -> None:
    response.delete_cookie(
        key=config.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=config.SESSION_COOKIE_SECURE,
    )
