"""
TOTP (RFC 6238) helpers

HMAC-SHA1, 6 digits, 30 second period, as expected by authenticator apps.
"""

import base64
import hashlib
import hmac
import io
import os
import time
from typing import Optional
from urllib.parse import quote, urlencode

import qrcode

DIGITS = 6
PERIOD = 30
SECRET_BYTES = 20


def generate_secret() -> str:
    """Random 20-byte secret, base32 encoded (32 chars, no padding)"""
    return base64.b32encode(os.urandom(SECRET_BYTES)).decode("ascii").rstrip("=")


def _decode_secret(secret: str) -> bytes:
    padded = secret.upper() + "=" * ((8 - len(secret) % 8) % 8)
    return base64.b32decode(padded, casefold=True)


def generate_totp(secret: str, timestamp: Optional[float] = None) -> str:
    """Code for the time step containing ``timestamp`` (defaults to now)"""
    if timestamp is None:
        timestamp = time.time()
    counter = int(timestamp // PERIOD).to_bytes(8, "big")
    digest = hmac.new(_decode_secret(secret), counter, hashlib.sha1).digest()
    offset = digest[-1] & 0x0F
    code_int = (int.from_bytes(digest[offset : offset + 4], "big") & 0x7FFFFFFF) % (10**DIGITS)
    return str(code_int).zfill(DIGITS)


def verify_totp(
    secret: str, code: str, window: int = 1, timestamp: Optional[float] = None
) -> bool:
    """
    Check a code against the current step and ``window`` steps either side.

    Codes that are not exactly six digits never match.
    """
    code = (code or "").strip()
    if len(code) != DIGITS or not code.isdigit():
        return False
    if timestamp is None:
        timestamp = time.time()
    for offset in range(-window, window + 1):
        generated = generate_totp(secret, timestamp + offset * PERIOD)
        if hmac.compare_digest(generated, code):
            return True
    return False


def build_otpauth_uri(secret: str, label: str, issuer: str) -> str:
    """otpauth:// provisioning URI understood by authenticator apps"""
    params = urlencode(
        {
            "secret": secret,
            "issuer": issuer,
            "algorithm": "SHA1",
            "digits": DIGITS,
            "period": PERIOD,
        }
    )
    return f"otpauth://totp/{quote(issuer)}:{quote(label)}?{params}"


def render_qr_data_url(content: str) -> str:
    """PNG QR code of ``content`` as a data: URL"""
    img = qrcode.make(content)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")
