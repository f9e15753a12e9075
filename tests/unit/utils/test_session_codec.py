import time

import pytest

from src.api.utils.session import SessionCodec, SessionPayload


def payload(**overrides):
    data = {
        "sid": "session-token",
        "userId": "user-1",
        "tenantId": "tenant-1",
        "email": "user@acme.com",
        "role": "user",
        "exp": int(time.time()) + 60,
    }
    data.update(overrides)
    return SessionPayload(**data)


@pytest.fixture
def codec():
    return SessionCodec("a-session-secret", max_age=3600)


def test_round_trip(codec):
    cookie = codec.encode(payload())

    decoded = codec.decode(cookie)

    assert decoded == payload(exp=decoded.exp)
    assert "user@acme.com" not in cookie


def test_missing_and_malformed_cookies(codec):
    assert codec.decode(None) is None
    assert codec.decode("") is None
    assert codec.decode("garbage") is None


def test_tampered_cookie(codec):
    cookie = codec.encode(payload())
    parts = cookie.split(".")
    parts[3] = parts[3][:-2] + ("AA" if not parts[3].endswith("AA") else "BB")

    assert codec.decode(".".join(parts)) is None


def test_cookie_from_another_secret(codec):
    cookie = SessionCodec("another-secret", max_age=3600).encode(payload())

    assert codec.decode(cookie) is None


def test_expired_and_logged_out_cookies(codec):
    assert codec.decode(codec.encode(payload(exp=int(time.time()) - 1))) is None
    assert codec.decode(codec.encode(payload(isLoggedIn=False))) is None


def test_secret_is_required():
    with pytest.raises(ValueError):
        SessionCodec("", max_age=60)
