import pytest

from src.api.utils.crypto import (
    InvalidInputError,
    generate_client_credentials,
    generate_opaque_token,
    hash_password,
    s256_challenge,
    verify_password,
    verify_pkce,
)

# RFC 7636 appendix B
RFC_VERIFIER = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
RFC_CHALLENGE = "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


def test_hash_and_verify_password():
    password_hash = hash_password("SecurePass123!")

    assert password_hash.startswith("$2b$12$")
    assert verify_password("SecurePass123!", password_hash)
    assert not verify_password("SecurePass124!", password_hash)


def test_hash_rejects_empty_and_oversized_passwords():
    with pytest.raises(InvalidInputError):
        hash_password("")
    with pytest.raises(InvalidInputError):
        hash_password("a" * 73)


def test_verify_rejects_malformed_hash():
    with pytest.raises(InvalidInputError):
        verify_password("SecurePass123!", "not-a-bcrypt-hash")


def test_verify_never_matches_oversized_password():
    password_hash = hash_password("a" * 72)

    assert not verify_password("a" * 73, password_hash)


def test_s256_challenge_matches_rfc_vector():
    assert s256_challenge(RFC_VERIFIER) == RFC_CHALLENGE


def test_verify_pkce_s256_and_plain():
    assert verify_pkce(RFC_VERIFIER, RFC_CHALLENGE, "S256")
    assert not verify_pkce(RFC_VERIFIER + "x", RFC_CHALLENGE, "S256")
    assert verify_pkce("plain-verifier", "plain-verifier", "plain")
    assert not verify_pkce("plain-verifier", RFC_CHALLENGE, "plain")


@pytest.mark.parametrize(
    "verifier, challenge, method",
    [
        ("", RFC_CHALLENGE, "S256"),
        (RFC_VERIFIER, "", "S256"),
        (RFC_VERIFIER, RFC_CHALLENGE, "S512"),
        ("vérifier", RFC_CHALLENGE, "S256"),
    ],
)
def test_verify_pkce_rejects_malformed_input(verifier, challenge, method):
    with pytest.raises(InvalidInputError):
        verify_pkce(verifier, challenge, method)


def test_opaque_tokens_are_unique_and_url_safe():
    tokens = {generate_opaque_token(32) for _ in range(100)}

    assert len(tokens) == 100
    assert all(len(token) == 43 for token in tokens)
    assert all("=" not in token and "+" not in token and "/" not in token for token in tokens)


def test_opaque_token_minimum_entropy():
    with pytest.raises(InvalidInputError):
        generate_opaque_token(8)


def test_generate_client_credentials():
    client_id, client_secret = generate_client_credentials()
    other_id, other_secret = generate_client_credentials()

    assert client_id.startswith("client_")
    assert len(client_secret) >= 43
    assert (client_id, client_secret) != (other_id, other_secret)
