from datetime import timedelta

import pytest
from jose import JWTError, jwt

from app import config
from app.errors import InternalError
from app.utils.jwt_handler import create_access_token, decode_token, parse_expires_in
from app.utils.password_handler import burn_verification, hash_password, verify_password


# ==================== PASSWORDS ====================
def test_hash_uses_fresh_salt():
    first = hash_password("secret123")
    second = hash_password("secret123")

    assert first != second
    assert verify_password("secret123", first)
    assert verify_password("secret123", second)


def test_hash_uses_configured_cost(monkeypatch):
    monkeypatch.setattr(config, "BCRYPT_ROUNDS", 12)

    assert hash_password("secret123").startswith("$2b$12$")


def test_verify_rejects_wrong_password():
    assert verify_password("wrong", hash_password("secret123")) is False


@pytest.mark.parametrize("digest", ["", None, "plaintext", "$2b$12$short"])
def test_verify_malformed_digest_is_false(digest):
    assert verify_password("secret123", digest) is False


def test_long_passwords_hash_on_first_72_bytes():
    long_password = "x" * 100
    digest = hash_password(long_password)

    assert verify_password(long_password, digest)
    assert verify_password("x" * 72, digest)


def test_burn_verification_never_matches():
    assert burn_verification("dummy-password") is False


# ==================== TOKENS ====================
@pytest.mark.parametrize("value, expected", [
    ("30m", timedelta(minutes=30)),
    ("1h", timedelta(hours=1)),
    ("7d", timedelta(days=7)),
    ("45s", timedelta(seconds=45)),
    ("1800", timedelta(seconds=1800)),
    (900, timedelta(seconds=900)),
    ("1.5h", timedelta(minutes=90)),
    ("2 days", timedelta(days=2)),
    ("12 hours", timedelta(hours=12)),
    ("30 minutes", timedelta(minutes=30)),
    ("10 mins", timedelta(minutes=10)),
    ("1w", timedelta(weeks=1)),
    ("1y", timedelta(days=365.25)),
    ("2500ms", timedelta(seconds=2.5)),
    ("90 Seconds", timedelta(seconds=90)),
    (".5d", timedelta(hours=12)),
])
def test_parse_expires_in(value, expected):
    assert parse_expires_in(value) == expected


@pytest.mark.parametrize("value", ["", "soon", "30x", "-5m", "0", "0ms", "1.h", "5 fortnights"])
def test_parse_expires_in_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_expires_in(value)


def test_access_token_claims():
    token = create_access_token({"email": "a@x.com", "role": "user"})

    claims = decode_token(token)
    assert claims["email"] == "a@x.com"
    assert claims["role"] == "user"
    assert claims["exp"] - claims["iat"] == 30 * 60


def test_access_token_does_not_mutate_input():
    claims = {"email": "a@x.com", "role": "user"}
    create_access_token(claims, timedelta(minutes=5))

    assert claims == {"email": "a@x.com", "role": "user"}


def test_access_token_signed_with_secret():
    token = create_access_token({"email": "a@x.com", "role": "user"})

    with pytest.raises(JWTError):
        jwt.decode(token, "another-secret", algorithms=[config.ALGORITHM])


def test_expired_token_fails_decode():
    token = create_access_token({"email": "a@x.com"}, timedelta(seconds=-1))

    with pytest.raises(JWTError):
        decode_token(token)


def test_missing_secret_is_internal_error(monkeypatch):
    monkeypatch.setattr(config, "SECRET_KEY", "")

    with pytest.raises(InternalError):
        create_access_token({"email": "a@x.com"})
