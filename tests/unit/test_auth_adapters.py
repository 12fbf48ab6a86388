from datetime import UTC, datetime, timedelta

import pytest

from axotl.adapters.auth.crypto import JWTAuthAdapter


@pytest.fixture
def adapter():
    return JWTAuthAdapter("secret", ttl_minutes=30)


def test_password_roundtrip(adapter):
    hashed = adapter.hash_password("Axolotl123")
    assert hashed.startswith("$argon2")
    assert adapter.verify_password("Axolotl123", hashed)
    assert not adapter.verify_password("axolotl123", hashed)


@pytest.mark.parametrize("stored", ["", "hash", "plain-text"])
def test_unrecognised_hash_never_verifies(adapter, stored):
    assert adapter.verify_password("anything", stored) is False


def test_token_claims(adapter):
    claims = adapter.decode_token(adapter.create_token(5, "moderador"))
    assert claims is not None
    assert claims["sub"] == "5"
    assert claims["role"] == "moderador"


def test_expired_token(adapter):
    past = datetime.now(UTC) - timedelta(hours=2)
    assert adapter.decode_token(adapter.create_token(5, "registrado", now_utc=past)) is None


def test_wrong_secret(adapter):
    token = JWTAuthAdapter("other").create_token(5, "registrado")
    assert adapter.decode_token(token) is None


def test_garbage_token(adapter):
    assert adapter.decode_token("not.a.jwt") is None
