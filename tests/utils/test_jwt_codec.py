# -*- coding: utf-8 -*-
from types import SimpleNamespace

import pytest

from extensions.jwt import JwtCodec, TokenError, create_token, revoke_token, verify_token


@pytest.fixture
def codec():
    return JwtCodec("unit-secret", expires_seconds=60)


def test_encode_decode_roundtrip_keeps_claims(codec):
    token = codec.encode({"userId": 7, "role": "admin"})

    payload = codec.decode(token)

    assert payload["userId"] == 7
    assert payload["role"] == "admin"
    assert payload["exp"] - payload["iat"] == 60
    assert payload["jti"]


def test_expired_token_is_rejected(codec):
    token = codec.encode({"userId": 1}, now=1_000)

    with pytest.raises(TokenError):
        codec.decode(token)


def test_tampered_signature_is_rejected(codec):
    token = codec.encode({"userId": 1})
    other = JwtCodec("another-secret", expires_seconds=60)

    with pytest.raises(TokenError):
        other.decode(token)


@pytest.mark.parametrize("raw", ["", "abc", "a.b.c", "x.y"])
def test_malformed_token_is_rejected(codec, raw):
    with pytest.raises(TokenError):
        codec.decode(raw)


def test_missing_secret_refuses_to_start():
    with pytest.raises(RuntimeError):
        JwtCodec("", expires_seconds=60)


def test_revoked_token_fails_verification(app):
    user = SimpleNamespace(id=3, email="a@example.com", name="A", role="basic")
    with app.app_context():
        token = create_token(user)
        assert verify_token(token)["userId"] == 3

        revoke_token(token)

        assert verify_token(token) is None
        assert verify_token(None) is None
