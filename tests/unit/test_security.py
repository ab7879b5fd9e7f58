"""Tests for token minting/verification and password hashing."""

import time

import jwt
import pytest

from auth import security
from core.settings import Settings


@pytest.fixture
def cfg():
    return Settings(jwt_secret="access-secret", jwt_refresh_secret="refresh-secret")


def test_access_token_embeds_subject_and_expires_in_15_minutes(cfg):
    before = int(time.time())
    token = security.build_access_token(user_id=42, settings=cfg)

    payload = security.decode_access_token(token, settings=cfg)

    assert payload["sub"] == "42"
    assert payload["type"] == "access"
    assert payload["exp"] - payload["iat"] == 15 * 60
    assert abs(payload["iat"] - before) <= 2


def test_refresh_token_expires_in_7_days(cfg):
    token = security.build_refresh_token(user_id=7, settings=cfg)

    payload = security.decode_refresh_token(token, settings=cfg)

    assert payload["sub"] == "7"
    assert payload["exp"] - payload["iat"] == 7 * 24 * 60 * 60


def test_access_token_does_not_verify_against_refresh_secret(cfg):
    token = security.build_access_token(user_id=1, settings=cfg)

    with pytest.raises(security.AuthSecurityError):
        security.decode_refresh_token(token, settings=cfg)


def test_token_with_wrong_type_is_rejected_even_with_right_secret(cfg):
    now = int(time.time())
    forged = jwt.encode(
        {"sub": "1", "type": "refresh", "iat": now, "exp": now + 60},
        cfg.jwt_secret,
        algorithm="HS256",
    )

    with pytest.raises(security.AuthSecurityError, match="type"):
        security.decode_access_token(forged, settings=cfg)


def test_expired_token_is_rejected(cfg):
    issued = int(time.time()) - 3600
    token = jwt.encode(
        {"sub": "1", "type": "access", "iat": issued, "exp": issued + 60},
        cfg.jwt_secret,
        algorithm="HS256",
    )

    with pytest.raises(security.AuthSecurityError):
        security.decode_access_token(token, settings=cfg)


@pytest.mark.parametrize("token", ["", "   ", "not-a-jwt"])
def test_garbage_tokens_are_rejected(cfg, token):
    with pytest.raises(security.AuthSecurityError):
        security.decode_access_token(token, settings=cfg)


def test_non_numeric_subject_is_rejected(cfg):
    now = int(time.time())
    token = jwt.encode(
        {"sub": "admin", "type": "access", "iat": now, "exp": now + 60},
        cfg.jwt_secret,
        algorithm="HS256",
    )

    with pytest.raises(security.AuthSecurityError, match="subject"):
        security.decode_access_token(token, settings=cfg)


def test_password_hash_is_salted_and_verifies():
    first = security.hash_password("s3cret")
    second = security.hash_password("s3cret")

    assert first != second
    assert "s3cret" not in first
    assert security.verify_password("s3cret", first)
    assert not security.verify_password("wrong", first)


def test_verify_password_handles_bad_hash():
    assert security.verify_password("s3cret", "not-a-bcrypt-hash") is False
    assert security.verify_password("", security.hash_password("x")) is False


def test_empty_password_cannot_be_hashed():
    with pytest.raises(security.AuthSecurityError):
        security.hash_password("")
