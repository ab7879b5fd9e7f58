"""
Auth security helpers.

Access and refresh tokens are both JWTs carrying the admin id in `sub`; they
are signed with separate secrets and tagged with a `type` claim so one can
never stand in for the other.
"""

from __future__ import annotations

import time
from typing import Any

import bcrypt
import jwt

from core.settings import ACCESS_TOKEN_MINUTES, REFRESH_TOKEN_DAYS, Settings

ACCESS_TOKEN_TTL_S = ACCESS_TOKEN_MINUTES * 60
REFRESH_TOKEN_TTL_S = REFRESH_TOKEN_DAYS * 24 * 60 * 60

BCRYPT_ROUNDS = 10


class AuthSecurityError(RuntimeError):
    pass


def now_epoch_s() -> int:
    return int(time.time())


def hash_password(plain_password: str) -> str:
    password = (plain_password or "").encode("utf-8")
    if not password:
        raise AuthSecurityError("Password is empty.")
    return bcrypt.hashpw(password, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    # bcrypt.checkpw compares digests in constant time.
    password = (plain_password or "").encode("utf-8")
    hashed = (password_hash or "").encode("utf-8")
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password, hashed)
    except ValueError:
        return False


def _build_token(*, user_id: int, token_type: str, ttl_s: int, secret: str, algorithm: str) -> str:
    issued_at = now_epoch_s()
    payload = {
        "sub": str(user_id),
        "type": token_type,
        "iat": issued_at,
        "exp": issued_at + ttl_s,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def _decode_token(token: str, *, token_type: str, secret: str, algorithm: str) -> dict[str, Any]:
    raw = (token or "").strip()
    if not raw:
        raise AuthSecurityError(f"{token_type.capitalize()} token is empty.")

    try:
        payload = jwt.decode(raw, secret, algorithms=[algorithm])
    except jwt.InvalidTokenError as exc:
        raise AuthSecurityError(f"Invalid {token_type} token.") from exc

    if str(payload.get("type") or "").strip().lower() != token_type:
        raise AuthSecurityError(f"Token type is not {token_type}.")

    subject = str(payload.get("sub") or "").strip()
    if not subject.isdigit():
        raise AuthSecurityError(f"Invalid {token_type} token subject.")

    return payload


def build_access_token(*, user_id: int, settings: Settings) -> str:
    return _build_token(
        user_id=user_id,
        token_type="access",
        ttl_s=ACCESS_TOKEN_TTL_S,
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def build_refresh_token(*, user_id: int, settings: Settings) -> str:
    return _build_token(
        user_id=user_id,
        token_type="refresh",
        ttl_s=REFRESH_TOKEN_TTL_S,
        secret=settings.jwt_refresh_secret,
        algorithm=settings.jwt_algorithm,
    )


def decode_access_token(token: str, *, settings: Settings) -> dict[str, Any]:
    return _decode_token(
        token,
        token_type="access",
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def decode_refresh_token(token: str, *, settings: Settings) -> dict[str, Any]:
    return _decode_token(
        token,
        token_type="refresh",
        secret=settings.jwt_refresh_secret,
        algorithm=settings.jwt_algorithm,
    )
