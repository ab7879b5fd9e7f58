"""
Session cookie policy.

Production serves the API and the admin UI from different subdomains, so
cookies there are `Secure`, `SameSite=None` and scoped to the parent domain.
Everywhere else they stay host-only with `SameSite=Lax`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import Response

from core.settings import Settings

from .security import ACCESS_TOKEN_TTL_S, REFRESH_TOKEN_TTL_S

ACCESS_COOKIE_NAME = "token"
REFRESH_COOKIE_NAME = "refreshToken"

ACCESS_COOKIE_MAX_AGE_MS = ACCESS_TOKEN_TTL_S * 1000
REFRESH_COOKIE_MAX_AGE_MS = REFRESH_TOKEN_TTL_S * 1000


@dataclass(frozen=True)
class SessionCookie:
    """A cookie the boundary layer must set on the outgoing response."""

    key: str
    value: str
    max_age_ms: int


def clear_cookie_params(settings: Settings) -> dict[str, Any]:
    return {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "none" if settings.is_production else "lax",
        "domain": settings.cookie_domain if settings.is_production else None,
        "path": "/",
    }


def cookie_params(settings: Settings, *, max_age_ms: int) -> dict[str, Any]:
    # Starlette expects Max-Age in seconds.
    return {**clear_cookie_params(settings), "max_age": max_age_ms // 1000}


def access_cookie(token: str) -> SessionCookie:
    return SessionCookie(key=ACCESS_COOKIE_NAME, value=token, max_age_ms=ACCESS_COOKIE_MAX_AGE_MS)


def refresh_cookie(token: str) -> SessionCookie:
    return SessionCookie(key=REFRESH_COOKIE_NAME, value=token, max_age_ms=REFRESH_COOKIE_MAX_AGE_MS)


def set_cookie_kwargs(cookie: SessionCookie, settings: Settings) -> dict[str, Any]:
    return {
        "key": cookie.key,
        "value": cookie.value,
        **cookie_params(settings, max_age_ms=cookie.max_age_ms),
    }


def apply_cookie(response: Response, cookie: SessionCookie, settings: Settings) -> None:
    response.set_cookie(**set_cookie_kwargs(cookie, settings))


def clear_session_cookies(response: Response, settings: Settings) -> None:
    params = clear_cookie_params(settings)
    for name in (ACCESS_COOKIE_NAME, REFRESH_COOKIE_NAME):
        response.delete_cookie(name, **params)
