"""
Auth dependencies for protected FastAPI routes.
"""

from __future__ import annotations

from fastapi import Cookie, Depends, Request, Response

from core.errors import defer_cookie
from core.settings import Settings

from . import cookies, service


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_current_identity(
    request: Request,
    response: Response,
    token: str | None = Cookie(default=None),
    refresh_token: str | None = Cookie(default=None, alias=cookies.REFRESH_COOKIE_NAME),
    settings: Settings = Depends(get_settings),
) -> service.Identity:
    result = service.authenticate(token, refresh_token, settings=settings)
    if result.cookie is not None:
        # A renewed session survives the endpoint failing afterwards.
        cookies.apply_cookie(response, result.cookie, settings)
        defer_cookie(request, cookies.set_cookie_kwargs(result.cookie, settings))
    return result.identity
