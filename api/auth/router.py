"""
Auth API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Cookie, Depends, Response, status

from core.settings import Settings

from . import cookies, schemas, service
from .dependencies import get_current_identity, get_settings

router = APIRouter()


def _apply(response: Response, grant: service.SessionGrant, settings: Settings) -> None:
    for cookie in grant.cookies:
        cookies.apply_cookie(response, cookie, settings)


@router.post("/auth", response_model=schemas.LoginResponse)
async def login(
    payload: schemas.LoginRequest,
    response: Response,
    settings: Settings = Depends(get_settings),
) -> schemas.LoginResponse:
    grant = await service.login(payload, settings=settings)
    _apply(response, grant, settings)
    return grant.body


@router.post("/refresh", response_model=schemas.RefreshResponse)
async def refresh(
    response: Response,
    refresh_token: str | None = Cookie(default=None, alias=cookies.REFRESH_COOKIE_NAME),
    settings: Settings = Depends(get_settings),
) -> schemas.RefreshResponse:
    grant = service.refresh(refresh_token, settings=settings)
    _apply(response, grant, settings)
    return grant.body


@router.post("/logout", response_model=schemas.LogoutResponse)
async def logout(
    response: Response,
    settings: Settings = Depends(get_settings),
) -> schemas.LogoutResponse:
    cookies.clear_session_cookies(response, settings)
    return service.logout()


@router.get("/profile", response_model=schemas.ProfileResponse)
async def profile(
    identity: service.Identity = Depends(get_current_identity),
) -> schemas.ProfileResponse:
    return await service.profile(identity)


@router.post("/create", response_model=schemas.CreateAdminResponse, status_code=status.HTTP_201_CREATED)
async def create_user(payload: schemas.CreateAdminRequest) -> schemas.CreateAdminResponse:
    return await service.create_user(payload)
