"""
Auth business logic.

Sessions are stateless: every request re-verifies its cookies and nothing is
stored server-side. Operations that need a cookie written return it as a
`SessionCookie` next to their result; the router/dependency layer is the only
place that touches the response object.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from pydantic import BaseModel

from core.errors import bad_request, not_found, unauthorized
from core.settings import Settings

from . import cookies, repository, schemas, security

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    user_id: int


@dataclass(frozen=True)
class AuthResult:
    identity: Identity
    # Set when the access token was re-minted from the refresh token.
    cookie: cookies.SessionCookie | None = None


@dataclass(frozen=True)
class SessionGrant:
    body: BaseModel
    cookies: list[cookies.SessionCookie] = field(default_factory=list)


def _identity_from(payload: dict) -> Identity:
    return Identity(user_id=int(payload["sub"]))


def authenticate(
    access_token: str | None,
    refresh_token: str | None,
    *,
    settings: Settings,
) -> AuthResult:
    if not access_token and not refresh_token:
        raise unauthorized("No authentication tokens provided")

    if access_token:
        try:
            payload = security.decode_access_token(access_token, settings=settings)
        except security.AuthSecurityError as exc:
            logger.debug("access_token_rejected reason=%s", exc)
        else:
            return AuthResult(identity=_identity_from(payload))

    if refresh_token:
        try:
            payload = security.decode_refresh_token(refresh_token, settings=settings)
        except security.AuthSecurityError as exc:
            raise unauthorized("Invalid authentication tokens") from exc

        identity = _identity_from(payload)
        new_access = security.build_access_token(user_id=identity.user_id, settings=settings)
        logger.info("access_token_renewed user_id=%s", identity.user_id)
        return AuthResult(identity=identity, cookie=cookies.access_cookie(new_access))

    raise unauthorized("Authentication failed")


async def login(payload: schemas.LoginRequest, *, settings: Settings) -> SessionGrant:
    admin = await repository.get_admin_by_email(payload.email)
    if admin is None:
        logger.info("login_failed reason=not_found")
        raise bad_request("No se encontró al usuario")

    if not security.verify_password(payload.password, str(admin.get("password") or "")):
        logger.info("login_failed reason=bad_password user_id=%s", admin["id"])
        raise bad_request("Credenciales inválidas", key="message")

    user_id = int(admin["id"])
    access_token = security.build_access_token(user_id=user_id, settings=settings)
    refresh_token = security.build_refresh_token(user_id=user_id, settings=settings)

    body = schemas.LoginResponse(
        token=access_token,
        message="Inicio de sesión exitoso",
        email=str(admin["email"]),
        name=admin.get("name"),
        id=user_id,
    )
    return SessionGrant(
        body=body,
        cookies=[cookies.access_cookie(access_token), cookies.refresh_cookie(refresh_token)],
    )


def refresh(refresh_token: str | None, *, settings: Settings) -> SessionGrant:
    if not refresh_token:
        raise unauthorized("No se pudo generar un nuevo token de acceso")

    try:
        payload = security.decode_refresh_token(refresh_token, settings=settings)
    except security.AuthSecurityError as exc:
        raise unauthorized("Token de acceso inválido") from exc

    new_access = security.build_access_token(user_id=int(payload["sub"]), settings=settings)
    return SessionGrant(
        body=schemas.RefreshResponse(token=new_access),
        cookies=[cookies.access_cookie(new_access)],
    )


def logout() -> schemas.LogoutResponse:
    return schemas.LogoutResponse(message="Sesión cerrada exitosamente")


async def profile(identity: Identity | None) -> schemas.ProfileResponse:
    if identity is None:
        raise unauthorized("Usuario no autenticado")

    row = await repository.get_admin_profile(identity.user_id)
    if row is None:
        raise not_found("Usuario no encontrado", key="message")
    return schemas.ProfileResponse(**row)


async def create_user(payload: schemas.CreateAdminRequest) -> schemas.CreateAdminResponse:
    existing = await repository.get_admin_by_email(payload.email)
    if existing is not None:
        raise bad_request("El usuario ya existe", key="message")

    password_hash = security.hash_password(payload.password)
    row = await repository.create_admin(
        email=payload.email,
        password_hash=password_hash,
        name=payload.name,
    )
    logger.info("admin_created user_id=%s", row["id"])
    return schemas.CreateAdminResponse(message="Usuario creado exitosamente", userId=int(row["id"]))
