"""
Process settings.

Built once at startup by `load_settings()` and stored on `app.state.settings`.
Business code receives the object explicitly instead of reading the
environment on its own.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_JWT_SECRET = "dev-change-this-secret"
DEFAULT_JWT_REFRESH_SECRET = "dev-change-this-refresh-secret"
DEFAULT_CORS_ORIGINS = ("http://localhost:3001", "https://admin.ekoru.cl")

ACCESS_TOKEN_MINUTES = 15
REFRESH_TOKEN_DAYS = 7


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, "").strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_refresh_secret: str = DEFAULT_JWT_REFRESH_SECRET
    jwt_algorithm: str = "HS256"
    environment: str = "development"
    cookie_domain: str = ".ekoru.cl"
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: tuple[str, ...] = field(default=DEFAULT_CORS_ORIGINS)
    log_level: str = "INFO"
    database_url: str = ""
    db_pool_min_size: int = 1
    db_pool_max_size: int = 5

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def load_settings() -> Settings:
    environment = _env_str("ENVIRONMENT", "development").lower()
    jwt_secret = os.environ.get("JWT_SECRET", "").strip()
    jwt_refresh_secret = os.environ.get("JWT_REFRESH_SECRET", "").strip()

    if environment == "production" and not (jwt_secret and jwt_refresh_secret):
        raise RuntimeError("JWT_SECRET and JWT_REFRESH_SECRET must be set in production.")

    return Settings(
        jwt_secret=jwt_secret or DEFAULT_JWT_SECRET,
        jwt_refresh_secret=jwt_refresh_secret or DEFAULT_JWT_REFRESH_SECRET,
        jwt_algorithm=_env_str("JWT_ALG", "HS256"),
        environment=environment,
        cookie_domain=_env_str("COOKIE_DOMAIN", ".ekoru.cl"),
        host=_env_str("HOST", "0.0.0.0"),
        port=_env_int("PORT", 5000),
        cors_origins=_env_list("CORS_ORIGINS", DEFAULT_CORS_ORIGINS),
        log_level=_env_str("LOG_LEVEL", "INFO").upper(),
        database_url=os.environ.get("DATABASE_URL", "").strip(),
        db_pool_min_size=_env_int("DB_POOL_MIN_SIZE", 1),
        db_pool_max_size=_env_int("DB_POOL_MAX_SIZE", 5),
    )
