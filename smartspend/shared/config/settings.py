# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Environment-driven settings for the API server and the sync client.

Every field reads a flat environment variable (see the aliases); a ``.env``
file in the working directory is honoured as well.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import BeforeValidator, Field, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from smartspend.shared.logging import logger

_ENV = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
    populate_by_name=True,
)

_WEAK_SECRETS = frozenset({"", "dev", "development", "test", "secret", "changeme"})
MIN_SECRET_LENGTH = 32


def _as_flag(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _as_list(value: object) -> object:
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


Flag = Annotated[bool, BeforeValidator(_as_flag)]
CommaList = Annotated[list[str], NoDecode, BeforeValidator(_as_list)]


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///smartspend.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = _ENV


class AuthConfig(BaseSettings):
    """Session token signing; the key itself lives on ``AppConfig.secret_key``."""

    token_algorithm: str = Field("HS256", alias="TOKEN_ALGORITHM")
    token_ttl_seconds: int = Field(60 * 60 * 24 * 7, ge=60, alias="TOKEN_TTL_SECONDS")
    token_issuer: str = Field("smartspend", alias="TOKEN_ISSUER")

    model_config = _ENV


class SecurityConfig(BaseSettings):
    allowed_origins: CommaList = Field(["*"], alias="ALLOWED_ORIGINS")
    # Signup and login throttling; limits are set per route.
    enable_rate_limit: Flag = Field(True, alias="ENABLE_RATE_LIMIT")
    enable_hsts: Flag = Field(False, alias="ENABLE_HSTS")

    model_config = _ENV


class ClientConfig(BaseSettings):
    """Settings for ``smartspend.client``: where the API lives and how hard to retry."""

    api_base_url: str = Field("http://localhost:5000/api", alias="SMARTSPEND_API_URL")
    cache_dir: Path = Field(Path(".smartspend"), alias="SMARTSPEND_CACHE_DIR")
    request_timeout: float = Field(10.0, ge=0.1, alias="CLIENT_TIMEOUT")
    sync_retries: int = Field(2, ge=0, alias="CLIENT_SYNC_RETRIES")
    backoff_base: float = Field(0.5, ge=0.0, alias="CLIENT_BACKOFF_BASE")
    backoff_cap: float = Field(8.0, ge=0.1, alias="CLIENT_BACKOFF_CAP")
    circuit_fail_threshold: int = Field(3, ge=1, alias="CLIENT_CIRCUIT_THRESHOLD")
    circuit_reset_timeout: float = Field(30.0, ge=0.1, alias="CLIENT_CIRCUIT_RESET")

    model_config = _ENV


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    secret_key: str = Field("dev", alias="SECRET_KEY")
    debug_logging: Flag = Field(False, alias="DEBUG_LOGGING")

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)

    model_config = SettingsConfigDict(**_ENV, validate_assignment=True)

    @model_validator(mode="after")
    def _guard_production(self) -> "AppConfig":
        if not self.is_production():
            return self

        if self.secret_key.lower() in _WEAK_SECRETS or len(self.secret_key) < MIN_SECRET_LENGTH:
            raise SystemExit(
                "SECRET_KEY is missing or weak; production needs at least "
                f"{MIN_SECRET_LENGTH} random characters to sign session tokens"
            )

        if "*" in self.security.allowed_origins:
            logger.warning("config: CORS accepts any origin in production")
        if not self.security.enable_hsts:
            logger.warning("config: HSTS is off in production")
        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()


__all__ = [
    "AppConfig",
    "AuthConfig",
    "ClientConfig",
    "DatabaseConfig",
    "SecurityConfig",
    "load_config",
]
