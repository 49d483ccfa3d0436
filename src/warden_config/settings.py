"""Application settings loaded from environment variables.

Configuration file discovery (in priority order):
1. OS environment variables (always highest priority)
2. WARDEN_ENV_FILE environment variable (path to .env file)
3. config/.env.dev - local development
4. config/.env - production/Docker

Uses pydantic-settings for automatic type coercion and validation.
Token lifetimes are parsed here so a malformed duration stops the process
at start-up instead of failing on the first login.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import SecretStr, computed_field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from warden_config.durations import parse_duration

MIN_SECRET_LENGTH = 32


def _find_project_root() -> Path:
    """Find the project root directory."""
    current = Path(__file__).resolve().parent

    for parent in [current, *current.parents]:
        if (parent / "config").is_dir():
            return parent
        if (parent / ".git").is_dir():
            return parent
        if (parent / "pyproject.toml").is_file():
            return parent

    return Path(__file__).resolve().parents[2]


def get_config_dir() -> Path:
    """Get the config directory path."""
    return _find_project_root() / "config"


def _resolve_env_file_path() -> Path | None:
    """Resolve the .env file path.

    Priority:
    1. WARDEN_ENV_FILE env var (full path)
    2. config/.env.dev (local development)
    3. config/.env (production)
    """
    env_file_path = os.environ.get("WARDEN_ENV_FILE")
    if env_file_path:
        path = Path(env_file_path)
        if not path.is_absolute():
            path = _find_project_root() / path
        if path.exists():
            return path

    config_dir = get_config_dir()

    dev_env = config_dir / ".env.dev"
    if dev_env.exists():
        return dev_env

    prod_env = config_dir / ".env"
    if prod_env.exists():
        return prod_env

    return None


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Values are loaded from:
    1. OS environment variables (highest priority)
    2. .env file (config/.env.dev or config/.env)
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_file=_resolve_env_file_path(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Security (MUST be set - app fails without these)
    jwt_access_secret_key: SecretStr
    jwt_refresh_secret_key: SecretStr

    # JWT
    jwt_algorithm: Literal["HS256", "HS384", "HS512"] = "HS256"
    jwt_access_token_ttl: str = "24h"
    jwt_refresh_token_ttl: str = "7d"

    # Password policy (PASSWORD_ prefix)
    password_min_length: int = 8
    password_require_uppercase: bool = True
    password_require_lowercase: bool = True
    password_require_digit: bool = True
    password_require_special: bool = True
    bcrypt_rounds: int = 12

    # Registration
    default_role: Literal["customer", "rider", "staff", "admin"] = "customer"

    # Logging (LOG_ prefix)
    log_level: str = "INFO"

    @field_validator("jwt_access_secret_key", "jwt_refresh_secret_key")
    @classmethod
    def _validate_secret(cls, v: SecretStr) -> SecretStr:
        if len(v.get_secret_value()) < MIN_SECRET_LENGTH:
            msg = f"JWT secret keys must be at least {MIN_SECRET_LENGTH} characters"
            raise ValueError(msg)
        return v

    @field_validator("jwt_access_token_ttl", "jwt_refresh_token_ttl")
    @classmethod
    def _validate_ttl(cls, v: str) -> str:
        parse_duration(v)
        return v

    @field_validator("password_min_length")
    @classmethod
    def _validate_min_length(cls, v: int) -> int:
        if not 4 <= v <= 72:
            msg = "password_min_length must be between 4 and 72"
            raise ValueError(msg)
        return v

    @field_validator("bcrypt_rounds")
    @classmethod
    def _validate_rounds(cls, v: int) -> int:
        if not 4 <= v <= 31:
            msg = "bcrypt_rounds must be between 4 and 31"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def _validate_distinct_secrets(self) -> Settings:
        access = self.jwt_access_secret_key.get_secret_value()
        if access == self.jwt_refresh_secret_key.get_secret_value():
            msg = "Access and refresh tokens must be signed with different secrets"
            raise ValueError(msg)
        return self

    # Computed properties
    @computed_field  # type: ignore[prop-decorator]
    @property
    def access_token_ttl_seconds(self) -> int:
        """Access token lifetime in seconds."""
        return parse_duration(self.jwt_access_token_ttl)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def refresh_token_ttl_seconds(self) -> int:
        """Refresh token lifetime in seconds."""
        return parse_duration(self.jwt_refresh_token_ttl)


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings.

    Required fields (jwt_access_secret_key, jwt_refresh_secret_key) must be
    provided via environment variables or .env file.
    """
    return Settings()  # type: ignore[call-arg]  # pydantic-settings loads from env


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for tests)."""
    get_settings.cache_clear()
