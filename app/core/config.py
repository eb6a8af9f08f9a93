"""
Application configuration models and helpers.

Centralizes settings management so the FastAPI app and the operator scripts
share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

import os

from pydantic import AnyHttpUrl, Field, HttpUrl, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_env_file(path: str = ".env") -> None:
    """Best-effort load key=value pairs from a .env file without extra deps."""
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


_load_env_file()


DEFAULT_XERO_SCOPES = (
    "openid profile email offline_access "
    "accounting.contacts.read accounting.settings.read"
)


class XeroSettings(BaseSettings):
    """OAuth client registration for the Xero developer app."""

    model_config = SettingsConfigDict(extra="ignore")

    client_id: str = Field(..., validation_alias="XERO_CLIENT_ID")
    client_secret: str = Field(..., validation_alias="XERO_CLIENT_SECRET")
    redirect_uri: AnyHttpUrl = Field(..., validation_alias="XERO_REDIRECT_URI")
    scopes: str = Field(
        DEFAULT_XERO_SCOPES,
        validation_alias="XERO_SCOPES",
        description="Space or comma separated list of requested scopes.",
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def _normalize_scopes(cls, value: str | list[str] | tuple[str, ...]) -> str:
        """Xero expects a single space-delimited scope string."""
        if isinstance(value, (list, tuple)):
            parts = [str(scope).strip() for scope in value]
        else:
            parts = str(value).replace(",", " ").split()
        return " ".join(scope for scope in parts if scope)


class OAuthSettings(BaseSettings):
    """OAuth flow configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    state_ttl_seconds: int = Field(300, validation_alias="OAUTH_STATE_TTL")


class StorageSettings(BaseSettings):
    """Locations of the local blob root and the session/cache database."""

    model_config = SettingsConfigDict(extra="ignore")

    root: str = Field("storage/app", validation_alias="STORAGE_ROOT")
    database_path: str = Field(
        "storage/xero_integration.db", validation_alias="STORAGE_DB_PATH"
    )
    session_lifetime_seconds: int = Field(7200, validation_alias="SESSION_LIFETIME")


class SecuritySettings(BaseSettings):
    """Security-related configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "Secret used to derive the symmetric key for encrypting the stored "
            "token file. Tokens are stored as plain JSON when omitted."
        ),
    )
    session_secret: Optional[str] = Field(
        None,
        validation_alias="APP_SESSION_SECRET",
        description="Signing key for the session cookie.",
    )


class AppSettings(BaseSettings):
    """Root settings object for the FastAPI application."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    environment: str = Field("development", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    api_prefix: str = Field("/api", validation_alias="APP_API_PREFIX")
    frontend_base_url: Optional[HttpUrl] = Field(
        None,
        validation_alias="FRONTEND_BASE_URL",
        description="Optional URL for redirecting browsers back to the front-end.",
    )
    cors_allowed_origins: str = Field(
        "",
        validation_alias="CORS_ALLOWED_ORIGINS",
        description="Comma separated origins allowed to call the API.",
    )
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    xero: XeroSettings = Field(default_factory=XeroSettings)

    @property
    def cors_origins(self) -> list[str]:
        return [
            origin.strip()
            for origin in self.cors_allowed_origins.split(",")
            if origin.strip()
        ]

    @property
    def session_secret(self) -> str:
        return self.security.session_secret or self.xero.client_secret


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()  # type: ignore[call-arg]


__all__ = [
    "AppSettings",
    "OAuthSettings",
    "SecuritySettings",
    "StorageSettings",
    "XeroSettings",
    "get_settings",
]
