"""Application configuration via Pydantic BaseSettings."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic import BaseModel, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"


class TenantNotConfiguredError(LookupError):
    """Raised when no conferencing server is configured for a tenant alias."""

    def __init__(self, tenant_alias: str) -> None:
        self.tenant_alias = tenant_alias
        super().__init__(f"No conference configuration for tenant: {tenant_alias}")


class ConferenceConfig(BaseModel):
    """Per-tenant conferencing server settings. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    base_url: str
    secret: str


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Environment
    ENVIRONMENT: Environment = Environment.development

    # Logging
    LOG_LEVEL: str = "INFO"

    # Conferencing server
    CONFERENCE_TIMEOUT: float = 10.0  # seconds, per call
    CONFERENCE_ENVELOPE_KEY: str = "response"  # empty string disables unwrapping

    # Tenant alias -> {"base_url": ..., "secret": ...}, JSON-encoded in env
    CONFERENCE_TENANTS: dict[str, ConferenceConfig] = {}

    def get_conference_config(self, tenant_alias: str) -> ConferenceConfig:
        """Return the conferencing server config for a tenant.

        Raises:
            TenantNotConfiguredError: If the alias has no entry.
        """
        try:
            return self.CONFERENCE_TENANTS[tenant_alias]
        except KeyError:
            raise TenantNotConfiguredError(tenant_alias) from None

    @property
    def envelope_key(self) -> str | None:
        return self.CONFERENCE_ENVELOPE_KEY or None


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()
