"""Application-wide configuration loading and validation."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    environment: Literal["local", "dev", "prod"] = Field(default="local")
    log_level: str = Field(default="INFO")

    # HubSpot (CRM)
    hubspot_access_token: str | None = Field(default=None)
    hubspot_base_url: str = Field(default="https://api.hubapi.com")
    hubspot_owners_page_size: int = Field(default=100, ge=1, le=500)
    contact_search_timeout_seconds: float = Field(default=8.0, gt=0)

    # Aircall (telephony)
    aircall_api_id: str | None = Field(default=None)
    aircall_api_token: str | None = Field(default=None)
    aircall_base_url: str = Field(default="https://api.aircall.io")
    aircall_users_page_size: int = Field(default=50, ge=1, le=50)

    # Directory collection
    directory_page_timeout_seconds: float = Field(
        default=8.0,
        gt=0,
        description="Timeout applied to every single page request.",
    )
    directory_max_pages: int = Field(
        default=1000,
        ge=1,
        description="Upper bound on pages per directory; guards against cursors that never end.",
    )

    # Owner mapping cache
    mapping_refresh_policy: Literal["background", "on_demand"] = Field(
        default="background",
        description=(
            "background: a periodic task rebuilds the mapping, lookups never wait. "
            "on_demand: lookups rebuild synchronously once the mapping is older than the TTL."
        ),
    )
    mapping_ttl_seconds: float = Field(default=3600.0, gt=0)
    mapping_refresh_interval_seconds: float = Field(default=3600.0, gt=0)

    # Shape of a successful answer to the Aircall route webhook.
    routing_response_shape: Literal["nested", "flat", "token"] = Field(default="nested")

    @field_validator("hubspot_base_url", "aircall_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
