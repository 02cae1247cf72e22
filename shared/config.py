"""
Shared configuration management for the Lab Access layer.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AccessConfig(BaseSettings):
    """Configuration for the entitlement store, adapters and gate."""

    model_config = SettingsConfigDict(
        env_prefix="ACCESS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")
    service_name: str = Field(default="entitlements")

    # Hosted data API (PostgREST)
    data_api_url: str = Field(default="http://localhost:54321")
    data_api_key: str = Field(default="")
    effective_relation: str = Field(default="entitlements_effective")
    base_relation: str = Field(default="entitlements")
    request_timeout_seconds: float = Field(default=10.0, gt=0)

    # Session tokens issued by the hosted auth service; no session verifies while unset
    jwt_secret: str = Field(default="")
    jwt_audience: Optional[str] = Field(default="authenticated")
    jwt_algorithm: str = Field(default="HS256")

    # Resolution policy
    enforce_validity_window: bool = Field(default=True)

    # Post-checkout activation polling
    activation_poll_interval_seconds: float = Field(default=3.0, gt=0)
    activation_poll_timeout_seconds: Optional[float] = Field(default=60.0)


def get_config(**overrides) -> AccessConfig:
    """Get configuration, applying explicit overrides over the environment."""
    return AccessConfig(**overrides)
