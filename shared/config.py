"""
Shared configuration management for the Booking Gateway.
"""

from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_API_URL = "http://localhost:5000"
DEFAULT_ASSET_FALLBACK_URL = (
    "https://res.cloudinary.com/ddnxfpziq/image/upload/v1747146600/room-placeholder_mnyxqz.jpg"
)


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="BOOKING_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    env: str = "local"
    log_level: str = "info"

    # Listener
    host: str = "0.0.0.0"
    port: int = 8000


class GatewayConfig(BaseConfig):
    """Gateway-specific configuration."""

    service_name: str = "gateway"

    # Upstream booking API
    api_url: str = Field(
        default=DEFAULT_API_URL,
        validation_alias=AliasChoices("BOOKING_API_URL", "NEXT_PUBLIC_API_URL", "api_url"),
    )
    upstream_timeout_seconds: float = 10.0

    # Credentials
    auth_cookie_name: str = "token"

    # Room asset normalization
    asset_fallback_url: str = DEFAULT_ASSET_FALLBACK_URL
    trusted_asset_hosts: List[str] = ["cloudinary.com"]

    # How often a buffered-body request checks for caller disconnects
    disconnect_poll_seconds: float = 0.1

    @property
    def upstream_base_url(self) -> str:
        return self.api_url.rstrip("/")


def get_config(**overrides) -> GatewayConfig:
    """Get gateway configuration, applying explicit overrides over the environment."""
    return GatewayConfig(**overrides)
