"""Configuration management for Cast Locator."""

import json
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DiscoveryConfig(BaseModel):
    """Configuration for the SSDP probe window."""

    timeout_seconds: float = Field(default=2.0, allow_inf_nan=False, description="Probe window length in seconds. Non-positive values fall back to 2.0.")
    probe_interval_seconds: float = Field(default=0.0, ge=0, le=5, description="Optional pause between M-SEARCH sends. 0 resends as soon as the previous send completes.")
    bind_address: str = Field(default="0.0.0.0", description="Local address the UDP endpoint binds to.")
    bind_port: int = Field(default=0, ge=0, le=65535, description="Local UDP port. 0 lets the OS pick one.")
    multicast_ttl: int = Field(default=2, ge=1, le=255, description="TTL for outgoing multicast datagrams.")


class FetchConfig(BaseModel):
    """Configuration for retrieving device-description documents."""

    max_concurrent_fetches: int = Field(default=1, ge=1, le=64, description="Description documents fetched in parallel. 1 validates candidates one at a time.")
    ssl_verify: bool = Field(default=True, description="Verify certificates for https description URIs.")


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format ('json' or 'console')")


class Config(BaseSettings):
    """Main configuration for Cast Locator. Loads from environment variables prefixed with CAST_LOCATOR_."""

    model_config = SettingsConfigDict(
        env_prefix='CAST_LOCATOR_',
        env_nested_delimiter='__',  # e.g., CAST_LOCATOR_DISCOVERY__TIMEOUT_SECONDS
        extra='ignore',
        env_file='.env',
        env_file_encoding='utf-8'
    )

    discovery: DiscoveryConfig = Field(default_factory=DiscoveryConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, file_path: Path) -> "Config":
        """Create configuration strictly from a JSON file.

        Environment variables are not layered on top; use ``Config()`` for that.
        """
        with open(file_path) as f:
            config_data = json.load(f)
        return cls.model_validate(config_data)
