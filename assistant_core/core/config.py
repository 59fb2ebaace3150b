"""
Configuration management for the assistant core.

Provides centralized, validated configuration from environment variables
with proper type checking and defaults.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from assistant_core.contracts.entities import DataMode

PRODUCTS = ("erika", "marvin")


def _parse_flag(v) -> bool:
    if isinstance(v, str):
        return v.lower() in ("1", "true", "yes", "y")
    return bool(v)


class ApiConfig(BaseSettings):
    """Assistant backend API configuration."""

    base_url: str = Field(default="http://127.0.0.1:8112", alias="ASSISTANT_API_URL")
    gateway_url: Optional[str] = Field(default=None, alias="ASSISTANT_GATEWAY_URL")
    api_key: Optional[str] = Field(default=None, alias="ASSISTANT_API_KEY")

    request_timeout: float = Field(default=30.0, alias="ASSISTANT_REQUEST_TIMEOUT")
    max_retries: int = Field(default=3, alias="ASSISTANT_MAX_RETRIES")
    fallback_to_mock: bool = Field(default=True, alias="ASSISTANT_FALLBACK_TO_MOCK")

    @field_validator("fallback_to_mock", mode="before")
    @classmethod
    def parse_fallback(cls, v):
        return _parse_flag(v)

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")


class StoreConfig(BaseSettings):
    """State store configuration."""

    product: str = Field(default="marvin", alias="ASSISTANT_PRODUCT")
    data_mode: DataMode = Field(default=DataMode.MOCK, alias="ASSISTANT_DATA_MODE")
    snapshot_path: Optional[str] = Field(default=None, alias="ASSISTANT_SNAPSHOT_PATH")
    autosave: bool = Field(default=False, alias="ASSISTANT_AUTOSAVE")

    @field_validator("product", mode="before")
    @classmethod
    def parse_product(cls, v):
        value = str(v).strip().lower()
        if value not in PRODUCTS:
            raise ValueError(f"product must be one of {', '.join(PRODUCTS)}")
        return value

    @field_validator("data_mode", mode="before")
    @classmethod
    def parse_data_mode(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("autosave", mode="before")
    @classmethod
    def parse_autosave(cls, v):
        return _parse_flag(v)

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")


class Settings(BaseSettings):
    """Main application settings."""

    # Environment
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")

    # Component configurations
    api: ApiConfig = Field(default_factory=ApiConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)

    @field_validator("debug", mode="before")
    @classmethod
    def parse_debug(cls, v):
        return _parse_flag(v)

    def model_post_init(self, __context) -> None:
        # Initialize sub-configurations
        self.api = ApiConfig()
        self.store = StoreConfig()

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


# Global settings instance
settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global settings
    settings = None


def validate_required_settings(for_mode: str = "mock") -> List[str]:
    """
    Validate that required settings are present for a data mode.

    Args:
        for_mode: "mock" or "live"

    Returns:
        List of missing required settings
    """
    missing = []
    try:
        config = get_settings()

        if for_mode == DataMode.LIVE.value:
            if not config.api.base_url:
                missing.append("ASSISTANT_API_URL")
            if config.api.request_timeout <= 0:
                missing.append("ASSISTANT_REQUEST_TIMEOUT (must be positive)")

        if config.store.autosave and not config.store.snapshot_path:
            missing.append("ASSISTANT_SNAPSHOT_PATH (required when ASSISTANT_AUTOSAVE is set)")

    except Exception as e:
        missing.append(f"Configuration error: {e}")

    return missing


def configuration_summary() -> Dict[str, str]:
    """Return the current configuration as display-ready strings."""
    config = get_settings()
    return {
        "Environment": config.environment,
        "Debug Mode": str(config.debug),
        "Product": config.store.product,
        "Data Mode": DataMode(config.store.data_mode).value,
        "API URL": config.api.base_url,
        "Gateway URL": config.api.gateway_url or "-",
        "API Key": "✓" if config.api.api_key else "✗",
        "Request Timeout": f"{config.api.request_timeout:.1f}s",
        "Max Retries": str(config.api.max_retries),
        "Fallback To Mock": str(config.api.fallback_to_mock),
        "Snapshot Path": config.store.snapshot_path or "-",
        "Autosave": str(config.store.autosave),
    }


def print_configuration_summary():
    """Print a summary of the current configuration for debugging."""
    try:
        print("=== Assistant Core Configuration Summary ===")
        for key, value in configuration_summary().items():
            print(f"{key}: {value}")
        print("=" * 44)
    except Exception as e:
        print(f"Error loading configuration: {e}")
