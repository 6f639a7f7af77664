"""
Configuration settings - layered key-value configuration for the client.

Uses pydantic-settings for validation and layering. Sources, highest
precedence first: explicit init values, process environment
(``OLLAMAKIT_*``), the ``ollamakit.properties`` file, built-in defaults.
"""

from __future__ import annotations
import os
from typing import Dict, Optional, Tuple, Type

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from .properties import (
    CONFIG_FILE_ENV,
    ENV_PREFIX,
    PropertiesFileSource,
    env_name,
    key_from_env,
    load_properties,
)


class LibSettings(BaseSettings):
    """Library-wide settings under the ``ollama.*`` key namespace."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, case_sensitive=False, extra="ignore")

    # Server
    host: str = "localhost"
    port: int = 11434
    protocol: str = "http"
    base_url: Optional[str] = None

    # Connection (milliseconds)
    connection_timeout: int = 30000
    request_timeout: int = 300000
    socket_timeout: int = 30000

    # Client
    user_agent: str = "ollama-kit/1.0.0"
    max_retries: int = 3
    retry_delay: int = 1000

    # Streaming
    streaming_enabled: bool = True
    streaming_buffer_size: int = 8192

    # Model defaults
    default_model: str = "llama3.2"
    default_temperature: float = 0.8
    default_top_p: float = 0.9
    default_top_k: int = 40

    # Response format
    default_response_format: str = "json"
    response_include_context: bool = False

    # Logging
    logging_enabled: bool = True
    logging_level: str = "INFO"
    logging_request_body: bool = False
    logging_response_body: bool = False

    # Performance
    connection_pool_size: int = 10
    keep_alive: bool = True

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, env_settings, PropertiesFileSource(settings_cls))

    @field_validator("logging_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("protocol")
    @classmethod
    def _lower_protocol(cls, v: str) -> str:
        return v.strip().lower()

    @model_validator(mode="after")
    def _derive_base_url(self) -> "LibSettings":
        if not self.base_url:
            self.base_url = f"{self.protocol}://{self.host}:{self.port}"
        return self

    def get_custom_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Look up any ``ollama.*`` key: environment override first, then the file."""
        value = os.getenv(env_name(key))
        if value is not None:
            return value
        return load_properties().get(key, default)

    def all_properties(self) -> Dict[str, str]:
        """File properties merged with ``OLLAMAKIT_*`` environment overrides."""
        merged = dict(load_properties())
        for name, value in os.environ.items():
            if name.upper().startswith(ENV_PREFIX) and name.upper() != CONFIG_FILE_ENV:
                merged[key_from_env(name.upper())] = value
        return merged


# Global settings instance
_settings: Optional[LibSettings] = None


def get_settings() -> LibSettings:
    """Get global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = LibSettings()
    return _settings


def reload_settings() -> LibSettings:
    """Reload settings from environment and file (for testing)."""
    global _settings
    _settings = LibSettings()
    return _settings
