"""Configuration: layered library settings and the immutable client configuration."""

from .client_config import VALID_LOGGING_LEVELS, ClientConfiguration
from .properties import load_properties, parse_properties
from .settings import LibSettings, get_settings, reload_settings

__all__ = [
    "VALID_LOGGING_LEVELS",
    "ClientConfiguration",
    "LibSettings",
    "get_settings",
    "load_properties",
    "parse_properties",
    "reload_settings",
]
