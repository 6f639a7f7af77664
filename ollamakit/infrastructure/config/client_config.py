"""
Client configuration - immutable, validated inputs for the transport.

A ``ClientConfiguration`` is always valid: construction validates every
field and raises ``ConfigurationError`` naming the first bad one. The
``with_*`` helpers derive new instances instead of mutating.
"""

from __future__ import annotations
import dataclasses
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional
from urllib.parse import urlsplit

from ...domain.errors import ConfigurationError
from .settings import LibSettings, get_settings

VALID_LOGGING_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")


def _require(condition: bool, field_name: str, message: str) -> None:
    if not condition:
        raise ConfigurationError(message, field=field_name)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_http_url(value: str) -> bool:
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return parts.scheme in ("http", "https") and bool(parts.netloc)


@dataclass(frozen=True)
class ClientConfiguration:
    """Everything the transport needs, fixed for the life of a client."""
    base_url: str
    connect_timeout_ms: int
    request_timeout_ms: int
    socket_timeout_ms: int
    user_agent: str
    max_retries: int
    retry_delay_ms: int
    logging_enabled: bool
    logging_level: str
    custom_headers: Mapping[str, str] = field(default_factory=dict, hash=False)
    log_request_body: bool = False
    log_response_body: bool = False
    max_connections: int = 10
    keep_alive: bool = True

    def __post_init__(self) -> None:
        _require(isinstance(self.base_url, str) and bool(self.base_url.strip()),
                 "base_url", "Base URL cannot be blank")
        _require(_is_http_url(self.base_url.strip()),
                 "base_url", f"Base URL must be an http or https URL: {self.base_url!r}")
        for name in ("connect_timeout_ms", "request_timeout_ms", "socket_timeout_ms"):
            value = getattr(self, name)
            _require(_is_number(value) and value > 0, name,
                     f"{name.replace('_ms', '').replace('_', ' ').capitalize()} must be positive")
        _require(isinstance(self.user_agent, str) and bool(self.user_agent.strip()),
                 "user_agent", "User agent cannot be blank")
        _require(_is_number(self.max_retries) and self.max_retries >= 0,
                 "max_retries", "Max retries must be non-negative")
        _require(_is_number(self.retry_delay_ms) and self.retry_delay_ms >= 0,
                 "retry_delay_ms", "Retry delay must be non-negative")
        _require(self.logging_level in VALID_LOGGING_LEVELS, "logging_level",
                 f"Logging level must be one of: {', '.join(VALID_LOGGING_LEVELS)}")
        _require(_is_number(self.max_connections) and self.max_connections > 0,
                 "max_connections", "Connection pool size must be positive")
        object.__setattr__(self, "base_url", self.base_url.strip())
        object.__setattr__(self, "custom_headers", MappingProxyType(dict(self.custom_headers)))

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def from_settings(cls, settings: Optional[LibSettings] = None) -> ClientConfiguration:
        """Build from the layered library settings."""
        s = settings or get_settings()
        return cls(
            base_url=s.base_url or "",
            connect_timeout_ms=s.connection_timeout,
            request_timeout_ms=s.request_timeout,
            socket_timeout_ms=s.socket_timeout,
            user_agent=s.user_agent,
            max_retries=s.max_retries,
            retry_delay_ms=s.retry_delay,
            logging_enabled=s.logging_enabled,
            logging_level=s.logging_level.upper(),
            log_request_body=s.logging_request_body,
            log_response_body=s.logging_response_body,
            max_connections=s.connection_pool_size,
            keep_alive=s.keep_alive,
        )

    @classmethod
    def for_testing(
        cls,
        base_url: str = "http://localhost:11434",
        connect_timeout_ms: int = 5000,
        request_timeout_ms: int = 30000,
        socket_timeout_ms: int = 5000,
        custom_headers: Optional[Mapping[str, str]] = None,
    ) -> ClientConfiguration:
        """No retries, no logging."""
        return cls(
            base_url=base_url,
            connect_timeout_ms=connect_timeout_ms,
            request_timeout_ms=request_timeout_ms,
            socket_timeout_ms=socket_timeout_ms,
            user_agent="ollama-kit-test/1.0.0",
            max_retries=0,
            retry_delay_ms=0,
            logging_enabled=False,
            logging_level="ERROR",
            custom_headers=custom_headers or {},
        )

    # ------------------------------------------------------------------
    # Derivation
    # ------------------------------------------------------------------

    def with_headers(self, headers: Mapping[str, str]) -> ClientConfiguration:
        return dataclasses.replace(self, custom_headers={**self.custom_headers, **headers})

    def with_header(self, name: str, value: str) -> ClientConfiguration:
        return self.with_headers({name: value})

    def with_logging(self, enabled: bool, level: Optional[str] = None) -> ClientConfiguration:
        return dataclasses.replace(
            self,
            logging_enabled=enabled,
            logging_level=(level or self.logging_level).upper(),
        )

    def with_timeouts(
        self,
        connect_timeout_ms: Optional[int] = None,
        request_timeout_ms: Optional[int] = None,
        socket_timeout_ms: Optional[int] = None,
    ) -> ClientConfiguration:
        return dataclasses.replace(
            self,
            connect_timeout_ms=self.connect_timeout_ms if connect_timeout_ms is None else connect_timeout_ms,
            request_timeout_ms=self.request_timeout_ms if request_timeout_ms is None else request_timeout_ms,
            socket_timeout_ms=self.socket_timeout_ms if socket_timeout_ms is None else socket_timeout_ms,
        )

    def with_retry(self, max_retries: int, retry_delay_ms: Optional[int] = None) -> ClientConfiguration:
        return dataclasses.replace(
            self,
            max_retries=max_retries,
            retry_delay_ms=self.retry_delay_ms if retry_delay_ms is None else retry_delay_ms,
        )

    def with_verbose_bodies(self, request: bool = True, response: bool = True) -> ClientConfiguration:
        return dataclasses.replace(self, log_request_body=request, log_response_body=response)
