"""
Error taxonomy - the closed set of failures the client can surface.

Every failure that crosses the public API is exactly one of the six variants
below. Callers can match on the classes (each defines ``__match_args__``) or
on the ``kind`` tag.
"""

from __future__ import annotations
import asyncio
import json
from enum import Enum
from typing import Any, Optional, Tuple


class ErrorKind(Enum):
    """Tag identifying a taxonomy variant."""
    HTTP = "http"
    NETWORK = "network"
    SERIALIZATION = "serialization"
    CONFIGURATION = "configuration"
    MODEL_NOT_FOUND = "model_not_found"
    CANCELLATION = "cancellation"


class OllamaError(Exception):
    """Base class for every error raised by the client."""

    kind: ErrorKind

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def _fields(self) -> Tuple[Any, ...]:
        return (self.message,)

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self._fields() == other._fields()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self._fields()))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class HttpError(OllamaError):
    """The server answered with a non-2xx status."""

    kind = ErrorKind.HTTP
    __match_args__ = ("status_code", "response_body", "message")

    def __init__(
        self,
        status_code: int,
        response_body: Optional[str] = None,
        message: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message or f"HTTP {status_code}", cause)
        self.status_code = status_code
        self.response_body = response_body

    def _fields(self) -> Tuple[Any, ...]:
        return (self.status_code, self.response_body, self.message)

    @property
    def error_detail(self) -> Optional[str]:
        """The server's own error text, taken from an ``{"error": ...}`` body when present."""
        body = (self.response_body or "").strip()
        if not body:
            return None
        try:
            data = json.loads(body)
        except ValueError:
            return body
        if isinstance(data, dict):
            detail = data.get("error") or data.get("message")
            if detail is not None:
                return str(detail)
        return body

    def __repr__(self) -> str:
        return f"HttpError(status_code={self.status_code}, message={self.message!r})"


class NetworkError(OllamaError):
    """Connection failure, DNS failure, timeout, or a broken body mid-read."""

    kind = ErrorKind.NETWORK
    __match_args__ = ("message", "cause")

    def __init__(self, message: str = "Network error", cause: Optional[BaseException] = None):
        super().__init__(message, cause)


class SerializationError(OllamaError):
    """A request could not be encoded or a response could not be decoded."""

    kind = ErrorKind.SERIALIZATION
    __match_args__ = ("message", "cause")

    def __init__(
        self,
        message: str = "Serialization error",
        cause: Optional[BaseException] = None,
        *,
        raw_excerpt: Optional[str] = None,
        position: Optional[int] = None,
    ):
        super().__init__(message, cause)
        self.raw_excerpt = raw_excerpt
        self.position = position

    def _fields(self) -> Tuple[Any, ...]:
        return (self.message, self.raw_excerpt, self.position)


class ConfigurationError(OllamaError):
    """Invalid configuration, or use of a client that has been closed."""

    kind = ErrorKind.CONFIGURATION
    __match_args__ = ("message", "field")

    def __init__(
        self,
        message: str = "Configuration error",
        cause: Optional[BaseException] = None,
        *,
        field: Optional[str] = None,
    ):
        super().__init__(message, cause)
        self.field = field

    def _fields(self) -> Tuple[Any, ...]:
        return (self.message, self.field)


class ModelNotFoundError(OllamaError):
    """A model-scoped operation answered 404."""

    kind = ErrorKind.MODEL_NOT_FOUND
    __match_args__ = ("model_name", "message")

    def __init__(self, model_name: str, message: Optional[str] = None):
        super().__init__(message or f"Model '{model_name}' not found")
        self.model_name = model_name

    def _fields(self) -> Tuple[Any, ...]:
        return (self.model_name, self.message)


class CancellationError(OllamaError, asyncio.CancelledError):
    """The caller cancelled an outstanding call.

    Also an ``asyncio.CancelledError`` so task groups and timeouts still see a
    cancellation.
    """

    kind = ErrorKind.CANCELLATION
    __match_args__ = ("message",)

    def __init__(self, message: str = "Operation cancelled", cause: Optional[BaseException] = None):
        OllamaError.__init__(self, message, cause)


__all__ = [
    "ErrorKind",
    "OllamaError",
    "HttpError",
    "NetworkError",
    "SerializationError",
    "ConfigurationError",
    "ModelNotFoundError",
    "CancellationError",
]
