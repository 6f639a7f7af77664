"""Domain layer - wire records, result wrappers and the error taxonomy."""

from .errors import (
    CancellationError,
    ConfigurationError,
    ErrorKind,
    HttpError,
    ModelNotFoundError,
    NetworkError,
    OllamaError,
    SerializationError,
)

__all__ = [
    "CancellationError",
    "ConfigurationError",
    "ErrorKind",
    "HttpError",
    "ModelNotFoundError",
    "NetworkError",
    "OllamaError",
    "SerializationError",
]
