"""
ollamakit - async client library for the Ollama HTTP API.
"""

__version__ = "1.0.0"

from .domain.errors import (
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
    "OllamaClient",
    "ClientConfiguration",
    "LibSettings",
    "CancellationError",
    "ConfigurationError",
    "ErrorKind",
    "HttpError",
    "ModelNotFoundError",
    "NetworkError",
    "OllamaError",
    "SerializationError",
]


# Lazy attribute access so `import ollamakit.domain...` does not pull in the
# HTTP and settings stacks.
def __getattr__(name: str):  # pragma: no cover - simple lazy loader
    if name == "OllamaClient":
        from .client import OllamaClient as _C
        return _C
    if name == "ClientConfiguration":
        from .infrastructure.config.client_config import ClientConfiguration as _CC
        return _CC
    if name == "LibSettings":
        from .infrastructure.config.settings import LibSettings as _S
        return _S
    raise AttributeError(name)
