"""
Result wrappers used by the decoder and the streaming API.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from ..errors import OllamaError

T = TypeVar("T")


@dataclass(frozen=True)
class ResponseOutcome(Generic[T]):
    """Either a decoded value or a taxonomy error, never both."""
    value: Optional[T] = None
    error: Optional[OllamaError] = None

    def __post_init__(self) -> None:
        if (self.value is None) == (self.error is None):
            raise ValueError("ResponseOutcome needs exactly one of value or error")

    @classmethod
    def success(cls, value: T) -> ResponseOutcome[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: OllamaError) -> ResponseOutcome[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


@dataclass(frozen=True)
class StreamFrame(ResponseOutcome[T]):
    """One decoded unit of an incremental response.

    ``index`` is the zero-based position of the unit on the wire. A frame
    carrying an error is always the last frame of its stream.
    """
    index: int = 0
