"""
Retry policy - classifies failures and computes exponential backoff.

Only 5xx responses and transient transport failures are retried. 4xx
responses, serialization failures and successful statuses never are.
"""

from __future__ import annotations
import random
from dataclasses import dataclass
from typing import Optional, Tuple, Type

import httpx

from ..config.client_config import ClientConfiguration

# Failures that can succeed on a fresh attempt. UnsupportedProtocol and
# LocalProtocolError are deliberately absent: they fail identically every time.
TRANSIENT_ERRORS: Tuple[Type[BaseException], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for retry behavior. ``attempt_index`` is zero-based."""
    max_retries: int = 3
    base_delay_s: float = 1.0
    max_delay_s: Optional[float] = None
    jitter_ratio: float = 0.0

    @classmethod
    def from_config(cls, config: ClientConfiguration) -> RetryPolicy:
        return cls(
            max_retries=config.max_retries,
            base_delay_s=config.retry_delay_ms / 1000.0,
        )

    @staticmethod
    def is_retryable_status(status_code: int) -> bool:
        return 500 <= status_code <= 599

    @staticmethod
    def is_transient(exc: BaseException) -> bool:
        return isinstance(exc, TRANSIENT_ERRORS)

    def has_attempts_left(self, attempt_index: int) -> bool:
        return attempt_index < max(0, self.max_retries)

    def should_retry_status(self, status_code: int, attempt_index: int) -> bool:
        """True when a response with ``status_code`` on attempt ``attempt_index`` warrants another attempt."""
        return self.is_retryable_status(status_code) and self.has_attempts_left(attempt_index)

    def should_retry_exception(self, exc: BaseException, attempt_index: int) -> bool:
        """True when a transport failure on attempt ``attempt_index`` warrants another attempt."""
        return self.is_transient(exc) and self.has_attempts_left(attempt_index)

    def backoff_seconds(self, attempt_index: int) -> float:
        """
        Exponential backoff: 0 -> base, 1 -> base*2, 2 -> base*4, ...
        Capped at ``max_delay_s`` when set; jitter spreads +/- ``jitter_ratio``.
        """
        delay = max(0.0, self.base_delay_s) * (2 ** attempt_index)
        if self.max_delay_s is not None:
            delay = min(delay, self.max_delay_s)
        if self.jitter_ratio > 0 and delay > 0:
            delay = random.uniform(delay * (1.0 - self.jitter_ratio), delay * (1.0 + self.jitter_ratio))
        return delay
