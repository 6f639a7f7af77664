"""
Error mapping - folds foreign exceptions into the taxonomy.

This is the only place where httpx, asyncio and OS exceptions are turned into
``OllamaError`` variants; everything above the transport sees the taxonomy only.
"""

from __future__ import annotations
import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

from ...domain.errors import CancellationError, NetworkError, OllamaError


def _describe(exc: BaseException) -> str:
    text = str(exc).strip()
    return text or type(exc).__name__


def map_exception(exc: BaseException) -> OllamaError:
    """Map any exception to exactly one taxonomy variant.

    Taxonomy errors pass through untouched, timeouts and transport failures
    become ``NetworkError`` and cancellation becomes ``CancellationError``.
    Anything else is treated as a network-level failure.
    """
    if isinstance(exc, OllamaError):
        return exc
    if isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError)):
        return NetworkError(f"Request timeout: {_describe(exc)}", exc)
    if isinstance(exc, asyncio.CancelledError):
        return CancellationError("Operation cancelled", exc)
    if isinstance(exc, httpx.ConnectError):
        return NetworkError(f"Connection failed: {_describe(exc)}", exc)
    return NetworkError(f"Network error: {_describe(exc)}", exc)


@asynccontextmanager
async def error_boundary() -> AsyncIterator[None]:
    """Re-raise anything escaping the block as a taxonomy error."""
    try:
        yield
    except OllamaError:
        raise
    except (Exception, asyncio.CancelledError) as exc:
        raise map_exception(exc) from exc
