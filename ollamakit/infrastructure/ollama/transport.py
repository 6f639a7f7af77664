"""
HTTP transport executor.

Owns the connection pool, timeouts, default headers, request/response logging
and the retry loop. Callers hand it a method, an API path and an optional
body; they get back a fully-read ``RawResponse`` or an open
``RawStreamHandle``. Status codes are not interpreted here beyond the retry
decision: a 404 comes back as a ``RawResponse`` like any other.
"""

from __future__ import annotations
import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Mapping, Optional, Tuple

import httpx
from pydantic import BaseModel

from ...domain.errors import ConfigurationError, SerializationError
from ..config.client_config import ClientConfiguration
from .error_mapping import error_boundary
from .retry import RetryPolicy

SleepFn = Callable[[float], Awaitable[None]]

API_ROOT = "/api/"
REDACTED = "***"
_SENSITIVE_HEADERS = frozenset({"authorization", "proxy-authorization", "cookie", "x-api-key"})
_LEVELS: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}


def api_path(path: str) -> str:
    """``chat`` / ``/chat`` / ``/api/chat`` -> ``/api/chat``."""
    stripped = path.strip()
    if stripped.startswith(API_ROOT):
        return stripped
    return API_ROOT + stripped.lstrip("/")


def redact_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    return {k: (REDACTED if k.lower() in _SENSITIVE_HEADERS else v) for k, v in headers.items()}


def encode_body(body: Any) -> Optional[bytes]:
    """Serialize a request record (or plain JSON-able data) to UTF-8 JSON."""
    if body is None:
        return None
    try:
        if isinstance(body, BaseModel):
            payload = body.model_dump(mode="json", by_alias=True, exclude_none=True)
        else:
            payload = body
        return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Failed to encode request body: {exc}", exc) from exc


@dataclass
class RawResponse:
    """A completed exchange. ``body`` is None when it could not be read."""
    method: str
    path: str
    status_code: int
    reason: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    attempts: int = 1

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("content-type")

    @property
    def text(self) -> Optional[str]:
        if self.body is None:
            return None
        return self.body.decode("utf-8", errors="replace")


class RawStreamHandle:
    """An open response whose body is consumed incrementally.

    Must be closed; use it as an async context manager or call ``aclose()``.
    """

    def __init__(self, response: httpx.Response, *, method: str, path: str, attempts: int = 1):
        self._response = response
        self.method = method
        self.path = path
        self.attempts = attempts
        self._closed = False

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def reason(self) -> str:
        return self._response.reason_phrase

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def content_type(self) -> Optional[str]:
        return self._response.headers.get("content-type")

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def closed(self) -> bool:
        return self._closed

    async def read_body(self) -> Optional[bytes]:
        """Read the whole remaining body; None if the read fails."""
        try:
            return await self._response.aread()
        except (httpx.HTTPError, OSError):
            return None

    async def lines(self) -> AsyncIterator[str]:
        """Yield body lines without their terminators, as they arrive."""
        async for line in self._response.aiter_lines():
            yield line

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._response.aclose()

    async def __aenter__(self) -> RawStreamHandle:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


class TransportExecutor:
    """Sends requests with the configured timeouts, headers and retry policy."""

    def __init__(
        self,
        config: ClientConfiguration,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_policy: Optional[RetryPolicy] = None,
        sleep_fn: Optional[SleepFn] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.config = config
        self.retry_policy = retry_policy or RetryPolicy.from_config(config)
        self.sleep_fn: SleepFn = sleep_fn or asyncio.sleep
        self.logger = logger or logging.getLogger(__name__)
        self._level = _LEVELS.get(config.logging_level, logging.INFO)
        self._request_timeout_s = config.request_timeout_ms / 1000.0
        self._closed = False

        connect_s = config.connect_timeout_ms / 1000.0
        socket_s = config.socket_timeout_ms / 1000.0
        timeout = httpx.Timeout(connect=connect_s, read=socket_s, write=socket_s, pool=connect_s)
        limits = httpx.Limits(
            max_connections=config.max_connections,
            max_keepalive_connections=config.max_connections if config.keep_alive else 0,
        )
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            headers=self.default_headers(),
            timeout=timeout,
            limits=limits,
            transport=transport,
        )

    def default_headers(self) -> Dict[str, str]:
        """Headers sent on every request; custom headers win on conflict."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.config.user_agent,
        }
        headers.update(self.config.custom_headers)
        return headers

    @property
    def closed(self) -> bool:
        return self._closed

    # ---------------- Logging ----------------
    def _emit(self, level: int, msg: str) -> None:
        if self.config.logging_enabled and level >= self._level:
            self.logger.log(level, msg)

    def _log_request(self, request: httpx.Request, attempt: int) -> None:
        suffix = f" (attempt {attempt + 1})" if attempt else ""
        self._emit(self._level, f"→ {request.method} {request.url.path}{suffix}")
        self._emit(logging.DEBUG, f"   headers: {redact_headers(request.headers)}")
        if self.config.log_request_body and request.content:
            self._emit(self._level, f"   body: {request.content.decode('utf-8', errors='replace')}")

    def _log_response(self, response: httpx.Response, attempt: int, started: float,
                      body: Optional[bytes] = None) -> None:
        elapsed_ms = (time.monotonic() - started) * 1000.0
        self._emit(
            self._level,
            f"← {response.status_code} {response.reason_phrase} {response.request.method} "
            f"{response.request.url.path} (attempt {attempt + 1}, {elapsed_ms:.0f} ms)",
        )
        if self.config.log_response_body and body:
            self._emit(self._level, f"   body: {body.decode('utf-8', errors='replace')}")

    # ---------------- Retry loop ----------------
    def _ensure_open(self) -> None:
        if self._closed:
            raise ConfigurationError("Transport executor is closed")

    async def _backoff(self, attempt: int, deadline: float, reason: str) -> None:
        delay = self.retry_policy.backoff_seconds(attempt)
        remaining = deadline - time.monotonic()
        delay = max(0.0, min(delay, remaining))
        self._emit(
            logging.WARNING,
            f"Retry {attempt + 1}/{self.retry_policy.max_retries} after {delay:.2f}s: {reason}",
        )
        await self.sleep_fn(delay)

    async def _open(self, method: str, path: str, content: Optional[bytes],
                    deadline: float) -> Tuple[httpx.Response, int, float]:
        """Send until a response is final; returns ``(response, attempts, started)`` with the body unread."""
        attempt = 0
        while True:
            request = self._client.build_request(method, path, content=content)
            self._log_request(request, attempt)
            started = time.monotonic()
            try:
                response = await self._client.send(request, stream=True)
            except httpx.HTTPError as exc:
                if not self.retry_policy.should_retry_exception(exc, attempt):
                    if self.retry_policy.is_transient(exc) and attempt:
                        self._emit(logging.ERROR, f"Giving up on {method} {path} after {attempt + 1} attempts: {exc}")
                    raise
                await self._backoff(attempt, deadline, f"{type(exc).__name__}: {exc}")
                attempt += 1
                continue

            if self.retry_policy.should_retry_status(response.status_code, attempt):
                self._log_response(response, attempt, started)
                await response.aclose()
                await self._backoff(attempt, deadline, f"HTTP {response.status_code}")
                attempt += 1
                continue

            if self.retry_policy.is_retryable_status(response.status_code) and attempt:
                self._emit(logging.ERROR, f"Giving up on {method} {path} after {attempt + 1} attempts: "
                                          f"HTTP {response.status_code}")
            return response, attempt + 1, started

    # ---------------- Public API ----------------
    async def send_unary(self, method: str, path: str, body: Any = None) -> RawResponse:
        """Send a request and read the whole response body.

        The request timeout bounds the entire call, retries and backoff included.
        """
        self._ensure_open()
        path = api_path(path)
        content = encode_body(body)
        async with error_boundary():
            return await asyncio.wait_for(self._unary(method, path, content), timeout=self._request_timeout_s)

    async def _unary(self, method: str, path: str, content: Optional[bytes]) -> RawResponse:
        deadline = time.monotonic() + self._request_timeout_s
        response, attempts, started = await self._open(method, path, content, deadline)
        try:
            try:
                body: Optional[bytes] = await response.aread()
            except httpx.HTTPError:
                # An error status is still reportable without its body.
                if 200 <= response.status_code < 300:
                    raise
                body = None
        finally:
            await response.aclose()
        self._log_response(response, attempts - 1, started, body)
        return RawResponse(
            method=method,
            path=path,
            status_code=response.status_code,
            reason=response.reason_phrase,
            headers=dict(response.headers),
            body=body,
            attempts=attempts,
        )

    async def send_streaming(self, method: str, path: str, body: Any = None) -> RawStreamHandle:
        """Send a request and return as soon as the response head arrives.

        The request timeout bounds reaching the head; the body is governed by
        the socket timeout between reads.
        """
        self._ensure_open()
        path = api_path(path)
        content = encode_body(body)
        async with error_boundary():
            deadline = time.monotonic() + self._request_timeout_s
            response, attempts, started = await asyncio.wait_for(
                self._open(method, path, content, deadline), timeout=self._request_timeout_s
            )
        self._log_response(response, attempts - 1, started)
        return RawStreamHandle(response, method=method, path=path, attempts=attempts)

    async def close(self) -> None:
        """Release pooled connections. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._client.aclose()

    async def __aenter__(self) -> TransportExecutor:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
