"""
Response decoder.

Turns raw exchanges into typed records or taxonomy errors. Unary bodies are
one JSON document; streaming bodies are either newline-delimited JSON or
Server-Sent Events, chosen from the response content type.
"""

from __future__ import annotations
import logging
from enum import Enum
from typing import AsyncIterable, AsyncIterator, Callable, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ...domain.errors import HttpError, ModelNotFoundError, OllamaError, SerializationError
from ...domain.models.outcome import StreamFrame
from ...utils import truncate_text
from .error_mapping import map_exception
from .transport import RawResponse, RawStreamHandle

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

UNREADABLE_BODY = "Unable to read error response"
SSE_MEDIA_TYPE = "text/event-stream"
SSE_DONE = "[DONE]"
EXCERPT_LENGTH = 200


class Framing(Enum):
    JSON_LINES = "json_lines"
    SSE = "sse"


def select_framing(content_type: Optional[str]) -> Framing:
    """SSE for ``text/event-stream``; everything else, absent included, is JSON lines."""
    media_type = (content_type or "").split(";", 1)[0].strip().lower()
    if media_type == SSE_MEDIA_TYPE:
        return Framing.SSE
    return Framing.JSON_LINES


def build_http_error(
    status_code: int,
    reason: Optional[str],
    body_text: Optional[str],
    *,
    model_name: Optional[str] = None,
) -> OllamaError:
    """Error for a non-2xx status; 404 on a model-scoped call means the model is missing."""
    if status_code == 404 and model_name:
        return ModelNotFoundError(model_name)
    message = f"HTTP {status_code}: {reason}" if reason else f"HTTP {status_code}"
    return HttpError(status_code, body_text if body_text is not None else UNREADABLE_BODY, message)


def ensure_success(raw: RawResponse, *, model_name: Optional[str] = None) -> None:
    """Raise the matching taxonomy error unless ``raw`` has a 2xx status."""
    if raw.is_success:
        return
    raise build_http_error(raw.status_code, raw.reason, raw.text, model_name=model_name)


def _summarize(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            loc = ".".join(str(part) for part in first.get("loc", ()))
            return f"{loc}: {first['msg']}" if loc else first["msg"]
    return str(exc)


def decode_json(text: str, response_type: Type[M], *, position: Optional[int] = None) -> M:
    """Strictly decode one JSON document; no type coercion is performed."""
    try:
        return response_type.model_validate_json(text, strict=True)
    except ValueError as exc:
        where = f"stream unit {position}" if position is not None else "response"
        raise SerializationError(
            f"Failed to parse {where}: {_summarize(exc)}",
            exc,
            raw_excerpt=truncate_text(text, EXCERPT_LENGTH),
            position=position,
        ) from exc


def decode_unary(
    raw: RawResponse,
    response_type: Type[M],
    *,
    model_name: Optional[str] = None,
    empty_success: Optional[Callable[[], M]] = None,
) -> M:
    """Decode a completed exchange.

    ``empty_success`` supplies the value for a 2xx response whose body is
    empty, for endpoints that signal success with the status alone.
    """
    ensure_success(raw, model_name=model_name)
    text = raw.text or ""
    if empty_success is not None and not text.strip():
        return empty_success()
    return decode_json(text, response_type)


async def iter_json_lines(lines: AsyncIterable[str]) -> AsyncIterator[str]:
    """Each non-blank line is one unit."""
    async for line in lines:
        stripped = line.strip()
        if stripped:
            yield stripped


async def iter_sse_payloads(lines: AsyncIterable[str]) -> AsyncIterator[str]:
    """Collect ``data:`` fields into events; a blank line ends an event.

    Multi-line data is joined with newlines. ``event``, ``id``, ``retry`` and
    comment lines are ignored. ``[DONE]`` ends the stream.
    """
    buffer: List[str] = []
    async for line in lines:
        line = line.rstrip("\r")
        if not line.strip():
            if buffer:
                yield "\n".join(buffer)
                buffer = []
            continue
        if not line.startswith("data:"):
            continue
        data = line[len("data:"):].strip()
        if data == SSE_DONE:
            if buffer:
                yield "\n".join(buffer)
            return
        if data:
            buffer.append(data)
    if buffer:
        yield "\n".join(buffer)


async def decode_stream(
    handle: RawStreamHandle,
    response_type: Type[M],
    *,
    model_name: Optional[str] = None,
) -> AsyncIterator[StreamFrame[M]]:
    """Yield one frame per unit, in wire order.

    Failures arrive as a final error frame: the status error for a non-2xx
    head, a ``SerializationError`` for an undecodable unit, or a
    ``NetworkError`` if the body breaks off. Nothing follows an error frame.
    """
    if not handle.is_success:
        body = await handle.read_body()
        text = body.decode("utf-8", errors="replace") if body is not None else None
        yield StreamFrame(error=build_http_error(handle.status_code, handle.reason, text, model_name=model_name))
        return

    framing = select_framing(handle.content_type)
    if framing is Framing.SSE:
        units = iter_sse_payloads(handle.lines())
    else:
        units = iter_json_lines(handle.lines())

    index = 0
    try:
        async for unit in units:
            try:
                value = decode_json(unit, response_type, position=index)
            except SerializationError as err:
                logger.debug(f"Stream {handle.path} stopped at unit {index}: {err}")
                yield StreamFrame(error=err, index=index)
                return
            yield StreamFrame(value=value, index=index)
            index += 1
    except (httpx.HTTPError, OSError) as exc:
        yield StreamFrame(error=map_exception(exc), index=index)
