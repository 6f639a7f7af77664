"""
Ollama API client - one coroutine per remote operation.

Each call builds its request, hands it to the transport and decodes the reply.
Every failure surfaces as exactly one ``OllamaError`` variant.
"""

from __future__ import annotations
import logging
from contextlib import aclosing
from typing import AsyncIterator, Callable, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel

from .domain.errors import CancellationError, ConfigurationError, OllamaError
from .domain.models.outcome import StreamFrame
from .domain.models.requests import (
    ChatRequest,
    CopyRequest,
    CreateRequest,
    DeleteRequest,
    EmbedRequest,
    GenerateRequest,
    PullRequest,
    PushRequest,
    ShowRequest,
)
from .domain.models.responses import (
    ChatResponse,
    EmbedResponse,
    GenerateResponse,
    ListResponse,
    ProcessListResponse,
    ProgressResponse,
    ShowResponse,
    StatusResponse,
)
from .infrastructure.config.client_config import ClientConfiguration
from .infrastructure.ollama.decoder import decode_stream, decode_unary
from .infrastructure.ollama.error_mapping import error_boundary
from .infrastructure.ollama.transport import SleepFn, TransportExecutor

M = TypeVar("M", bound=BaseModel)


def _status_ok() -> StatusResponse:
    return StatusResponse(success=True)


def _with_stream(request: M, stream: bool) -> M:
    if "stream" in type(request).model_fields:
        return request.model_copy(update={"stream": stream})
    return request


class OllamaClient:
    """Async client for a local Ollama service."""

    def __init__(
        self,
        config: Optional[ClientConfiguration] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep_fn: Optional[SleepFn] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config or ClientConfiguration.from_settings()
        self._logger = logger or logging.getLogger(__name__)
        self._executor = TransportExecutor(
            self._config,
            transport=transport,
            sleep_fn=sleep_fn,
            logger=logging.getLogger(f"{__name__}.http") if logger is None else logger,
        )
        self._logger.debug(f"Ollama client initialized - Host: {self._config.base_url}")

    @property
    def config(self) -> ClientConfiguration:
        return self._config

    @property
    def closed(self) -> bool:
        return self._executor.closed

    async def close(self) -> None:
        await self._executor.close()

    async def __aenter__(self) -> OllamaClient:
        if self.closed:
            raise ConfigurationError("Client is closed")
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # ---------------- Internal helpers ----------------
    async def _call(
        self,
        method: str,
        operation: str,
        response_type: Type[M],
        request: Optional[BaseModel] = None,
        *,
        model_name: Optional[str] = None,
        empty_success: Optional[Callable[[], M]] = None,
    ) -> M:
        async with error_boundary():
            raw = await self._executor.send_unary(method, operation, request)
            return decode_unary(raw, response_type, model_name=model_name, empty_success=empty_success)

    # ---------------- Remote operations ----------------
    async def generate(self, request: GenerateRequest) -> GenerateResponse:
        """Single-shot completion; always requested unstreamed."""
        return await self._call("POST", "generate", GenerateResponse, _with_stream(request, False),
                                model_name=request.model)

    async def chat(self, request: ChatRequest) -> ChatResponse:
        """Next assistant message; always requested unstreamed."""
        return await self._call("POST", "chat", ChatResponse, _with_stream(request, False),
                                model_name=request.model)

    async def list(self) -> ListResponse:
        return await self._call("GET", "tags", ListResponse)

    async def show(self, request: ShowRequest) -> ShowResponse:
        return await self._call("POST", "show", ShowResponse, request, model_name=request.model)

    async def create(self, request: CreateRequest) -> ProgressResponse:
        return await self._call("POST", "create", ProgressResponse, _with_stream(request, False),
                                model_name=request.from_ or request.model)

    async def delete(self, request: DeleteRequest) -> StatusResponse:
        """Remove a model. The server answers 200 with no body on success."""
        return await self._call("DELETE", "delete", StatusResponse, request,
                                model_name=request.model, empty_success=_status_ok)

    async def copy(self, request: CopyRequest) -> StatusResponse:
        return await self._call("POST", "copy", StatusResponse, request,
                                model_name=request.source, empty_success=_status_ok)

    async def pull(self, request: PullRequest) -> ProgressResponse:
        return await self._call("POST", "pull", ProgressResponse, _with_stream(request, False),
                                model_name=request.model)

    async def push(self, request: PushRequest) -> ProgressResponse:
        return await self._call("POST", "push", ProgressResponse, _with_stream(request, False),
                                model_name=request.model)

    async def embed(self, request: EmbedRequest) -> EmbedResponse:
        return await self._call("POST", "embed", EmbedResponse, request, model_name=request.model)

    async def ps(self) -> ProcessListResponse:
        return await self._call("GET", "ps", ProcessListResponse)

    # ---------------- Streaming ----------------
    async def stream(
        self,
        operation: str,
        request: BaseModel,
        response_type: Type[M],
        *,
        method: str = "POST",
        model_name: Optional[str] = None,
    ) -> AsyncIterator[StreamFrame[M]]:
        """Yield frames of an incremental response as they arrive.

        ``stream=True`` is set on the request. A failure is delivered as the
        last frame rather than raised, except that a closed client raises
        ``ConfigurationError`` and cancelling the consumer raises
        ``CancellationError`` after closing the connection.
        """
        request = _with_stream(request, True)
        if model_name is None:
            model_name = getattr(request, "from_", None) or getattr(request, "model", None)
        async with error_boundary():
            try:
                handle = await self._executor.send_streaming(method, operation, request)
            except (CancellationError, ConfigurationError):
                raise
            except OllamaError as err:
                yield StreamFrame(error=err)
                return
            async with handle, aclosing(decode_stream(handle, response_type, model_name=model_name)) as frames:
                async for frame in frames:
                    yield frame

    async def stream_generate(self, request: GenerateRequest) -> AsyncIterator[GenerateResponse]:
        async with aclosing(self.stream("generate", request, GenerateResponse)) as frames:
            async for frame in frames:
                yield frame.unwrap()

    async def stream_chat(self, request: ChatRequest) -> AsyncIterator[ChatResponse]:
        async with aclosing(self.stream("chat", request, ChatResponse)) as frames:
            async for frame in frames:
                yield frame.unwrap()

    async def stream_pull(self, request: PullRequest) -> AsyncIterator[ProgressResponse]:
        async with aclosing(self.stream("pull", request, ProgressResponse)) as frames:
            async for frame in frames:
                yield frame.unwrap()
