"""
Ollama API protocol interface.
Defines the contract for implementations of the remote operations.
"""

from __future__ import annotations
from typing import AsyncIterator, Protocol, runtime_checkable

from ..models.requests import (
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
from ..models.responses import (
    ChatResponse,
    EmbedResponse,
    GenerateResponse,
    ListResponse,
    ProcessListResponse,
    ProgressResponse,
    ShowResponse,
    StatusResponse,
)


@runtime_checkable
class OllamaApi(Protocol):
    """Protocol for clients of the Ollama HTTP API.

    Every operation returns a decoded record or raises one ``OllamaError``.
    """

    async def generate(self, request: GenerateRequest) -> GenerateResponse:
        """Single-shot completion for a prompt."""
        ...

    async def chat(self, request: ChatRequest) -> ChatResponse:
        """Next assistant message for a conversation."""
        ...

    async def list(self) -> ListResponse:
        """Locally available models."""
        ...

    async def show(self, request: ShowRequest) -> ShowResponse:
        ...

    async def create(self, request: CreateRequest) -> ProgressResponse:
        ...

    async def delete(self, request: DeleteRequest) -> StatusResponse:
        ...

    async def copy(self, request: CopyRequest) -> StatusResponse:
        ...

    async def pull(self, request: PullRequest) -> ProgressResponse:
        ...

    async def push(self, request: PushRequest) -> ProgressResponse:
        ...

    async def embed(self, request: EmbedRequest) -> EmbedResponse:
        ...

    async def ps(self) -> ProcessListResponse:
        """Models currently loaded in memory."""
        ...

    async def close(self) -> None:
        """Release pooled connections."""
        ...


@runtime_checkable
class StreamingOllamaApi(OllamaApi, Protocol):
    """Protocol for clients that also expose incremental responses.

    Iteration yields decoded units in wire order and raises the error that
    ended the stream, if any.
    """

    def stream_generate(self, request: GenerateRequest) -> AsyncIterator[GenerateResponse]:
        ...

    def stream_chat(self, request: ChatRequest) -> AsyncIterator[ChatResponse]:
        ...

    def stream_pull(self, request: PullRequest) -> AsyncIterator[ProgressResponse]:
        ...
