"""
Response records. Durations are nanosecond counts, as sent by the server.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional

from pydantic import Field

from .common import Message, ModelDetails, WireModel


class GenerateResponse(WireModel):
    model: str
    created_at: Optional[str] = None
    response: str = ""
    thinking: Optional[str] = None
    done: bool = False
    done_reason: Optional[str] = None
    context: Optional[List[int]] = None
    total_duration: Optional[int] = None
    load_duration: Optional[int] = None
    prompt_eval_count: Optional[int] = None
    prompt_eval_duration: Optional[int] = None
    eval_count: Optional[int] = None
    eval_duration: Optional[int] = None


class ChatResponse(WireModel):
    model: str
    created_at: Optional[str] = None
    message: Optional[Message] = None
    done: bool = False
    done_reason: Optional[str] = None
    total_duration: Optional[int] = None
    load_duration: Optional[int] = None
    prompt_eval_count: Optional[int] = None
    prompt_eval_duration: Optional[int] = None
    eval_count: Optional[int] = None
    eval_duration: Optional[int] = None


class ModelInfo(WireModel):
    name: str
    model: Optional[str] = None
    size: int = 0
    digest: str = ""
    modified_at: Optional[str] = None
    details: Optional[ModelDetails] = None


class ListResponse(WireModel):
    models: List[ModelInfo] = Field(default_factory=list)


class RunningModel(WireModel):
    name: str
    model: Optional[str] = None
    size: int = 0
    digest: str = ""
    details: Optional[ModelDetails] = None
    expires_at: Optional[str] = None
    size_vram: Optional[int] = None


class ProcessListResponse(WireModel):
    models: List[RunningModel] = Field(default_factory=list)


class ShowResponse(WireModel):
    license: Optional[str] = None
    modelfile: Optional[str] = None
    parameters: Optional[str] = None
    template: Optional[str] = None
    system: Optional[str] = None
    details: Optional[ModelDetails] = None
    model_info: Optional[Dict[str, Any]] = None
    capabilities: Optional[List[str]] = None
    modified_at: Optional[str] = None


class ProgressResponse(WireModel):
    """Status line of create / pull / push."""
    status: str
    digest: Optional[str] = None
    total: int = 0
    completed: int = 0


class StatusResponse(WireModel):
    """Outcome of operations that only signal success (delete, copy)."""
    success: bool
    message: Optional[str] = None


class EmbedResponse(WireModel):
    model: Optional[str] = None
    embeddings: List[List[float]] = Field(default_factory=list)
    total_duration: Optional[int] = None
    load_duration: Optional[int] = None
    prompt_eval_count: Optional[int] = None


__all__ = [
    "GenerateResponse",
    "ChatResponse",
    "ModelInfo",
    "ListResponse",
    "RunningModel",
    "ProcessListResponse",
    "ShowResponse",
    "ProgressResponse",
    "StatusResponse",
    "EmbedResponse",
]
