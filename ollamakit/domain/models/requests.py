"""
Request records for each remote operation.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional, Union

from pydantic import Field

from .common import Message, ModelOptions, ThinkingLevel, Tool, WireModel

# "json" or a JSON schema object
FormatSpec = Union[str, Dict[str, Any]]
# duration string ("5m", "-1") or seconds
KeepAlive = Union[str, int, float]


class GenerateRequest(WireModel):
    model: str
    prompt: str = ""
    suffix: Optional[str] = None
    images: Optional[List[str]] = None
    stream: bool = False
    format: Optional[FormatSpec] = None
    keep_alive: Optional[KeepAlive] = None
    options: Optional[ModelOptions] = None
    system: Optional[str] = None
    template: Optional[str] = None
    context: Optional[List[int]] = None
    raw: bool = False
    think: Optional[Union[bool, ThinkingLevel]] = None


class ChatRequest(WireModel):
    model: str
    messages: List[Message] = Field(default_factory=list)
    stream: bool = False
    format: Optional[FormatSpec] = None
    keep_alive: Optional[KeepAlive] = None
    tools: Optional[List[Tool]] = None
    think: Optional[Union[bool, ThinkingLevel]] = None
    options: Optional[ModelOptions] = None


class ShowRequest(WireModel):
    model: str
    verbose: Optional[bool] = None


class CreateRequest(WireModel):
    model: str
    from_: Optional[str] = Field(default=None, alias="from")
    modelfile: Optional[str] = None
    system: Optional[str] = None
    adapter: Optional[str] = None
    license: Optional[str] = None
    template: Optional[str] = None
    quantize: Optional[str] = None
    stream: bool = False


class DeleteRequest(WireModel):
    model: str


class CopyRequest(WireModel):
    source: str
    destination: str


class PullRequest(WireModel):
    model: str
    insecure: bool = False
    stream: bool = False


class PushRequest(WireModel):
    model: str
    insecure: bool = False
    stream: bool = False


class EmbedRequest(WireModel):
    model: str
    input: Union[str, List[str]]
    truncate: Optional[bool] = None
    keep_alive: Optional[KeepAlive] = None
    options: Optional[ModelOptions] = None


__all__ = [
    "GenerateRequest",
    "ChatRequest",
    "ShowRequest",
    "CreateRequest",
    "DeleteRequest",
    "CopyRequest",
    "PullRequest",
    "PushRequest",
    "EmbedRequest",
]
