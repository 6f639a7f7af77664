"""Domain models package."""

from .common import (
    Message,
    MessageRole,
    ModelDetails,
    ModelOptions,
    PropertyDefinition,
    SchemaDefinition,
    SchemaItems,
    ThinkingLevel,
    Tool,
    ToolCall,
    ToolCallFunction,
    ToolFunction,
    ToolFunctionParameters,
    WireModel,
)
from .outcome import ResponseOutcome, StreamFrame
from .requests import (
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
from .responses import (
    ChatResponse,
    EmbedResponse,
    GenerateResponse,
    ListResponse,
    ModelInfo,
    ProcessListResponse,
    ProgressResponse,
    RunningModel,
    ShowResponse,
    StatusResponse,
)

__all__ = [
    "Message",
    "MessageRole",
    "ModelDetails",
    "ModelOptions",
    "PropertyDefinition",
    "SchemaDefinition",
    "SchemaItems",
    "ThinkingLevel",
    "Tool",
    "ToolCall",
    "ToolCallFunction",
    "ToolFunction",
    "ToolFunctionParameters",
    "WireModel",
    "ResponseOutcome",
    "StreamFrame",
    "ChatRequest",
    "CopyRequest",
    "CreateRequest",
    "DeleteRequest",
    "EmbedRequest",
    "GenerateRequest",
    "PullRequest",
    "PushRequest",
    "ShowRequest",
    "ChatResponse",
    "EmbedResponse",
    "GenerateResponse",
    "ListResponse",
    "ModelInfo",
    "ProcessListResponse",
    "ProgressResponse",
    "RunningModel",
    "ShowResponse",
    "StatusResponse",
]
