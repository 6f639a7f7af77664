"""
Shared wire records - messages, tools, model options.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class WireModel(BaseModel):
    """Base for every wire record: unknown keys are dropped, aliases and names both accepted."""

    model_config = ConfigDict(
        extra="ignore", populate_by_name=True, frozen=True, protected_namespaces=()
    )

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict using wire keys, with unset optional fields left out."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class MessageRole(str, Enum):
    """Message roles in a chat."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class ThinkingLevel(str, Enum):
    """Reasoning effort for thinking models; ``think`` also accepts a plain bool."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ToolCallFunction(WireModel):
    name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ToolCall(WireModel):
    function: ToolCallFunction


class Message(WireModel):
    """A single chat message."""
    role: MessageRole
    content: str = ""
    thinking: Optional[str] = None
    images: Optional[List[str]] = None
    tool_calls: Optional[List[ToolCall]] = None
    tool_name: Optional[str] = None

    @classmethod
    def user(cls, content: str) -> Message:
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def assistant(cls, content: str) -> Message:
        return cls(role=MessageRole.ASSISTANT, content=content)


class ModelOptions(WireModel):
    """Generation options. Keys not listed here pass through untouched."""

    model_config = ConfigDict(
        extra="allow", populate_by_name=True, frozen=True, protected_namespaces=()
    )

    temperature: Optional[float] = None
    top_k: Optional[int] = None
    top_p: Optional[float] = None
    num_predict: Optional[int] = None
    num_ctx: Optional[int] = None
    repeat_penalty: Optional[float] = None
    seed: Optional[int] = None
    stop: Optional[List[str]] = None


class ModelDetails(WireModel):
    parent_model: Optional[str] = None
    format: Optional[str] = None
    family: Optional[str] = None
    families: Optional[List[str]] = None
    parameter_size: Optional[str] = None
    quantization_level: Optional[str] = None


# ---------------------------------------------------------------------------
# Tool schemas (JSON-schema subset accepted by /api/chat)
# ---------------------------------------------------------------------------

class SchemaItems(WireModel):
    type: Optional[str] = None
    properties: Optional[Dict[str, "PropertyDefinition"]] = None
    enum: Optional[List[str]] = None
    items: Optional["SchemaItems"] = None


class PropertyDefinition(WireModel):
    """A property schema. ``type`` is either one type name or a union list."""
    type: Optional[Union[str, List[str]]] = None
    items: Optional[SchemaItems] = None
    description: Optional[str] = None
    enum: Optional[List[str]] = None
    properties: Optional[Dict[str, "PropertyDefinition"]] = None
    required: Optional[List[str]] = None
    ref: Optional[str] = Field(default=None, alias="$ref")

    @field_validator("type")
    @classmethod
    def _non_empty_union(cls, v):
        if isinstance(v, list) and not v:
            raise ValueError("type union must name at least one type")
        return v

    @property
    def is_union(self) -> bool:
        return isinstance(self.type, list)

    def is_type(self, name: str) -> bool:
        return self.type == name


class SchemaDefinition(WireModel):
    type: Optional[str] = None
    properties: Optional[Dict[str, PropertyDefinition]] = None
    required: Optional[List[str]] = None
    items: Optional[SchemaItems] = None
    enum: Optional[List[str]] = None
    description: Optional[str] = None


class ToolFunctionParameters(WireModel):
    type: Optional[str] = "object"
    defs: Optional[Dict[str, SchemaDefinition]] = Field(default=None, alias="$defs")
    items: Optional[SchemaItems] = None
    required: Optional[List[str]] = None
    properties: Optional[Dict[str, PropertyDefinition]] = None


class ToolFunction(WireModel):
    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    parameters: Optional[ToolFunctionParameters] = None


class Tool(WireModel):
    type: str = "function"
    function: ToolFunction


SchemaItems.model_rebuild()
PropertyDefinition.model_rebuild()


__all__ = [
    "WireModel",
    "MessageRole",
    "ThinkingLevel",
    "ToolCallFunction",
    "ToolCall",
    "Message",
    "ModelOptions",
    "ModelDetails",
    "SchemaItems",
    "PropertyDefinition",
    "SchemaDefinition",
    "ToolFunctionParameters",
    "ToolFunction",
    "Tool",
]
