# file: toolclient/base.py
"""
Tool session interface and shared data structures.

This layer defines:
- ToolDescriptor / ToolResult schemas that every session speaks.
- Abstract ToolSession base class used by the orchestrator.
- normalize_tool_list(): the one place that resolves the list-tools shape.

Design
------
A session is a live handle to one tool server. It can:
  - list the server's tools (raw remote shape, see normalize_tool_list)
  - call a tool with a JSON-like argument dict and return a ToolResult
  - close its underlying connection

The orchestrator only ever talks to ToolSession, so tests can inject
in-memory fakes in place of real subprocess-backed sessions.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# =========================
# Tool descriptors
# =========================

class ToolDescriptor(BaseModel):
    """Name + human readable description reported by a server's tools/list."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    description: str = ""


# =========================
# Tool results
# =========================

class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class OpaqueContent(BaseModel):
    """
    Any non-text block (image, audio, embedded resource, link).

    Kept verbatim; nothing in the demo consumes these.
    """
    model_config = ConfigDict(extra="allow")

    type: Literal["image", "audio", "resource", "resource_link"]


ContentBlock = Annotated[Union[TextContent, OpaqueContent], Field(discriminator="type")]


class ToolResult(BaseModel):
    """
    Result of one tool invocation.

    Transient: callers read it and drop it, nothing retains results.
    """
    content: List[ContentBlock] = Field(default_factory=list)
    is_error: bool = False

    def texts(self) -> List[str]:
        return [c.text for c in self.content if isinstance(c, TextContent)]

    def first_text(self) -> Optional[str]:
        texts = self.texts()
        return texts[0] if texts else None

    @classmethod
    def from_mcp(cls, result: Any) -> "ToolResult":
        """Convert the SDK's CallToolResult (or anything shaped like it)."""
        blocks = []
        for block in getattr(result, "content", None) or []:
            blocks.append(block.model_dump() if hasattr(block, "model_dump") else dict(block))
        return cls.model_validate({"content": blocks, "is_error": _sdk_field(result, "is_error", "isError")})


def _sdk_field(obj: Any, snake: str, camel: str, default: Any = False) -> Any:
    # SDK models moved from camelCase to snake_case field names
    val = getattr(obj, snake, None)
    if val is None:
        val = getattr(obj, camel, None)
    return default if val is None else val


# =========================
# Shape normalization
# =========================

def _descriptor_from(tool: Any) -> ToolDescriptor:
    if isinstance(tool, Mapping):
        name = tool.get("name")
        desc = tool.get("description")
    else:
        name = getattr(tool, "name", None)
        desc = getattr(tool, "description", None)
    if not name:
        raise TypeError(f"tool entry has no name: {tool!r}")
    return ToolDescriptor(name=str(name), description=desc or "")


def normalize_tool_list(raw: Any) -> List[ToolDescriptor]:
    """
    Normalize a list-tools response into an ordered list of ToolDescriptor.

    Accepted shapes
    ---------------
    - a bare sequence of tools
    - an object with a ``tools`` attribute (e.g. mcp.types.ListToolsResult)
    - a mapping with a ``tools`` key

    ``None``, or a wrapper whose ``tools`` is missing or None, yields ``[]``.
    Each tool may be an object with name/description attributes or a mapping.
    Anything else raises TypeError. Remote order is preserved.
    """
    if raw is None:
        return []
    if isinstance(raw, Mapping):
        tools = raw.get("tools")
    elif isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
        tools = raw
    elif hasattr(raw, "tools"):
        tools = raw.tools
    else:
        raise TypeError(f"unrecognized list-tools response: {type(raw).__name__}")

    if tools is None:
        return []
    if isinstance(tools, (str, bytes)) or not isinstance(tools, Sequence):
        raise TypeError(f"'tools' must be a sequence, got {type(tools).__name__}")
    return [_descriptor_from(t) for t in tools]


# =========================
# Session interface
# =========================

class ToolSession(ABC):
    """
    Abstract live connection to one tool server.

    Lifecycle:
      - created (already connected) by a session connector
      - list_tools() / call_tool() zero or more times
      - aclose() exactly once
    """

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    async def list_tools(self) -> Any:
        """Return the server's tools in whatever shape the transport gives."""
        raise NotImplementedError

    @abstractmethod
    async def call_tool(self, tool: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        raise NotImplementedError

    @abstractmethod
    async def aclose(self) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
