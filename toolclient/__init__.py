# file: toolclient/__init__.py
"""
Tool client boundary: session interface, result schemas, and the stdio-backed
sessions built on the `mcp` SDK.
"""
from .base import (
    ToolSession,
    ToolDescriptor,
    ToolResult,
    TextContent,
    OpaqueContent,
    normalize_tool_list,
)

from .stdio import (
    StdioToolSession,
    open_stdio_session,
)

__all__ = [
    # base
    "ToolSession",
    "ToolDescriptor",
    "ToolResult",
    "TextContent",
    "OpaqueContent",
    "normalize_tool_list",
    # stdio
    "StdioToolSession",
    "open_stdio_session",
]
