# file: tests/stdio_tool_server.py
"""
Tiny tool server spoken to over stdio by the transport tests.

Run as a subprocess: ``python tests/stdio_tool_server.py``.
"""
from __future__ import annotations

from mcp.server.fastmcp import FastMCP

server = FastMCP("demo-tools")


@server.tool()
def echo(text: str) -> str:
    """Return the text unchanged."""
    return text


@server.tool()
def add(a: int, b: int) -> int:
    """Add two integers."""
    return a + b


@server.tool()
def boom() -> str:
    """Always fails."""
    raise ValueError("kaboom")


if __name__ == "__main__":
    server.run()
