# file: toolclient/stdio.py
"""
Subprocess-backed tool sessions using the `mcp` SDK (stdio transport).

Each StdioToolSession owns one AsyncExitStack holding the stdio transport
and the protocol ClientSession, so it can be closed on its own, exactly once.

Notes
-----
- The transport is entered and exited from the same asyncio task; the
  orchestrator is single-task so this holds for every run.
- No timeout and no retry: a hung server blocks the caller.
"""
from __future__ import annotations

import logging
from contextlib import AsyncExitStack
from typing import Any, Dict, Optional

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client

from endpoints.config import EndpointConfig
from toolclient.base import ToolResult, ToolSession, _sdk_field

logger = logging.getLogger(__name__)


class StdioToolSession(ToolSession):
    def __init__(self, endpoint: EndpointConfig) -> None:
        super().__init__(endpoint.name)
        self.endpoint = endpoint
        self._stack = AsyncExitStack()
        self._session: Optional[ClientSession] = None

    async def connect(self) -> "StdioToolSession":
        params = StdioServerParameters(
            command=self.endpoint.command,
            args=list(self.endpoint.args),
            env=dict(self.endpoint.env) if self.endpoint.env else None,
            cwd=self.endpoint.cwd,
        )
        try:
            read, write = await self._stack.enter_async_context(stdio_client(params))
            session = await self._stack.enter_async_context(ClientSession(read, write))
            init = await session.initialize()
        except BaseException:
            await self._stack.aclose()
            raise
        self._session = session
        info = _sdk_field(init, "server_info", "serverInfo", None)
        logger.debug(
            "connected %s -> %s %s",
            self.name,
            getattr(info, "name", "?"),
            getattr(info, "version", ""),
        )
        return self

    def _require(self) -> ClientSession:
        if self._session is None:
            raise RuntimeError(f"session {self.name!r} is not connected")
        return self._session

    async def list_tools(self) -> Any:
        return await self._require().list_tools()

    async def call_tool(self, tool: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        result = await self._require().call_tool(tool, arguments=arguments or {})
        return ToolResult.from_mcp(result)

    async def aclose(self) -> None:
        self._session = None
        await self._stack.aclose()


async def open_stdio_session(endpoint: EndpointConfig) -> ToolSession:
    """Default session connector: launch the endpoint's subprocess and handshake."""
    logger.debug("launching %s: %s %s", endpoint.name, endpoint.command, " ".join(endpoint.args))
    return await StdioToolSession(endpoint).connect()
