# file: orchestration/orchestrator.py
"""
Session orchestration over a map of named tool servers.

Responsibilities
----------------
- Open one session per endpoint and build the language-model handle.
- Route tool listings and invocations to the right session.
- Close every session exactly once, whatever happened before.

Design notes
------------
- All state lives on an explicit OrchestratorContext passed to each
  operation; the session connector and LLM factory are injectable so tests
  run against in-memory fakes.
- Lifecycle is linear: UNINITIALIZED -> INITIALIZED -> CLOSED.
  cleanup() from UNINITIALIZED is allowed and just marks the context closed.
- initialize() is all-or-nothing: if any endpoint fails to connect, the
  sessions already opened are closed and the error propagates.
- Sequential, single asyncio task. No timeouts, no retries.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional

from endpoints.config import EndpointConfig, EndpointMap
from llm_handle.backends import resolve_llm_backend
from orchestration.errors import (
    NotInitializedError,
    OrchestratorStateError,
    SessionNotFoundError,
)
from toolclient.base import ToolDescriptor, ToolResult, ToolSession, normalize_tool_list
from toolclient.stdio import open_stdio_session

logger = logging.getLogger(__name__)

SessionConnector = Callable[[EndpointConfig], Awaitable[ToolSession]]


class Lifecycle(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    CLOSED = "closed"


@dataclass
class OrchestratorContext:
    """
    Everything one orchestration run owns.

    Public attributes:
        endpoints: EndpointMap           # immutable, declaration order
        sessions: Dict[str, ToolSession] # filled by initialize(), emptied by cleanup()
        llm: Any                         # built by initialize() via llm_factory
        state: Lifecycle
    """
    endpoints: EndpointMap
    root: Path = field(default_factory=Path.cwd)
    manifest: str = "pyproject.toml"
    connector: SessionConnector = open_stdio_session
    llm_factory: Callable[[], Any] = resolve_llm_backend
    sessions: Dict[str, ToolSession] = field(default_factory=dict)
    llm: Optional[Any] = None
    state: Lifecycle = Lifecycle.UNINITIALIZED


# -------------------------
# Lifecycle
# -------------------------

async def initialize(ctx: OrchestratorContext) -> None:
    if ctx.state is not Lifecycle.UNINITIALIZED:
        raise OrchestratorStateError(f"initialize() called in state {ctx.state.value!r}")

    logger.info("Connecting to %d tool servers...", len(ctx.endpoints))
    try:
        for name, endpoint in ctx.endpoints.items():
            ctx.sessions[name] = await ctx.connector(endpoint)
            logger.info("connected: %s", name)
        ctx.llm = ctx.llm_factory()
    except BaseException:
        logger.error("initialization failed; closing %d opened session(s)", len(ctx.sessions))
        ctx.state = Lifecycle.CLOSED
        await _close_sessions(ctx)
        raise
    ctx.state = Lifecycle.INITIALIZED


async def cleanup(ctx: OrchestratorContext) -> None:
    """Close every open session once. Safe before initialize() and when repeated."""
    if ctx.state is Lifecycle.CLOSED and not ctx.sessions:
        return
    ctx.state = Lifecycle.CLOSED
    n = len(ctx.sessions)
    await _close_sessions(ctx)
    if n:
        logger.info("All %d tool servers disconnected", n)


async def _close_sessions(ctx: OrchestratorContext) -> None:
    # reverse opening order; one failing close must not leak the others
    while ctx.sessions:
        name, session = ctx.sessions.popitem()
        try:
            await session.aclose()
        except Exception as e:
            logger.warning("error closing session %s: %s", name, e)


@asynccontextmanager
async def orchestrate(ctx: OrchestratorContext) -> AsyncIterator[OrchestratorContext]:
    """initialize() on entry, cleanup() on exit no matter how the body ends."""
    try:
        await initialize(ctx)
        yield ctx
    finally:
        await cleanup(ctx)


# -------------------------
# Session access
# -------------------------

def _session_for(ctx: OrchestratorContext, endpoint: str) -> ToolSession:
    if ctx.state is not Lifecycle.INITIALIZED:
        raise NotInitializedError(f"orchestrator is {ctx.state.value}; call initialize() first")
    try:
        return ctx.sessions[endpoint]
    except KeyError:
        raise SessionNotFoundError(endpoint) from None


async def list_tools(ctx: OrchestratorContext, endpoint: str) -> List[ToolDescriptor]:
    session = _session_for(ctx, endpoint)
    return normalize_tool_list(await session.list_tools())


async def invoke(
    ctx: OrchestratorContext,
    endpoint: str,
    tool: str,
    args: Optional[Dict[str, Any]] = None,
) -> ToolResult:
    session = _session_for(ctx, endpoint)
    logger.debug("invoke %s.%s %s", endpoint, tool, args)
    return await session.call_tool(tool, args or {})
