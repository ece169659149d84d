# file: tests/test_orchestrator.py
from __future__ import annotations

import pytest
from conftest import FakeMemorySession, make_connector

from endpoints.config import endpoints_from_dict
from orchestration import (
    Lifecycle,
    NotInitializedError,
    OrchestratorContext,
    OrchestratorStateError,
    SessionNotFoundError,
    cleanup,
    initialize,
    invoke,
    list_tools,
    orchestrate,
)


@pytest.mark.asyncio
async def test_initialize_opens_one_session_per_endpoint(make_ctx, fake_llm):
    ctx = make_ctx()
    await initialize(ctx)

    assert ctx.state is Lifecycle.INITIALIZED
    assert list(ctx.sessions) == ["filesystem", "memory"]
    assert ctx.llm is fake_llm
    await cleanup(ctx)


@pytest.mark.asyncio
async def test_n_endpoints_give_n_sessions():
    names = [f"srv{i}" for i in range(5)]
    sessions = {n: FakeMemorySession(n) for n in names}
    ctx = OrchestratorContext(
        endpoints=endpoints_from_dict({n: {"command": "true"} for n in names}),
        connector=make_connector(sessions),
        llm_factory=lambda: None,
    )
    await initialize(ctx)
    assert list(ctx.sessions) == names
    assert all(ctx.sessions[n] is sessions[n] for n in names)
    await cleanup(ctx)


@pytest.mark.asyncio
@pytest.mark.parametrize("op", ["list_tools", "invoke"])
async def test_operations_before_initialize_fail_cleanly(make_ctx, op):
    ctx = make_ctx()
    with pytest.raises(NotInitializedError):
        if op == "list_tools":
            await list_tools(ctx, "filesystem")
        else:
            await invoke(ctx, "memory", "read_graph", {})


@pytest.mark.asyncio
async def test_operations_after_cleanup_fail(make_ctx):
    ctx = make_ctx()
    await initialize(ctx)
    await cleanup(ctx)
    with pytest.raises(NotInitializedError):
        await invoke(ctx, "memory", "read_graph", {})


@pytest.mark.asyncio
async def test_unknown_endpoint_is_session_not_found_without_remote_call(make_ctx, fs_session, memory_session):
    ctx = make_ctx()
    await initialize(ctx)

    with pytest.raises(SessionNotFoundError) as exc:
        await invoke(ctx, "github", "search_repositories", {"query": "mcp"})
    assert exc.value.endpoint == "github"
    with pytest.raises(SessionNotFoundError):
        await list_tools(ctx, "github")

    assert fs_session.calls == []
    assert memory_session.calls == []
    await cleanup(ctx)


@pytest.mark.asyncio
async def test_list_tools_returns_ordered_descriptors(make_ctx):
    ctx = make_ctx()
    async with orchestrate(ctx):
        tools = await list_tools(ctx, "filesystem")

    assert [t.name for t in tools] == ["read_file", "list_directory", "write_file"]
    assert all(t.name for t in tools)


@pytest.mark.asyncio
async def test_cleanup_closes_each_session_once_and_is_idempotent(make_ctx, fs_session, memory_session):
    ctx = make_ctx()
    await initialize(ctx)
    await cleanup(ctx)
    await cleanup(ctx)

    assert fs_session.close_count == 1
    assert memory_session.close_count == 1
    assert ctx.sessions == {}
    assert ctx.state is Lifecycle.CLOSED


@pytest.mark.asyncio
async def test_cleanup_without_initialize_is_noop(make_ctx, fs_session):
    ctx = make_ctx()
    await cleanup(ctx)
    assert fs_session.close_count == 0
    assert ctx.state is Lifecycle.CLOSED


@pytest.mark.asyncio
async def test_close_failure_does_not_leak_other_sessions(make_ctx, fs_session, memory_session):
    async def broken_close():
        raise RuntimeError("pipe closed")

    memory_session.aclose = broken_close
    ctx = make_ctx()
    await initialize(ctx)
    await cleanup(ctx)

    assert fs_session.close_count == 1
    assert ctx.sessions == {}


@pytest.mark.asyncio
async def test_initialize_is_all_or_nothing(tmp_path, fs_session, memory_session):
    from endpoints.config import default_endpoints

    ctx = OrchestratorContext(
        endpoints=default_endpoints(tmp_path),
        connector=make_connector(
            {"filesystem": fs_session, "memory": memory_session},
            fail={"memory": ConnectionError("npx not found")},
        ),
        llm_factory=lambda: None,
    )
    with pytest.raises(ConnectionError):
        await initialize(ctx)

    # the session opened before the failure was closed
    assert fs_session.close_count == 1
    assert ctx.sessions == {}
    assert ctx.state is Lifecycle.CLOSED


@pytest.mark.asyncio
async def test_initialize_twice_is_rejected(make_ctx):
    ctx = make_ctx()
    await initialize(ctx)
    with pytest.raises(OrchestratorStateError):
        await initialize(ctx)
    await cleanup(ctx)
    with pytest.raises(OrchestratorStateError):
        await initialize(ctx)


@pytest.mark.asyncio
async def test_orchestrate_cleans_up_when_body_raises(make_ctx, fs_session, memory_session):
    ctx = make_ctx()
    with pytest.raises(RuntimeError):
        async with orchestrate(ctx):
            raise RuntimeError("step blew up")

    assert fs_session.close_count == 1
    assert memory_session.close_count == 1
