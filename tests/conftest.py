# file: tests/conftest.py
"""
In-memory stand-ins for the two tool servers.

FakeFilesystemSession serves files from a dict; FakeMemorySession keeps a
tiny knowledge graph. Both record calls and closes so tests can assert on
them. make_connector() builds a session connector for OrchestratorContext.
"""
from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import orjson
import pytest

from endpoints.config import EndpointConfig, default_endpoints
from toolclient.base import TextContent, ToolResult, ToolSession


def text_result(text: str, is_error: bool = False) -> ToolResult:
    return ToolResult(content=[TextContent(text=text)], is_error=is_error)


class FakeSession(ToolSession):
    tools: List[Dict[str, str]] = []

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.calls: List[tuple] = []
        self.close_count = 0
        self.fail_on: Dict[str, Exception] = {}

    async def list_tools(self) -> Any:
        # the SDK shape: an object wrapping a `tools` sequence
        return SimpleNamespace(tools=[SimpleNamespace(**t) for t in self.tools])

    async def call_tool(self, tool: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        self.calls.append((tool, arguments))
        if tool in self.fail_on:
            raise self.fail_on[tool]
        handler = getattr(self, f"tool_{tool}", None)
        if handler is None:
            return text_result(f"Unknown tool: {tool}", is_error=True)
        return handler(**(arguments or {}))

    async def aclose(self) -> None:
        self.close_count += 1


class FakeFilesystemSession(FakeSession):
    tools = [
        {"name": "read_file", "description": "Read the complete contents of a file."},
        {"name": "list_directory", "description": "List files and directories in a path."},
        {"name": "write_file", "description": "Create or overwrite a file."},
    ]

    def __init__(self, name: str = "filesystem", files: Optional[Dict[str, str]] = None) -> None:
        super().__init__(name)
        self.files = dict(files or {})

    def tool_read_file(self, path: str) -> ToolResult:
        if path not in self.files:
            return text_result(f"Error: ENOENT: no such file or directory, open '{path}'", is_error=True)
        return text_result(self.files[path])

    def tool_list_directory(self, path: str) -> ToolResult:
        return text_result("\n".join(f"[FILE] {p}" for p in sorted(self.files)))


class FakeMemorySession(FakeSession):
    tools = [
        {"name": "create_entities", "description": "Create multiple new entities."},
        {"name": "create_relations", "description": "Create relations between entities."},
        {"name": "read_graph", "description": "Read the entire knowledge graph."},
    ]

    def __init__(self, name: str = "memory") -> None:
        super().__init__(name)
        self.entities: List[dict] = []
        self.relations: List[dict] = []

    def tool_create_entities(self, entities: List[dict]) -> ToolResult:
        known = {e["name"] for e in self.entities}
        new = [e for e in entities if e["name"] not in known]
        self.entities.extend(new)
        return text_result(orjson.dumps(new).decode())

    def tool_create_relations(self, relations: List[dict]) -> ToolResult:
        self.relations.extend(relations)
        return text_result(orjson.dumps(relations).decode())

    def tool_read_graph(self) -> ToolResult:
        return text_result(orjson.dumps({"entities": self.entities, "relations": self.relations}).decode())


PYPROJECT = """
[project]
name = "demo-project"
version = "1.2.3"
description = "A project under analysis"
dependencies = ["mcp>=1.9", "rich", "pydantic[email]>=2"]
"""


def make_connector(sessions: Dict[str, ToolSession], fail: Optional[Dict[str, Exception]] = None) -> Callable:
    opened: List[str] = []

    async def connect(endpoint: EndpointConfig) -> ToolSession:
        if fail and endpoint.name in fail:
            raise fail[endpoint.name]
        opened.append(endpoint.name)
        return sessions[endpoint.name]

    connect.opened = opened  # type: ignore[attr-defined]
    return connect


class FakeLLM:
    provider = "fake"
    model = "fake-model"

    def __init__(self) -> None:
        self.prompts: List[str] = []

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return "The graph holds a project that uses mcp."


@pytest.fixture
def fs_session() -> FakeFilesystemSession:
    return FakeFilesystemSession(files={"pyproject.toml": PYPROJECT, "README.md": "# demo"})


@pytest.fixture
def memory_session() -> FakeMemorySession:
    return FakeMemorySession()


@pytest.fixture
def fake_llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def make_ctx(tmp_path, fs_session, memory_session, fake_llm):
    from orchestration.orchestrator import OrchestratorContext

    def _make(**overrides):
        sessions = {"filesystem": fs_session, "memory": memory_session}
        kwargs = dict(
            endpoints=default_endpoints(tmp_path),
            root=tmp_path,
            connector=make_connector(sessions),
            llm_factory=lambda: fake_llm,
        )
        kwargs.update(overrides)
        return OrchestratorContext(**kwargs)

    return _make
