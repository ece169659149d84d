# file: orchestration/steps.py
"""
Demonstration sequence: named steps run one after another over one context.

Each Step is an async function of the OrchestratorContext. run_steps() runs
them in order, logs a failing step and moves on, and returns one
StepOutcome per step. run_demo() wraps the whole sequence in orchestrate()
so sessions are always closed.

Steps
-----
list_available_tools          every endpoint's tools, numbered
analyze_project               read the project manifest, store it in the graph
demonstrate_memory_operations create entities + a relation, read the graph
demonstrate_file_operations   list the project directory
summarize_knowledge_graph     (optional) ask the language model about the graph
"""
from __future__ import annotations

import logging
import re
import tomllib
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

import orjson
from pydantic import BaseModel, Field
from rich import print as rprint
from rich.rule import Rule
from rich.table import Table

from orchestration.errors import NotInitializedError, ToolCallError
from orchestration.orchestrator import OrchestratorContext, invoke, list_tools, orchestrate
from toolclient.base import ToolResult

logger = logging.getLogger(__name__)

StepFn = Callable[[OrchestratorContext], Awaitable[Any]]


@dataclass(frozen=True)
class Step:
    name: str
    run: StepFn
    title: str = ""


@dataclass
class StepOutcome:
    name: str
    ok: bool
    result: Any = None
    error: Optional[BaseException] = None


# =========================
# Helpers
# =========================

def _text_of(result: ToolResult, endpoint: str, tool: str) -> str:
    text = result.first_text()
    if result.is_error:
        raise ToolCallError(endpoint, tool, text or "tool reported an error")
    if text is None:
        raise ToolCallError(endpoint, tool, "no text content in result")
    return text


def project_entity_name(ctx: OrchestratorContext) -> str:
    return ctx.root.resolve().name or "project"


class ManifestInfo(BaseModel):
    name: Optional[str] = None
    version: Optional[str] = None
    description: Optional[str] = None
    dependencies: List[str] = Field(default_factory=list)


_REQ_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


def parse_manifest(path: str, text: str) -> ManifestInfo:
    """
    Parse a project manifest read through the filesystem server.

    *.json  -> package.json style (name/version/description/dependencies object)
    *.toml  -> pyproject.toml [project] table, falling back to [tool.poetry]
    """
    lower = path.lower()
    if lower.endswith(".json"):
        data = orjson.loads(text)
        deps = data.get("dependencies") or {}
        return ManifestInfo(
            name=data.get("name"),
            version=data.get("version"),
            description=data.get("description"),
            dependencies=list(deps),
        )
    if lower.endswith(".toml"):
        data = tomllib.loads(text)
        project = data.get("project")
        if project is not None:
            deps = []
            for req in project.get("dependencies") or []:
                m = _REQ_NAME.match(req)
                if m:
                    deps.append(m.group(1))
        else:
            project = data.get("tool", {}).get("poetry", {})
            deps = [d for d in (project.get("dependencies") or {}) if d != "python"]
        return ManifestInfo(
            name=project.get("name"),
            version=project.get("version"),
            description=project.get("description"),
            dependencies=deps,
        )
    raise ValueError(f"unsupported manifest type: {path}")


# =========================
# Steps
# =========================

async def list_available_tools(ctx: OrchestratorContext) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for name in ctx.endpoints:
        tools = await list_tools(ctx, name)
        tbl = Table(title=f"{name.upper()} server ({len(tools)} tools)", title_justify="left")
        tbl.add_column("#", justify="right")
        tbl.add_column("tool", style="bold")
        tbl.add_column("description", overflow="fold")
        for i, tool in enumerate(tools, start=1):
            tbl.add_row(str(i), tool.name, tool.description)
        rprint(tbl)
        counts[name] = len(tools)
    return counts


async def analyze_project(ctx: OrchestratorContext) -> ManifestInfo:
    rprint(f"[cyan]Reading {ctx.manifest} through the filesystem server...[/cyan]")
    result = await invoke(ctx, "filesystem", "read_file", {"path": ctx.manifest})
    info = parse_manifest(ctx.manifest, _text_of(result, "filesystem", "read_file"))

    rprint(f"Name: {info.name}")
    rprint(f"Version: {info.version}")
    rprint(f"Description: {info.description}")
    rprint("Dependencies:")
    for dep in info.dependencies:
        rprint(f"  - {dep}")

    rprint("[cyan]Storing project info in the knowledge graph...[/cyan]")
    observations = [
        f"Manifest {ctx.manifest} declares {info.name or 'an unnamed project'} {info.version or ''}".strip(),
        f"{len(info.dependencies)} declared dependencies",
        "Analyzed through the filesystem tool server",
    ]
    if info.description:
        observations.append(info.description)
    result = await invoke(
        ctx,
        "memory",
        "create_entities",
        {"entities": [{"name": project_entity_name(ctx), "entityType": "project", "observations": observations}]},
    )
    _text_of(result, "memory", "create_entities")
    rprint("[green]Project information stored in memory[/green]")
    return info


async def demonstrate_memory_operations(ctx: OrchestratorContext) -> str:
    model = getattr(ctx.llm, "model", None) or "language-model"
    provider = getattr(ctx.llm, "provider", "unknown")

    rprint("1. Creating entities in the knowledge graph...")
    result = await invoke(
        ctx,
        "memory",
        "create_entities",
        {
            "entities": [
                {
                    "name": "mcp",
                    "entityType": "library",
                    "observations": [
                        "Model Context Protocol SDK",
                        "Connects one client to several tool servers",
                    ],
                },
                {
                    "name": model,
                    "entityType": "ai-model",
                    "observations": [f"Served by {provider}", "Language model held by the orchestrator"],
                },
            ]
        },
    )
    _text_of(result, "memory", "create_entities")
    rprint("   [green]Created 2 entities[/green]")

    rprint("2. Creating relationship between entities...")
    result = await invoke(
        ctx,
        "memory",
        "create_relations",
        {"relations": [{"from": project_entity_name(ctx), "to": "mcp", "relationType": "uses"}]},
    )
    _text_of(result, "memory", "create_relations")
    rprint("   [green]Created relationship[/green]")

    rprint("3. Reading knowledge graph...")
    graph = _text_of(await invoke(ctx, "memory", "read_graph", {}), "memory", "read_graph")
    rprint(Rule("Knowledge graph", style="dim"))
    rprint(graph)
    return graph


async def demonstrate_file_operations(ctx: OrchestratorContext) -> str:
    rprint("Listing project files...")
    listing = _text_of(
        await invoke(ctx, "filesystem", "list_directory", {"path": "."}),
        "filesystem",
        "list_directory",
    )
    rprint(Rule("Project files", style="dim"))
    rprint(listing)
    return listing


SUMMARY_PROMPT = """
Here is a knowledge graph, as JSON, built by a tool-orchestration demo.
Summarize in at most three sentences which entities it holds and how they relate.

{graph}
""".strip()


async def summarize_knowledge_graph(ctx: OrchestratorContext) -> str:
    if ctx.llm is None:
        raise NotInitializedError("no language model handle; call initialize() first")
    graph = _text_of(await invoke(ctx, "memory", "read_graph", {}), "memory", "read_graph")
    rprint(f"[cyan]Asking {getattr(ctx.llm, 'model', 'the model')} for a summary...[/cyan]")
    summary = await ctx.llm.complete(SUMMARY_PROMPT.format(graph=graph))
    rprint(summary)
    return summary


LIST_TOOLS = Step("list_available_tools", list_available_tools, "Available tools across all servers")
ANALYZE_PROJECT = Step("analyze_project", analyze_project, "Analyzing current project")
MEMORY_OPERATIONS = Step("demonstrate_memory_operations", demonstrate_memory_operations, "Memory operations")
FILE_OPERATIONS = Step("demonstrate_file_operations", demonstrate_file_operations, "File operations")
SUMMARIZE_GRAPH = Step("summarize_knowledge_graph", summarize_knowledge_graph, "Knowledge graph summary")

DEMO_STEPS: List[Step] = [LIST_TOOLS, ANALYZE_PROJECT, MEMORY_OPERATIONS, FILE_OPERATIONS]
QUICK_STEPS: List[Step] = [LIST_TOOLS, ANALYZE_PROJECT]


def build_steps(quick: bool = False, summarize: bool = False) -> List[Step]:
    steps = list(QUICK_STEPS if quick else DEMO_STEPS)
    if summarize:
        steps.append(SUMMARIZE_GRAPH)
    return steps


# =========================
# Driver
# =========================

async def run_steps(ctx: OrchestratorContext, steps: Sequence[Step]) -> List[StepOutcome]:
    """Run steps in order; a failing step is logged and the next one still runs."""
    outcomes: List[StepOutcome] = []
    for step in steps:
        rprint(Rule(step.title or step.name))
        try:
            result = await step.run(ctx)
        except Exception as e:
            logger.error(
                "Error during %s: %s",
                step.name,
                e,
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )
            outcomes.append(StepOutcome(name=step.name, ok=False, error=e))
            continue
        outcomes.append(StepOutcome(name=step.name, ok=True, result=result))
    return outcomes


def print_summary(outcomes: Sequence[StepOutcome]) -> None:
    tbl = Table(title="Summary", title_justify="left")
    tbl.add_column("step")
    tbl.add_column("status")
    for o in outcomes:
        status = "[green]ok[/green]" if o.ok else f"[red]failed[/red]: {o.error}"
        tbl.add_row(o.name, status)
    rprint(tbl)
    for o in outcomes:
        if o.name == LIST_TOOLS.name and o.ok:
            rprint(f"{sum(o.result.values())} total tools available across {len(o.result)} servers")


async def run_demo(ctx: OrchestratorContext, steps: Sequence[Step]) -> List[StepOutcome]:
    """Initialize, run every step, print a summary; sessions are closed on every path."""
    async with orchestrate(ctx):
        rprint(f"[green]Connected to {len(ctx.sessions)} tool servers:[/green] {', '.join(ctx.sessions)}")
        outcomes = await run_steps(ctx, steps)
        ok = sum(1 for o in outcomes if o.ok)
        rprint(Rule(f"{ok}/{len(outcomes)} demonstrations completed"))
        print_summary(outcomes)
    return outcomes
