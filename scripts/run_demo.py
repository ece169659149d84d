# file: scripts/run_demo.py
from __future__ import annotations

"""
CLI to run the multi-server tool orchestration demo.

Examples
--------
# Filesystem server rooted at the current directory + memory server
python -m scripts.run_demo

# Only list tools and analyze the project (quick check)
python -m scripts.run_demo --quick

# Another project, its package.json, and a model-written graph summary
python -m scripts.run_demo --root ../web-app --manifest package.json --summarize

# Custom servers from a client config file ({"mcpServers": {...}})
python -m scripts.run_demo --config servers.json

Environment
-----------
.env is loaded at startup. ANTHROPIC_API_KEY (or the key for --provider) is
only needed with --summarize.
"""

import asyncio
import logging
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich import print as rprint
from rich.rule import Rule

from endpoints.config import EndpointConfigError, default_endpoints, load_endpoint_file
from llm_handle.backends import resolve_llm_backend
from orchestration.console import setup_logging
from orchestration.orchestrator import OrchestratorContext
from orchestration.steps import build_steps, run_demo
from toolclient.stdio import open_stdio_session

logger = logging.getLogger("scripts.run_demo")

app = typer.Typer(add_completion=False)


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@app.command()
def main(
    root: Path = typer.Option(Path("."), help="Project directory exposed by the filesystem server."),
    config: Optional[Path] = typer.Option(None, help="JSON endpoint file (mcpServers shape) replacing the defaults."),
    manifest: str = typer.Option("pyproject.toml", help="Manifest to read, relative to --root (.json or .toml)."),
    quick: bool = typer.Option(False, "--quick/--full", help="Only list tools and analyze the project."),
    summarize: bool = typer.Option(False, "--summarize/--no-summarize", help="Ask the language model to summarize the graph."),
    provider: Optional[str] = typer.Option(None, help="LLM provider: anthropic|openai|deepseek|gemini."),
    log_level: LogLevel = typer.Option(LogLevel.INFO, case_sensitive=False, help="Log level for stderr output."),
):
    """
    Connect to the tool servers, run the demonstration steps, disconnect.
    """
    load_dotenv()
    setup_logging(log_level.value)

    root = root.expanduser().resolve()
    try:
        endpoints = load_endpoint_file(config) if config else default_endpoints(root)
    except EndpointConfigError as e:
        logger.error("Error: %s", e)
        raise typer.Exit(code=1)

    ctx = OrchestratorContext(
        endpoints=endpoints,
        root=root,
        manifest=manifest,
        connector=open_stdio_session,
        llm_factory=partial(resolve_llm_backend, provider),
    )
    steps = build_steps(quick=quick, summarize=summarize)

    rprint(Rule("Multi-server tool orchestrator"))
    rprint(f"[bold]{len(endpoints)}[/bold] endpoints: {', '.join(endpoints)} | {len(steps)} steps")
    try:
        outcomes = asyncio.run(run_demo(ctx, steps))
    except Exception as e:
        logger.error("Error: %s", e, exc_info=logger.isEnabledFor(logging.DEBUG))
        raise typer.Exit(code=1)

    failed = [o.name for o in outcomes if not o.ok]
    if failed:
        rprint(f"[yellow]Done with {len(failed)} failed step(s): {', '.join(failed)}[/yellow]")
    else:
        rprint("[bold green]All demonstrations complete.[/bold green]")


if __name__ == "__main__":
    app()
