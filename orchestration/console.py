# file: orchestration/console.py
"""
Console + logging setup.

Narration goes to stdout through rich; log records (progress, step failures)
go to stderr through a RichHandler so the two streams stay separable.
"""
from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

err_console = Console(stderr=True)


def setup_logging(level: str | int = "INFO") -> None:
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False, rich_tracebacks=True)],
        force=True,
    )
    # the SDK's transports are chatty at INFO
    for noisy in ("mcp", "httpx", "anthropic", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
