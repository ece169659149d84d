# file: orchestration/__init__.py
"""
Orchestration layer: session lifecycle, tool routing, and the demonstration steps.
"""
from .errors import (
    OrchestratorError,
    NotInitializedError,
    SessionNotFoundError,
    OrchestratorStateError,
    ToolCallError,
)
from .orchestrator import (
    Lifecycle,
    OrchestratorContext,
    initialize,
    list_tools,
    invoke,
    cleanup,
    orchestrate,
)
from .steps import (
    Step,
    StepOutcome,
    DEMO_STEPS,
    QUICK_STEPS,
    build_steps,
    run_steps,
    run_demo,
)

__all__ = [
    # errors
    "OrchestratorError",
    "NotInitializedError",
    "SessionNotFoundError",
    "OrchestratorStateError",
    "ToolCallError",
    # orchestrator
    "Lifecycle",
    "OrchestratorContext",
    "initialize",
    "list_tools",
    "invoke",
    "cleanup",
    "orchestrate",
    # steps
    "Step",
    "StepOutcome",
    "DEMO_STEPS",
    "QUICK_STEPS",
    "build_steps",
    "run_steps",
    "run_demo",
]
