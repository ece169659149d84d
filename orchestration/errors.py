# file: orchestration/errors.py
"""
Orchestrator error taxonomy.

- NotInitializedError: an operation ran before initialize() (or after cleanup()).
- SessionNotFoundError: the endpoint key has no session in the context.
  Subclasses NotInitializedError: the session for that key was never set up.
- OrchestratorStateError: a lifecycle transition that is not allowed
  (e.g. initialize() twice).
- ToolCallError: a tool answered, but with an error flag or without the
  text content the caller needs.

Transport failures (subprocess died, protocol errors) are not wrapped; they
propagate as whatever the client library raises.
"""
from __future__ import annotations


class OrchestratorError(Exception):
    pass


class NotInitializedError(OrchestratorError):
    pass


class SessionNotFoundError(NotInitializedError):
    def __init__(self, endpoint: str) -> None:
        super().__init__(f"session not found: {endpoint!r}")
        self.endpoint = endpoint


class OrchestratorStateError(OrchestratorError):
    pass


class ToolCallError(OrchestratorError):
    def __init__(self, endpoint: str, tool: str, detail: str) -> None:
        super().__init__(f"{endpoint}.{tool}: {detail}")
        self.endpoint = endpoint
        self.tool = tool
