# file: llm_handle/__init__.py
"""
Language-model handle used by the orchestrator.
"""
from .backends import (
    LLMBackend,
    AnthropicBackend,
    OpenAIChatBackend,
    DeepSeekBackend,
    GeminiBackend,
    resolve_llm_backend,
)

__all__ = [
    "LLMBackend",
    "AnthropicBackend",
    "OpenAIChatBackend",
    "DeepSeekBackend",
    "GeminiBackend",
    "resolve_llm_backend",
]
