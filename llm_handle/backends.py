# file: llm_handle/backends.py
from __future__ import annotations
"""
Language-model backends for the orchestrator's LLM handle.

The handle is built during initialize() but only used by the optional
knowledge-graph summary step, so every backend creates its vendor client
lazily: a missing credential surfaces when the model is first called, not
when the orchestrator starts.

Backends
--------
- AnthropicBackend (default): Anthropic Messages API.
  env:
    ANTHROPIC_API_KEY
    ANTHROPIC_MODEL (default: claude-sonnet-4-5-20250929)

- OpenAIChatBackend: OpenAI Chat Completions API.
  env:
    OPENAI_API_KEY
    OPENAI_MODEL (default: gpt-4o-mini)

- DeepSeekBackend: DeepSeek's OpenAI-compatible API.
  env:
    DEEPSEEK_API_KEY
    DEEPSEEK_BASE_URL (default: https://api.deepseek.com)
    DEEPSEEK_MODEL (default: deepseek-chat)

- GeminiBackend: Google GenAI.
  env:
    GEMINI_API_KEY
    GEMINI_MODEL (default: gemini-2.5-flash)

- resolve_llm_backend(provider): provider argument, else LLM_PROVIDER, else anthropic.

Contract
--------
Each backend implements:
    async complete(prompt: str) -> str

Errors from the vendor SDK propagate; there is no retry.
"""
import os
from typing import Any, Dict, Optional, Type

DEFAULT_TEMPERATURE = 0.3
DEFAULT_MAX_TOKENS = 512


def _require_env(var: str) -> str:
    val = os.getenv(var)
    if not val:
        raise RuntimeError(f"{var} not set")
    return val


class LLMBackend:
    provider: str = "base"

    def __init__(self, model: Optional[str] = None, temperature: float = DEFAULT_TEMPERATURE) -> None:
        self.model = model
        self.temperature = temperature
        self._client: Any = None

    def _build_client(self) -> Any:
        raise NotImplementedError

    def _ensure_client(self) -> Any:
        if self._client is None:
            self._client = self._build_client()
        return self._client

    async def complete(self, prompt: str) -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r})"


# ---------------------------
# Anthropic Messages API
# ---------------------------

class AnthropicBackend(LLMBackend):
    provider = "anthropic"

    def __init__(self, model: Optional[str] = None, temperature: float = DEFAULT_TEMPERATURE) -> None:
        super().__init__(model or os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-5-20250929"), temperature)

    def _build_client(self) -> Any:
        from anthropic import AsyncAnthropic  # lazy import
        return AsyncAnthropic(api_key=_require_env("ANTHROPIC_API_KEY"))

    async def complete(self, prompt: str) -> str:
        client = self._ensure_client()
        resp = await client.messages.create(
            model=self.model,
            max_tokens=DEFAULT_MAX_TOKENS,
            temperature=self.temperature,
            messages=[{"role": "user", "content": prompt}],
        )
        return "".join(getattr(b, "text", "") for b in resp.content)


# ---------------------------
# OpenAI Chat Completions API
# ---------------------------

class OpenAIChatBackend(LLMBackend):
    provider = "openai"

    def __init__(self, model: Optional[str] = None, temperature: float = DEFAULT_TEMPERATURE) -> None:
        super().__init__(model or os.getenv("OPENAI_MODEL", "gpt-4o-mini"), temperature)

    def _build_client(self) -> Any:
        from openai import AsyncOpenAI  # lazy import
        return AsyncOpenAI(api_key=_require_env("OPENAI_API_KEY"))

    async def complete(self, prompt: str) -> str:
        client = self._ensure_client()
        resp = await client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
            max_tokens=DEFAULT_MAX_TOKENS,
        )
        return resp.choices[0].message.content or ""


# --------------------
# DeepSeek (OpenAI API)
# --------------------

class DeepSeekBackend(OpenAIChatBackend):
    provider = "deepseek"

    def __init__(self, model: Optional[str] = None, temperature: float = DEFAULT_TEMPERATURE) -> None:
        super().__init__(model or os.getenv("DEEPSEEK_MODEL", "deepseek-chat"), temperature)

    def _build_client(self) -> Any:
        from openai import AsyncOpenAI  # lazy import

        base_url = os.getenv("DEEPSEEK_BASE_URL", "https://api.deepseek.com")
        return AsyncOpenAI(api_key=_require_env("DEEPSEEK_API_KEY"), base_url=base_url)


# -------------
# Gemini Backend
# -------------

class GeminiBackend(LLMBackend):
    provider = "gemini"

    def __init__(self, model: Optional[str] = None, temperature: float = DEFAULT_TEMPERATURE) -> None:
        super().__init__(model or os.getenv("GEMINI_MODEL", "gemini-2.5-flash"), temperature)

    def _build_client(self) -> Any:
        from google import genai  # lazy import
        return genai.Client(api_key=_require_env("GEMINI_API_KEY"))

    async def complete(self, prompt: str) -> str:
        from google.genai import types

        client = self._ensure_client()
        resp = await client.aio.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                temperature=self.temperature,
                max_output_tokens=DEFAULT_MAX_TOKENS,
            ),
        )
        return resp.text or ""


# -------------------------
# Backend resolution helper
# -------------------------

BACKENDS: Dict[str, Type[LLMBackend]] = {
    "anthropic": AnthropicBackend,
    "openai": OpenAIChatBackend,
    "deepseek": DeepSeekBackend,
    "gemini": GeminiBackend,
}


def resolve_llm_backend(provider: Optional[str] = None, model: Optional[str] = None) -> LLMBackend:
    """
    Return an instantiated (not yet connected) backend.
    Priority: explicit provider -> LLM_PROVIDER env -> "anthropic".
    """
    name = (provider or os.getenv("LLM_PROVIDER") or "anthropic").strip().lower()
    try:
        cls = BACKENDS[name]
    except KeyError:
        raise ValueError(f"unknown LLM provider {name!r}; expected one of {sorted(BACKENDS)}") from None
    return cls(model=model)
