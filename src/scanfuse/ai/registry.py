"""LLM adapter registry."""

from __future__ import annotations

import logging

from scanfuse.ai.null_adapter import NullLLMAdapter
from scanfuse.ai.port import LLMPort
from scanfuse.defaults import DEFAULT_ANTHROPIC_MODEL

log = logging.getLogger("scanfuse.ai.registry")

_adapter: LLMPort | None = None


def get_adapter(provider: str = "null", api_key: str = "", model: str = "") -> LLMPort:
    """Get or create the configured LLM adapter."""
    global _adapter
    if _adapter is not None:
        return _adapter

    if provider == "anthropic" and api_key:
        try:
            from scanfuse.ai.anthropic_adapter import AnthropicLLMAdapter

            _adapter = AnthropicLLMAdapter(api_key, model or DEFAULT_ANTHROPIC_MODEL)
        except ImportError:
            log.warning("anthropic package not installed, using null adapter")
            _adapter = NullLLMAdapter()
    else:
        if provider not in ("null", ""):
            log.warning("AI provider %r unavailable (missing API key or unsupported)", provider)
        _adapter = NullLLMAdapter()

    return _adapter


def set_adapter(adapter: LLMPort) -> None:
    """Install a specific adapter (used by tests and embedding callers)."""
    global _adapter
    _adapter = adapter


def reset_adapter() -> None:
    """Reset the cached adapter (for tests)."""
    global _adapter
    _adapter = None
