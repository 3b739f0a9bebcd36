"""Anthropic Claude adapter for the AI executive summary."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError

from scanfuse.ai.port import ExecutiveSummary, SummaryResult
from scanfuse.defaults import AI_MAX_TOKENS, DEFAULT_ANTHROPIC_MODEL

log = logging.getLogger("scanfuse.ai.anthropic")

_SYSTEM_PROMPT = (
    "You are a cautious senior security auditor. Output exactly the requested "
    "JSON object and nothing else."
)


def _build_summary_prompt(findings: dict[str, Any]) -> str:
    return (
        "Create an executive summary of the following security scan results.\n\n"
        f"## Findings\n```json\n{json.dumps(findings, indent=2, default=str)[:20000]}\n```\n\n"
        "Classify each real risk as P0 (critical), P1 (high) or P2 (medium). "
        "Respond in JSON with keys: summary (string), priorities (list of objects "
        "with keys level and description), recommendations (list of strings)."
    )


def _parse_response(text: str) -> ExecutiveSummary:
    """Extract and validate the JSON object in the model response."""
    start = text.find("{")
    end = text.rfind("}") + 1
    if start < 0 or end <= start:
        raise ValueError("LLM response contains no JSON object")
    try:
        return ExecutiveSummary.model_validate_json(text[start:end])
    except ValidationError as e:
        raise ValueError(f"LLM response does not match summary schema: {e}") from e


def _usage_dict(usage: Any) -> dict[str, Any]:
    if usage is None:
        return {}
    return {
        "input_tokens": getattr(usage, "input_tokens", 0) or 0,
        "output_tokens": getattr(usage, "output_tokens", 0) or 0,
    }


class AnthropicLLMAdapter:
    """Anthropic Claude adapter for executive summaries."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_ANTHROPIC_MODEL,
        max_tokens: int = AI_MAX_TOKENS,
    ):
        import anthropic

        self._client = anthropic.Anthropic(api_key=api_key)
        self._model = model
        self._max_tokens = max_tokens

    @property
    def provider_name(self) -> str:
        return "anthropic"

    def summarize_findings(self, findings: dict[str, Any]) -> SummaryResult:
        response = self._client.messages.create(
            model=self._model,
            max_tokens=self._max_tokens,
            system=_SYSTEM_PROMPT,
            messages=[{"role": "user", "content": _build_summary_prompt(findings)}],
        )
        summary = _parse_response(response.content[0].text)
        return SummaryResult(summary=summary, usage=_usage_dict(response.usage))

    def is_available(self) -> bool:
        return self._client is not None
