"""Null LLM adapter: no-op default when no LLM is configured."""

from __future__ import annotations

from typing import Any

from scanfuse.ai.port import ExecutiveSummary, SummaryResult


class NullLLMAdapter:
    """No-op adapter. Default when no LLM is configured."""

    @property
    def provider_name(self) -> str:
        return "null"

    def summarize_findings(self, findings: dict[str, Any]) -> SummaryResult:
        return SummaryResult(summary=ExecutiveSummary(summary=""))

    def is_available(self) -> bool:
        return False
