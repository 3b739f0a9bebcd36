"""AI collaborators: LLM adapters, executive summary, token usage."""

from scanfuse.ai.port import ExecutiveSummary, LLMPort, PriorityItem, SummaryResult
from scanfuse.ai.usage import UsageAccumulator

__all__ = [
    "ExecutiveSummary",
    "LLMPort",
    "PriorityItem",
    "SummaryResult",
    "UsageAccumulator",
]
