"""LLM port: structured executive-summary schema and adapter protocol."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Protocol, runtime_checkable

from pydantic import BaseModel, Field


class PriorityItem(BaseModel):
    level: Literal["P0", "P1", "P2"]
    description: str = Field(..., min_length=1)


class ExecutiveSummary(BaseModel):
    """Structured AI risk summary.

    This is the shape the model is asked to emit directly, and the shape
    persisted as ``ai/summary.json``.
    """

    schema_version: Literal["EXECUTIVE_SUMMARY_V1"] = "EXECUTIVE_SUMMARY_V1"
    summary: str
    priorities: list[PriorityItem] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


@dataclass
class SummaryResult:
    """Executive summary plus the token usage reported by the provider."""

    summary: ExecutiveSummary
    usage: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class LLMPort(Protocol):
    """Protocol for LLM adapters that summarize scan findings."""

    @property
    def provider_name(self) -> str: ...

    def summarize_findings(self, findings: dict[str, Any]) -> SummaryResult: ...

    def is_available(self) -> bool: ...
