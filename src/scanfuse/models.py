"""Core data types for scanfuse."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _count(value: Any) -> int:
    """Coerce a serialized count to a non-negative int."""
    try:
        return max(int(value or 0), 0)
    except (TypeError, ValueError):
        return 0


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class FindingSeverity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


class ScanStatus(str, Enum):
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class CategoryStatus(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    FAIR = "FAIR"
    FAILED = "FAILED"


class Verdict(str, Enum):
    PASSED = "PASSED"
    FAILED = "FAILED"


class RunMode(str, Enum):
    """How the caller consumes the run verdict.

    STANDALONE runs map a failing verdict to a non-zero exit code; AGGREGATE
    runs are one step of a larger run and leave that decision to the caller.
    """
    STANDALONE = "standalone"
    AGGREGATE = "aggregate"


class PriorityLevel(str, Enum):
    P0 = "P0"
    P1 = "P1"
    P2 = "P2"


# ---------------------------------------------------------------------------
# Finding tally
# ---------------------------------------------------------------------------

_SEVERITY_FIELDS = ("critical", "high", "medium", "low", "info")


@dataclass(frozen=True)
class FindingTally:
    """Per-severity finding counts for one tool (or the whole run)."""

    total: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    info: int = 0

    @classmethod
    def zero(cls) -> FindingTally:
        return cls()

    @classmethod
    def from_severities(cls, counts: dict[FindingSeverity, int]) -> FindingTally:
        """Build a fully attributed tally; total is the sum of the buckets."""
        values = {sev.value: counts.get(sev, 0) for sev in FindingSeverity}
        return cls(total=sum(values.values()), **values)

    @classmethod
    def unattributed(cls, count: int) -> FindingTally:
        """Tally for a raw count with no severity breakdown (all medium)."""
        count = max(count, 0)
        return cls(total=count, medium=count)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FindingTally:
        return cls(
            total=_count(data.get("total")),
            critical=_count(data.get("critical")),
            high=_count(data.get("high")),
            medium=_count(data.get("medium")),
            low=_count(data.get("low")),
            info=_count(data.get("info")),
        )

    def __add__(self, other: FindingTally) -> FindingTally:
        if not isinstance(other, FindingTally):
            return NotImplemented
        return FindingTally(
            total=self.total + other.total,
            critical=self.critical + other.critical,
            high=self.high + other.high,
            medium=self.medium + other.medium,
            low=self.low + other.low,
            info=self.info + other.info,
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "critical": self.critical,
            "high": self.high,
            "medium": self.medium,
            "low": self.low,
            "info": self.info,
            "total": self.total,
        }


# ---------------------------------------------------------------------------
# Scan outcome
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScanOutcome:
    """Result of one tool invocation (or an explicit bypass) in a run.

    ``tally`` is only present on SUCCESS and ``error`` only on FAILED.
    ``raw_findings`` carries a tool-reported count when no severity
    breakdown is available.
    """

    tool: str
    status: ScanStatus
    version: str | None = None
    tally: FindingTally | None = None
    execution_time_ms: int | None = None
    error: str | None = None
    reason: str | None = None
    raw_findings: int | None = None

    def __post_init__(self) -> None:
        if self.tally is not None and self.status != ScanStatus.SUCCESS:
            raise ValueError(f"{self.tool}: finding tally only allowed on SUCCESS")
        if self.error is not None and self.status != ScanStatus.FAILED:
            raise ValueError(f"{self.tool}: error message only allowed on FAILED")

    @classmethod
    def success(
        cls,
        tool: str,
        tally: FindingTally | None = None,
        *,
        version: str | None = None,
        execution_time_ms: int | None = None,
        raw_findings: int | None = None,
    ) -> ScanOutcome:
        return cls(
            tool=tool, status=ScanStatus.SUCCESS, version=version,
            tally=tally, execution_time_ms=execution_time_ms,
            raw_findings=raw_findings,
        )

    @classmethod
    def failed(
        cls,
        tool: str,
        error: str,
        *,
        version: str | None = None,
        execution_time_ms: int | None = None,
    ) -> ScanOutcome:
        return cls(
            tool=tool, status=ScanStatus.FAILED, version=version,
            error=error, execution_time_ms=execution_time_ms,
        )

    @classmethod
    def skipped(cls, tool: str, reason: str = "") -> ScanOutcome:
        return cls(tool=tool, status=ScanStatus.SKIPPED, reason=reason or None)

    @property
    def findings(self) -> int:
        """Number of findings reported by the tool."""
        if self.tally is not None:
            return self.tally.total
        return self.raw_findings or 0

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "tool": self.tool,
            "status": self.status.value,
            "findings": self.findings,
        }
        if self.version:
            d["version"] = self.version
        if self.execution_time_ms is not None:
            d["executionTime"] = self.execution_time_ms
        if self.tally is not None:
            d["tally"] = self.tally.to_dict()
        if self.error:
            d["error"] = self.error
        if self.reason:
            d["reason"] = self.reason
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScanOutcome:
        """Rebuild an outcome from its serialized form.

        Accepts the ``tally`` key written by ``to_dict`` as well as the
        legacy ``additionalData`` key for the severity breakdown.
        """
        status = ScanStatus(str(data.get("status", "FAILED")).upper())
        tool = str(data.get("tool", ""))
        if not tool:
            raise ValueError("scan outcome requires a tool name")
        exec_time = data.get("executionTime", data.get("execution_time_ms"))
        exec_time = _count(exec_time) if exec_time is not None else None
        version = data.get("version") or None

        if status == ScanStatus.SUCCESS:
            breakdown = data.get("tally") or data.get("additionalData")
            tally = FindingTally.from_dict(breakdown) if isinstance(breakdown, dict) and breakdown else None
            raw = data.get("findings")
            return cls.success(
                tool, tally, version=version, execution_time_ms=exec_time,
                raw_findings=None if tally is not None or raw is None else _count(raw),
            )
        if status == ScanStatus.FAILED:
            return cls.failed(
                tool, str(data.get("error") or "unknown error"),
                version=version, execution_time_ms=exec_time,
            )
        return cls.skipped(tool, str(data.get("reason") or data.get("error") or ""))


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CategoryScore:
    score: int
    max: int
    status: CategoryStatus

    def to_dict(self) -> dict[str, Any]:
        return {"score": self.score, "max": self.max, "status": self.status.value}


@dataclass(frozen=True)
class OverallScore:
    total: int
    grade: str
    status: Verdict
    max_possible: int = 100

    @property
    def passed(self) -> bool:
        return self.status == Verdict.PASSED

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "maxPossible": self.max_possible,
            "grade": self.grade,
            "status": self.status.value,
        }


@dataclass
class Recommendations:
    immediate: list[str] = field(default_factory=list)
    short_term: list[str] = field(default_factory=list)
    long_term: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "immediate": list(self.immediate),
            "shortTerm": list(self.short_term),
            "longTerm": list(self.long_term),
        }


# ---------------------------------------------------------------------------
# AI analysis
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AIPriority:
    level: PriorityLevel
    description: str

    def to_dict(self) -> dict[str, str]:
        return {"level": self.level.value, "description": self.description}


@dataclass(frozen=True)
class AIAnalysis:
    summary: str
    priorities: tuple[AIPriority, ...] = ()
    recommendations: tuple[str, ...] = ()

    @property
    def critical_issues(self) -> int:
        return self.count(PriorityLevel.P0)

    def count(self, level: PriorityLevel) -> int:
        return sum(1 for p in self.priorities if p.level == level)

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "priorities": [p.to_dict() for p in self.priorities],
            "recommendations": list(self.recommendations),
            "criticalIssues": self.critical_issues,
        }


# ---------------------------------------------------------------------------
# UI testing
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UiTestSummary:
    total: int = 0
    passed: int = 0
    failed: int = 0
    skipped: int = 0
    execution_time_ms: int = 0

    @property
    def status(self) -> str:
        if self.total == 0:
            return ScanStatus.SKIPPED.value
        return Verdict.FAILED.value if self.failed > 0 else Verdict.PASSED.value

    @property
    def success_rate(self) -> int:
        if self.total <= 0:
            return 0
        return int(self.passed / self.total * 100 + 0.5)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "summary": {
                "total": self.total,
                "passed": self.passed,
                "failed": self.failed,
                "skipped": self.skipped,
            },
            "executionTime": self.execution_time_ms,
        }


# ---------------------------------------------------------------------------
# Security report
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ReportMetadata:
    project_name: str
    scan_date: str
    scan_time: str
    version: str
    duration_minutes: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "projectName": self.project_name,
            "scanDate": self.scan_date,
            "scanTime": self.scan_time,
            "scanfuseVersion": self.version,
            "scanDurationMinutes": self.duration_minutes,
        }


@dataclass(frozen=True)
class SecurityReport:
    metadata: ReportMetadata
    overall: OverallScore
    categories: dict[str, CategoryScore]
    tools: tuple[ScanOutcome, ...]
    findings: FindingTally
    recommendations: Recommendations
    ai_analysis: AIAnalysis | None = None
    ui_testing: UiTestSummary | None = None
    ai_usage: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "metadata": self.metadata.to_dict(),
            "overallScore": self.overall.to_dict(),
            "categoryScores": {k: v.to_dict() for k, v in self.categories.items()},
            "tools": [t.to_dict() for t in self.tools],
            "findings": self.findings.to_dict(),
            "recommendations": self.recommendations.to_dict(),
        }
        if self.ai_analysis is not None:
            d["aiAnalysis"] = self.ai_analysis.to_dict()
        if self.ui_testing is not None:
            d["uiTesting"] = self.ui_testing.to_dict()
        if self.ai_usage is not None:
            d["aiUsage"] = dict(self.ai_usage)
        return d
