"""Scoring engine: scan ledger -> category scores -> overall score.

Category attribution is keyed by tool identity through a declarative credit
table.  A new scanner contributes to a category only once it has an entry
in the table; callers can pass an extended table to ``score_ledger``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from scanfuse import penalty
from scanfuse.defaults import (
    CATEGORY_MAX,
    COVERAGE_STEPS,
    GRADE_FLOOR,
    GRADE_STEPS,
    MAX_SCORE,
    OSV_DEPENDENCY_CREDIT,
    PASS_THRESHOLD,
    STATUS_STEPS,
    TOOL_DOCKER,
    TOOL_GITLEAKS,
    TOOL_OSV,
    TOOL_SEMGREP,
    TOOL_TRIVY,
    TOOL_ZAP,
    TRIVY_DEPENDENCY_CREDIT,
)
from scanfuse.ledger import ScanLedger
from scanfuse.models import (
    AIPriority,
    CategoryScore,
    CategoryStatus,
    OverallScore,
    ScanStatus,
    Verdict,
)


@dataclass(frozen=True)
class ToolCredit:
    """Points a successful tool run earns toward one category.

    ``points=None`` means full credit: the category's whole budget.
    """

    category: str
    points: int | None = None

    def award(self, category_max: int) -> int:
        return category_max if self.points is None else self.points


DEFAULT_CREDITS: dict[str, ToolCredit] = {
    TOOL_SEMGREP: ToolCredit("staticAnalysis"),
    TOOL_GITLEAKS: ToolCredit("secretDetection"),
    TOOL_TRIVY: ToolCredit("dependencySecurity", TRIVY_DEPENDENCY_CREDIT),
    TOOL_OSV: ToolCredit("dependencySecurity", OSV_DEPENDENCY_CREDIT),
    TOOL_ZAP: ToolCredit("webSecurity"),
    TOOL_DOCKER: ToolCredit("webSecurity"),
}


@dataclass(frozen=True)
class ScoreCard:
    categories: dict[str, CategoryScore]
    base_total: int
    penalty: int
    overall: OverallScore

    def to_dict(self) -> dict[str, Any]:
        return {
            "overallScore": self.overall.to_dict(),
            "categoryScores": {k: v.to_dict() for k, v in self.categories.items()},
            "baseTotal": self.base_total,
            "aiPenalty": self.penalty,
        }


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def category_status(score: int, maximum: int) -> CategoryStatus:
    """Status is a pure function of score/max."""
    if maximum <= 0:
        return CategoryStatus.FAILED
    for ratio, status in STATUS_STEPS:
        if score >= maximum * ratio:
            return CategoryStatus(status)
    return CategoryStatus.FAILED


def coverage_score(successful: int, attempted: int, maximum: int) -> int:
    """Step function of the percentage of attempted tools that succeeded."""
    if attempted <= 0:
        return 0
    pct = successful / attempted * 100
    for threshold, fraction in COVERAGE_STEPS:
        if pct >= threshold:
            return round_half_up(maximum * fraction)
    return 0


def grade_for(total: int) -> str:
    for threshold, grade in GRADE_STEPS:
        if total >= threshold:
            return grade
    return GRADE_FLOOR


def verdict_for(total: int) -> Verdict:
    return Verdict.PASSED if total >= PASS_THRESHOLD else Verdict.FAILED


def score_ledger(
    ledger: ScanLedger,
    *,
    credits: Mapping[str, ToolCredit] | None = None,
    category_max: Mapping[str, int] | None = None,
) -> tuple[dict[str, CategoryScore], int]:
    """Compute the five category scores and the clamped base total."""
    credits = DEFAULT_CREDITS if credits is None else credits
    maxima = dict(CATEGORY_MAX if category_max is None else category_max)
    raw: dict[str, int] = {name: 0 for name in maxima}

    for outcome in ledger.latest():
        if outcome.status != ScanStatus.SUCCESS:
            continue
        credit = credits.get(outcome.tool)
        if credit is None or credit.category not in raw:
            continue
        raw[credit.category] += credit.award(maxima[credit.category])

    if "toolCoverage" in raw:
        raw["toolCoverage"] = coverage_score(
            ledger.success_count(), ledger.attempted_count(), maxima["toolCoverage"],
        )

    categories: dict[str, CategoryScore] = {}
    for name, maximum in maxima.items():
        score = clamp(raw[name], 0, maximum)
        categories[name] = CategoryScore(score=score, max=maximum,
                                         status=category_status(score, maximum))

    base_total = clamp(sum(c.score for c in categories.values()), 0, MAX_SCORE)
    return categories, base_total


def finalize(base_total: int, priorities: Iterable[AIPriority] = ()) -> tuple[OverallScore, int]:
    """Apply the AI penalty, then derive grade and verdict from the result."""
    deduction = penalty.total_penalty(priorities)
    total = penalty.apply_penalty(base_total, deduction)
    overall = OverallScore(
        total=total,
        grade=grade_for(total),
        status=verdict_for(total),
        max_possible=MAX_SCORE,
    )
    return overall, deduction


def evaluate(
    ledger: ScanLedger,
    priorities: Iterable[AIPriority] = (),
    *,
    credits: Mapping[str, ToolCredit] | None = None,
) -> ScoreCard:
    """Full scoring pass: categories, base total, penalty, grade and verdict."""
    categories, base_total = score_ledger(ledger, credits=credits)
    overall, deduction = finalize(base_total, priorities)
    return ScoreCard(
        categories=categories,
        base_total=base_total,
        penalty=deduction,
        overall=overall,
    )
