"""Tests for the scoring engine."""

import pytest

from conftest import ok
from scanfuse import scoring
from scanfuse.ledger import ScanLedger
from scanfuse.models import AIPriority, CategoryStatus, PriorityLevel, ScanOutcome, Verdict
from scanfuse.scoring import ToolCredit


class TestHelpers:
    @pytest.mark.parametrize("score,maximum,status", [
        (25, 25, CategoryStatus.EXCELLENT),
        (20, 25, CategoryStatus.GOOD),
        (13, 20, CategoryStatus.FAIR),
        (12, 25, CategoryStatus.FAILED),
        (0, 0, CategoryStatus.FAILED),
    ])
    def test_category_status(self, score, maximum, status):
        assert scoring.category_status(score, maximum) == status

    @pytest.mark.parametrize("ok_count,attempted,expected", [
        (5, 5, 10), (4, 5, 10), (3, 5, 8), (2, 5, 6), (1, 5, 0), (0, 0, 0),
    ])
    def test_coverage_steps(self, ok_count, attempted, expected):
        assert scoring.coverage_score(ok_count, attempted, 10) == expected

    @pytest.mark.parametrize("total,grade", [
        (100, "Excellent"), (90, "Excellent"), (89, "Good"), (70, "Fair"),
        (65, "Poor"), (59, "Critical"), (0, "Critical"),
    ])
    def test_grades(self, total, grade):
        assert scoring.grade_for(total) == grade

    def test_round_half_up(self):
        assert scoring.round_half_up(2.5) == 3
        assert scoring.round_half_up(0.5) == 1
        assert scoring.round_half_up(7.4) == 7


class TestScenarios:
    def test_all_tools_clean(self, clean_ledger):
        card = scoring.evaluate(clean_ledger)
        assert all(c.status == CategoryStatus.EXCELLENT for c in card.categories.values())
        assert card.overall.total == 100
        assert card.overall.grade == "Excellent"
        assert card.overall.status == Verdict.PASSED

    def test_partial_coverage(self, degraded_ledger):
        card = scoring.evaluate(degraded_ledger)
        cats = card.categories
        assert cats["staticAnalysis"].score == 0
        assert cats["secretDetection"].score == 20
        assert cats["dependencySecurity"].score == 12
        assert cats["webSecurity"].score == 0
        assert cats["toolCoverage"].score == 6
        assert card.overall.total == 38
        assert card.overall.status == Verdict.FAILED

    def test_ai_penalty_crosses_threshold(self):
        overall, deduction = scoring.finalize(85, [
            AIPriority(PriorityLevel.P0, "SQL injection in /login"),
            AIPriority(PriorityLevel.P1, "Outdated TLS library"),
        ])
        assert deduction == 25
        assert overall.total == 60
        assert overall.grade == "Poor"
        assert overall.status == Verdict.FAILED


class TestScoreLedger:
    def test_findings_do_not_reduce_category(self):
        ledger = ScanLedger([ok("semgrep", critical=4)])
        cats, _ = scoring.score_ledger(ledger)
        assert cats["staticAnalysis"].score == 25

    def test_unknown_tool_only_counts_for_coverage(self):
        ledger = ScanLedger([ok("bandit")])
        cats, total = scoring.score_ledger(ledger)
        assert cats["staticAnalysis"].score == 0
        assert cats["toolCoverage"].score == 10
        assert total == 10

    def test_extended_credit_table(self):
        credits = dict(scoring.DEFAULT_CREDITS, bandit=ToolCredit("staticAnalysis"))
        cats, _ = scoring.score_ledger(ScanLedger([ok("bandit")]), credits=credits)
        assert cats["staticAnalysis"].score == 25

    def test_web_credit_clamped(self):
        ledger = ScanLedger([ok("zap"), ok("docker")])
        cats, _ = scoring.score_ledger(ledger)
        assert cats["webSecurity"].score == 20

    def test_latest_outcome_scored(self):
        ledger = ScanLedger([ok("semgrep"), ScanOutcome.failed("semgrep", "crash")])
        cats, _ = scoring.score_ledger(ledger)
        assert cats["staticAnalysis"].score == 0

    def test_empty_ledger(self):
        card = scoring.evaluate(ScanLedger())
        assert card.overall.total == 0
        assert card.overall.grade == "Critical"

    def test_total_never_exceeds_max(self, clean_ledger):
        clean_ledger.append(ok("docker"))
        assert scoring.evaluate(clean_ledger).overall.total == 100

    def test_score_card_to_dict(self, clean_ledger):
        d = scoring.evaluate(clean_ledger, [AIPriority(PriorityLevel.P2, "x")]).to_dict()
        assert d["baseTotal"] == 100
        assert d["aiPenalty"] == 5
        assert d["overallScore"]["total"] == 95
        assert d["categoryScores"]["toolCoverage"] == {"score": 10, "max": 10, "status": "EXCELLENT"}
