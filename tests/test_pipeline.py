"""Tests for the scan pipeline with fake scanners and LLM adapters."""

import json
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from conftest import write_json
from scanfuse import pipeline
from scanfuse.adapters.base import ToolRun
from scanfuse.ai.port import ExecutiveSummary, PriorityItem, SummaryResult
from scanfuse.config import load_config
from scanfuse.errors import ReportPersistenceError, ScanfuseError
from scanfuse.models import RunMode, ScanStatus


class FakeScanner:
    """Scanner that writes a canned artifact and returns a fixed exit code."""

    def __init__(self, tool, artifact=None, data=None, returncode=0, available=True, version="1.0.0"):
        self.tool_name = tool
        self._artifact = artifact
        self._data = data
        self._rc = returncode
        self._available = available
        self._version = version
        self.calls = []

    def is_available(self):
        return self._available

    def version(self):
        return self._version

    def run(self, path, artifacts_dir, **options):
        self.calls.append(options)
        produced = None
        if self._artifact:
            produced = write_json(Path(artifacts_dir) / self._artifact, self._data)
        error = None if self._rc == 0 else f"exit code {self._rc}"
        return ToolRun(self.tool_name, self._rc, str(produced) if produced else None, 42, error)


class FakeLLM:
    provider_name = "fake"

    def __init__(self, priorities=()):
        self._priorities = priorities

    def summarize_findings(self, findings):
        return SummaryResult(
            ExecutiveSummary(summary="Findings reviewed.",
                             priorities=[PriorityItem(level=l, description="issue") for l in self._priorities]),
            {"input_tokens": 400, "output_tokens": 100},
        )

    def is_available(self):
        return True


def _clean_scanners():
    return [
        FakeScanner("semgrep", "semgrep.json", {"version": "1.50.0", "results": []}),
        FakeScanner("gitleaks", "gitleaks.json", []),
        FakeScanner("trivy", "trivy.sarif", {"runs": [{"results": []}]}),
        FakeScanner("osv-scanner", "osv.json", {"results": []}),
        FakeScanner("zap", "zap.json", {"site": []}),
    ]


@pytest.fixture
def config(project_dir):
    return load_config(project_dir, env={}, ai_enabled=False, app_url="http://localhost:3000")


@pytest.fixture
def reachable():
    with patch("scanfuse.pipeline.probe_target", return_value=True) as probe:
        yield probe


class TestExecuteScanner:
    def test_findings_exit_code_counts_as_success(self, config):
        scanner = FakeScanner("gitleaks", "gitleaks.json", [{}, {}, {}], returncode=1)
        outcome = pipeline.execute_scanner(scanner, config)
        assert outcome.status == ScanStatus.SUCCESS
        assert outcome.tally.high == 3
        assert outcome.version == "1.0.0"

    def test_exit_one_without_artifact_fails(self, config):
        outcome = pipeline.execute_scanner(FakeScanner("semgrep", returncode=1), config)
        assert outcome.status == ScanStatus.FAILED
        assert outcome.error == "exit code 1"

    def test_other_exit_code_fails(self, config):
        scanner = FakeScanner("trivy", "trivy.sarif", {"runs": []}, returncode=2)
        assert pipeline.execute_scanner(scanner, config).status == ScanStatus.FAILED

    def test_unavailable(self, config):
        outcome = pipeline.execute_scanner(FakeScanner("osv-scanner", available=False), config)
        assert outcome.status == ScanStatus.FAILED
        assert outcome.error == "osv-scanner not installed"

    def test_web_tool_skipped(self, config):
        scanner = FakeScanner("zap")
        outcome = pipeline.execute_scanner(scanner, config, skip_reason="Target unreachable")
        assert outcome.status == ScanStatus.SKIPPED
        assert outcome.reason == "Target unreachable"
        assert scanner.calls == []

    def test_artifact_version_preferred(self, config):
        scanner = FakeScanner("semgrep", "semgrep.json", {"version": "1.50.0", "results": []})
        assert pipeline.execute_scanner(scanner, config).version == "1.50.0"

    def test_options_passed(self, config):
        scanner = FakeScanner("docker")
        pipeline.execute_scanner(scanner, config)
        assert scanner.calls == [{"timeout": 600, "target": "http://localhost:3000"}]


class TestWebTarget:
    def test_no_url(self, project_dir):
        cfg = load_config(project_dir, env={})
        assert pipeline.web_skip_reason(cfg) == "No app URL configured"

    def test_unreachable(self, config):
        with patch("scanfuse.pipeline.httpx.get", side_effect=httpx.ConnectError("refused")):
            assert pipeline.web_skip_reason(config) == "Target unreachable"

    def test_reachable_on_any_status(self, config):
        with patch("scanfuse.pipeline.httpx.get", return_value=httpx.Response(503)):
            assert pipeline.web_skip_reason(config) is None


class TestRunScan:
    def test_clean_run_passes(self, config, reachable):
        result = pipeline.run_scan(config, scanners=_clean_scanners())
        assert result.report.overall.total == 100
        assert result.verdict is True
        assert result.exit_code == 0
        saved = json.loads((config.artifacts_path / "security-summary.json").read_text())
        assert saved["overallScore"]["grade"] == "Excellent"
        assert (config.artifacts_path / "security-report.md").exists()
        sarif = json.loads((config.artifacts_path / "report.sarif").read_text())
        assert sarif == {"version": "2.1.0", "runs": [{"results": []}]}
        assert result.paths["sarif"].endswith("report.sarif")

    def test_web_tools_skipped_without_url(self, project_dir):
        cfg = load_config(project_dir, env={}, ai_enabled=False)
        result = pipeline.run_scan(cfg, scanners=_clean_scanners())
        zap = [o for o in result.report.tools if o.tool == "zap"][0]
        assert zap.status == ScanStatus.SKIPPED
        assert zap.reason == "No app URL configured"
        # 25 + 20 + 25 + 0 + coverage 4/5 -> 10
        assert result.report.overall.total == 80
        assert result.tool_errors is False
        assert result.verdict is True

    def test_tool_failure_fails_verdict(self, config, reachable):
        scanners = _clean_scanners()
        scanners[0] = FakeScanner("semgrep", available=False)
        result = pipeline.run_scan(config, scanners=scanners)
        assert result.tool_errors is True
        assert result.verdict is False
        assert result.exit_code == 1
        assert result.report.recommendations.immediate[0].startswith("Install semgrep")

    def test_aggregate_mode_always_exits_zero(self, config, reachable):
        scanners = _clean_scanners()
        scanners[0] = FakeScanner("semgrep", available=False)
        result = pipeline.run_scan(config, scanners=scanners, mode=RunMode.AGGREGATE)
        assert result.verdict is False
        assert result.exit_code == 0

    def test_ui_failures_fail_verdict(self, config, reachable):
        write_json(config.artifacts_path / "playwright-results.json",
                   {"stats": {"expected": 5, "unexpected": 2}})
        result = pipeline.run_scan(config, scanners=_clean_scanners())
        assert result.report.ui_testing.failed == 2
        assert result.verdict is False

    def test_ai_summary_penalizes_and_records_usage(self, project_dir, reachable):
        cfg = load_config(project_dir, env={}, app_url="http://localhost:3000")
        result = pipeline.run_scan(cfg, scanners=_clean_scanners(), adapter=FakeLLM(["P0", "P1"]))
        assert result.report.overall.total == 75
        assert result.report.ai_usage["totalTokens"] == 500
        assert result.verdict is True
        usage = json.loads((cfg.artifacts_path / "ai" / "total-usage.json").read_text())
        assert usage["totalCalls"] == 1

    def test_ai_critical_to_fail(self, project_dir, reachable):
        cfg = load_config(project_dir, env={}, app_url="http://localhost:3000",
                          ai_critical_to_fail=True)
        result = pipeline.run_scan(cfg, scanners=_clean_scanners(), adapter=FakeLLM(["P0"]))
        assert result.report.overall.total == 85
        assert result.verdict is False

    def test_ai_disabled_ignores_adapter(self, config, reachable):
        result = pipeline.run_scan(config, scanners=_clean_scanners(), adapter=FakeLLM(["P0"]))
        assert result.report.ai_analysis is None
        assert result.report.overall.total == 100

    def test_persistence_error_propagates(self, config, reachable):
        with patch("scanfuse.report.write_atomic", side_effect=OSError("disk full")):
            with pytest.raises(ReportPersistenceError):
                pipeline.run_scan(config, scanners=_clean_scanners())


class TestRebuildReport:
    def test_picks_up_later_ai_summary(self, config, reachable):
        pipeline.run_scan(config, scanners=_clean_scanners())
        ai_dir = config.artifacts_path / "ai"
        ai_dir.mkdir()
        (ai_dir / "summary.md").write_text("Risky.\n\n## Priorities\n- **P1**: Weak TLS\n")

        cfg = load_config(config.project_path, env={})
        result = pipeline.rebuild_report(cfg)
        assert result.report.overall.total == 90
        assert len(result.report.ai_analysis.priorities) == 1

    def test_requires_previous_scan(self, config):
        with pytest.raises(ScanfuseError):
            pipeline.rebuild_report(config)

    @pytest.mark.parametrize("tools", [
        [{"tool": "semgrep", "status": "RUNNING"}],
        [{"status": "SUCCESS"}],
        ["semgrep"],
    ])
    def test_invalid_previous_results(self, config, tools):
        write_json(config.artifacts_path / "security-summary.json", {"tools": tools})
        with pytest.raises(ScanfuseError, match="Invalid scan results"):
            pipeline.rebuild_report(config)

    def test_undecodable_side_artifacts_ignored(self, project_dir, reachable):
        cfg = load_config(project_dir, env={}, app_url="http://localhost:3000")
        pipeline.run_scan(cfg, scanners=_clean_scanners(), adapter=FakeLLM(["P2"]))
        (cfg.artifacts_path / "ai" / "summary.json").write_bytes(b"\xff\xfe")
        (cfg.artifacts_path / "ai" / "summary.md").unlink()
        (cfg.artifacts_path / "ai" / "total-usage.json").write_bytes(b"\xff")
        result = pipeline.rebuild_report(cfg)
        assert result.report.ai_analysis is None
        assert result.report.ai_usage is None
        assert result.report.overall.total == 100

    def test_rewrites_merged_sarif(self, config, reachable):
        pipeline.run_scan(config, scanners=_clean_scanners())
        write_json(config.artifacts_path / "codeql.sarif", {"runs": [{"tool": {"driver": {"name": "CodeQL"}}}]})
        result = pipeline.rebuild_report(config)
        sarif = json.loads(Path(result.paths["sarif"]).read_text())
        assert len(sarif["runs"]) == 2
