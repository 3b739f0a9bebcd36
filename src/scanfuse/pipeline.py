"""Scan pipeline: run scanners, normalize, score, summarize, persist.

Tools run sequentially in the order given.  A tool that cannot run is
recorded as FAILED (or SKIPPED for web tools without a reachable target)
and the pipeline moves on; only persistence and configuration errors
propagate to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Iterable

import httpx

from scanfuse.ai import registry
from scanfuse.ai.port import LLMPort
from scanfuse.ai.summary import generate_executive_summary, load_ai_analysis
from scanfuse.ai.usage import UsageAccumulator
from scanfuse.config import ScanConfig
from scanfuse.defaults import (
    AI_DIR,
    AI_USAGE_FILE,
    FINDINGS_EXIT_CODES,
    SARIF_SOURCES,
    WEB_PROBE_TIMEOUT_SECONDS,
    WEB_TOOLS,
)
from scanfuse.errors import ScanfuseError
from scanfuse.ledger import ScanLedger
from scanfuse.models import AIAnalysis, RunMode, ScanOutcome, ScanStatus, SecurityReport
from scanfuse.normalizers import merge_sarif, normalize_tool, tool_version
from scanfuse.ports import ScannerPort
from scanfuse.report import (
    aggregate_findings,
    assemble_report,
    load_report,
    run_verdict,
    save_report,
    save_sarif,
)
from scanfuse.uitest import load_ui_summary

log = logging.getLogger("scanfuse.pipeline")

NO_TARGET_REASON = "No app URL configured"
UNREACHABLE_REASON = "Target unreachable"


@dataclass
class ScanRunResult:
    report: SecurityReport
    tool_errors: bool
    verdict: bool
    exit_code: int
    paths: dict[str, str] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "verdict": "PASSED" if self.verdict else "FAILED",
            "exit_code": self.exit_code,
            "tool_errors": self.tool_errors,
            "score": self.report.overall.to_dict(),
            "paths": self.paths or {},
        }


# ---------------------------------------------------------------------------
# Web target
# ---------------------------------------------------------------------------

def probe_target(url: str, timeout: float = WEB_PROBE_TIMEOUT_SECONDS) -> bool:
    """True when the target answers HTTP at all, whatever the status code."""
    try:
        httpx.get(url, timeout=timeout, follow_redirects=True)
    except httpx.HTTPError as e:
        log.warning("Web target %s unreachable: %s", url, e)
        return False
    return True


def web_skip_reason(config: ScanConfig) -> str | None:
    if not config.app_url:
        return NO_TARGET_REASON
    if not probe_target(config.app_url):
        return UNREACHABLE_REASON
    return None


# ---------------------------------------------------------------------------
# Single tool
# ---------------------------------------------------------------------------

def execute_scanner(
    scanner: ScannerPort,
    config: ScanConfig,
    *,
    skip_reason: str | None = None,
) -> ScanOutcome:
    """Run one scanner and turn its ToolRun into a ScanOutcome."""
    tool = scanner.tool_name
    artifacts = config.artifacts_path

    if tool in WEB_TOOLS and skip_reason:
        log.info("Skipping %s: %s", tool, skip_reason, extra={"tool": tool, "status": "SKIPPED"})
        return ScanOutcome.skipped(tool, skip_reason)

    if not scanner.is_available():
        log.warning("%s not installed", tool, extra={"tool": tool, "status": "FAILED"})
        return ScanOutcome.failed(tool, f"{tool} not installed")

    run = scanner.run(
        config.project_path, str(artifacts),
        timeout=config.tool_timeout, target=config.app_url,
    )
    if run.returncode is None:
        return ScanOutcome.failed(tool, run.error or "did not run", execution_time_ms=run.duration_ms)

    findings_exit = run.returncode in FINDINGS_EXIT_CODES.get(tool, frozenset()) and run.artifact
    if run.returncode != 0 and not findings_exit:
        log.warning("%s failed with exit code %d", tool, run.returncode,
                    extra={"tool": tool, "status": "FAILED"})
        return ScanOutcome.failed(
            tool, run.error or f"exit code {run.returncode}",
            execution_time_ms=run.duration_ms,
        )

    tally = normalize_tool(tool, artifacts)
    version = tool_version(tool, artifacts) or scanner.version()
    log.info("%s completed: %d findings", tool, tally.total if tally else 0,
             extra={"tool": tool, "status": "SUCCESS", "duration_ms": run.duration_ms})
    return ScanOutcome.success(tool, tally, version=version, execution_time_ms=run.duration_ms)


# ---------------------------------------------------------------------------
# AI step
# ---------------------------------------------------------------------------

def findings_payload(ledger: ScanLedger, sarif: dict[str, Any] | None = None) -> dict[str, Any]:
    """Compact description of the run handed to the LLM."""
    payload: dict[str, Any] = {
        "tools": [o.to_dict() for o in ledger.latest()],
        "totals": aggregate_findings(ledger).to_dict(),
    }
    if sarif and sarif.get("runs"):
        payload["sarif"] = sarif
    return payload


def merged_sarif(artifacts_dir: Path) -> dict[str, Any]:
    return merge_sarif(artifacts_dir / name for name in SARIF_SOURCES)


def _usage_path(artifacts_dir: Path) -> Path:
    return artifacts_dir / AI_DIR / AI_USAGE_FILE


def summarize(
    config: ScanConfig,
    ledger: ScanLedger,
    usage: UsageAccumulator,
    adapter: LLMPort | None = None,
    sarif: dict[str, Any] | None = None,
) -> AIAnalysis | None:
    if not config.ai_enabled:
        return None
    adapter = adapter or registry.get_adapter(config.ai_provider, config.ai_api_key, config.ai_model)
    if not adapter.is_available():
        log.info("No AI provider available; skipping executive summary")
        return None
    analysis = generate_executive_summary(adapter, findings_payload(ledger, sarif), usage, config.artifacts_path)
    if not usage.is_empty:
        usage.save(_usage_path(config.artifacts_path))
    return analysis


# ---------------------------------------------------------------------------
# Verdict
# ---------------------------------------------------------------------------

def _finish(
    report: SecurityReport,
    config: ScanConfig,
    *,
    mode: RunMode,
    paths: dict[str, str],
) -> ScanRunResult:
    tool_errors = any(o.status == ScanStatus.FAILED for o in ScanLedger(report.tools).latest())
    ui_failures = report.ui_testing.failed if report.ui_testing is not None else 0
    verdict = run_verdict(report, tool_errors=tool_errors, ui_failures=ui_failures)
    if (verdict and config.ai_critical_to_fail and report.ai_analysis is not None
            and report.ai_analysis.critical_issues):
        log.warning("AI analysis reported %d critical issues; failing the run",
                    report.ai_analysis.critical_issues)
        verdict = False

    exit_code = 0 if verdict or mode == RunMode.AGGREGATE else 1
    log.info("Security score %d/%d (%s), verdict %s",
             report.overall.total, report.overall.max_possible, report.overall.grade,
             "PASSED" if verdict else "FAILED")
    return ScanRunResult(report, tool_errors, verdict, exit_code, paths)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def run_scan(
    config: ScanConfig,
    *,
    scanners: Iterable[ScannerPort] | None = None,
    adapter: LLMPort | None = None,
    usage: UsageAccumulator | None = None,
    mode: RunMode = RunMode.STANDALONE,
) -> ScanRunResult:
    """Full run: scanners, AI summary, UI results, report, verdict."""
    if scanners is None:
        from scanfuse.adapters import default_scanners

        scanners = default_scanners()
    scanners = list(scanners)
    usage = usage if usage is not None else UsageAccumulator()
    artifacts = config.artifacts_path
    artifacts.mkdir(parents=True, exist_ok=True)
    started_at = datetime.now(timezone.utc)

    skip_reason = None
    if any(s.tool_name in WEB_TOOLS for s in scanners):
        skip_reason = web_skip_reason(config)

    ledger = ScanLedger()
    for scanner in scanners:
        ledger.append(execute_scanner(scanner, config, skip_reason=skip_reason))

    sarif = merged_sarif(artifacts)
    analysis = summarize(config, ledger, usage, adapter, sarif=sarif)
    report = assemble_report(
        ledger,
        project_path=config.project_path,
        started_at=started_at,
        ai_analysis=analysis,
        ui_testing=load_ui_summary(artifacts),
        usage=usage,
    )
    paths = save_report(report, artifacts)
    paths["sarif"] = save_sarif(sarif, artifacts)
    return _finish(report, config, mode=mode, paths=paths)


def rebuild_report(config: ScanConfig, *, mode: RunMode = RunMode.STANDALONE) -> ScanRunResult:
    """Re-assemble the report from the artifacts of a previous run.

    Picks up an AI summary, UI results or usage snapshot written since the
    scan, e.g. by a separate AI or UI step.
    """
    artifacts = config.artifacts_path
    previous = load_report(artifacts)
    if previous is None or not isinstance(previous.get("tools"), list):
        raise ScanfuseError(f"No scan results found in {artifacts}; run 'scanfuse scan' first")

    try:
        ledger = ScanLedger.from_dicts(previous["tools"])
    except (ValueError, TypeError, AttributeError) as e:
        raise ScanfuseError(f"Invalid scan results in {artifacts}: {e}") from e
    finished_at = datetime.now(timezone.utc)
    metadata = previous.get("metadata")
    minutes = metadata.get("scanDurationMinutes", 1) if isinstance(metadata, dict) else 1
    started_at = finished_at - timedelta(minutes=minutes if isinstance(minutes, int) else 1)

    report = assemble_report(
        ledger,
        project_path=config.project_path,
        started_at=started_at,
        finished_at=finished_at,
        ai_analysis=load_ai_analysis(artifacts) if config.ai_enabled else None,
        ui_testing=load_ui_summary(artifacts),
        usage=UsageAccumulator.load(_usage_path(artifacts)),
    )
    paths = save_report(report, artifacts)
    paths["sarif"] = save_sarif(merged_sarif(artifacts), artifacts)
    return _finish(report, config, mode=mode, paths=paths)
