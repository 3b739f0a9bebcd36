"""Report assembler: scores + ledger + recommendations -> SecurityReport.

Also owns report persistence and the run verdict consumed by the CLI.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from scanfuse import recommendations, scoring
from scanfuse._files import write_atomic
from scanfuse.ai.usage import UsageAccumulator
from scanfuse.defaults import (
    PASS_THRESHOLD,
    REPORT_JSON,
    REPORT_MARKDOWN,
    REPORT_SARIF,
    SCANFUSE_VERSION,
)
from scanfuse.errors import ReportPersistenceError
from scanfuse.ledger import ScanLedger
from scanfuse.models import (
    AIAnalysis,
    FindingTally,
    ReportMetadata,
    SecurityReport,
    UiTestSummary,
)
from scanfuse.render import render_markdown

log = logging.getLogger("scanfuse.report")


def duration_minutes(started_at: datetime, finished_at: datetime) -> int:
    """Whole minutes between two instants, rounded, never less than 1."""
    seconds = (finished_at - started_at).total_seconds()
    return max(scoring.round_half_up(seconds / 60), 1)


def aggregate_findings(ledger: ScanLedger) -> FindingTally:
    """Sum per-severity counts over the latest outcome of each tool.

    An outcome without a severity breakdown but with a raw findings count
    contributes that count as medium.
    """
    total = FindingTally.zero()
    for outcome in ledger.latest():
        if outcome.tally is not None:
            total = total + outcome.tally
        elif outcome.raw_findings:
            total = total + FindingTally.unattributed(outcome.raw_findings)
    return total


def project_name(project_path: str | Path) -> str:
    return Path(project_path).resolve().name or "Unknown Project"


def assemble_report(
    ledger: ScanLedger,
    *,
    project_path: str | Path = ".",
    started_at: datetime,
    finished_at: datetime | None = None,
    ai_analysis: AIAnalysis | None = None,
    ui_testing: UiTestSummary | None = None,
    usage: UsageAccumulator | None = None,
) -> SecurityReport:
    """Build the terminal report for one run.

    The AI penalty is applied before grade and status are derived, so both
    always reflect the penalized total.
    """
    finished_at = finished_at or datetime.now(timezone.utc)
    priorities = ai_analysis.priorities if ai_analysis is not None else ()
    card = scoring.evaluate(ledger, priorities)
    if card.penalty:
        log.info("AI priorities reduced score %d -> %d (penalty %d)",
                 card.base_total, card.overall.total, card.penalty)

    metadata = ReportMetadata(
        project_name=project_name(project_path),
        scan_date=finished_at.date().isoformat(),
        scan_time=finished_at.strftime("%H:%M:%S"),
        version=SCANFUSE_VERSION,
        duration_minutes=duration_minutes(started_at, finished_at),
    )
    ai_usage = usage.snapshot() if usage is not None and not usage.is_empty else None

    return SecurityReport(
        metadata=metadata,
        overall=card.overall,
        categories=card.categories,
        tools=ledger.outcomes,
        findings=aggregate_findings(ledger),
        recommendations=recommendations.generate(ledger),
        ai_analysis=ai_analysis,
        ui_testing=ui_testing,
        ai_usage=ai_usage,
    )


def save_report(report: SecurityReport, artifacts_dir: str | Path) -> dict[str, str]:
    """Persist the JSON record and the rendered markdown document.

    Both documents are fully rendered before anything is written; each file
    is replaced atomically.  Any write failure raises ReportPersistenceError.
    """
    out_dir = Path(artifacts_dir)
    documents = {
        "json": (out_dir / REPORT_JSON, json.dumps(report.to_dict(), indent=2)),
        "markdown": (out_dir / REPORT_MARKDOWN, render_markdown(report)),
    }

    written: dict[str, str] = {}
    for kind, (path, content) in documents.items():
        try:
            write_atomic(path, content)
        except OSError as e:
            raise ReportPersistenceError(str(path), str(e)) from e
        written[kind] = str(path)

    log.info("Security reports written to %s", out_dir)
    return written


def save_sarif(sarif: dict[str, Any], artifacts_dir: str | Path) -> str:
    """Write the merged SARIF log next to the report."""
    path = Path(artifacts_dir) / REPORT_SARIF
    try:
        write_atomic(path, json.dumps(sarif, indent=2))
    except OSError as e:
        raise ReportPersistenceError(str(path), str(e)) from e
    return str(path)


def load_report(artifacts_dir: str | Path) -> dict[str, Any] | None:
    """Read the last persisted report record, or None."""
    path = Path(artifacts_dir) / REPORT_JSON
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError, RecursionError) as e:
        log.warning("Failed to read report %s: %s", path, e)
        return None
    return data if isinstance(data, dict) else None


def run_verdict(report: SecurityReport, *, tool_errors: bool, ui_failures: int = 0) -> bool:
    """True only with no tool errors, a passing score and no UI failures."""
    return (
        not tool_errors
        and report.overall.total >= PASS_THRESHOLD
        and ui_failures == 0
    )
