"""Markdown rendering of a SecurityReport."""

from __future__ import annotations

from scanfuse.defaults import GRADE_STEPS
from scanfuse.models import (
    AIAnalysis,
    ScanOutcome,
    ScanStatus,
    SecurityReport,
    UiTestSummary,
)
from scanfuse.scoring import round_half_up

CATEGORY_LABELS: dict[str, tuple[str, str]] = {
    # key: (table label, bar chart label)
    "staticAnalysis": ("Static Code Analysis", "Static Code Security"),
    "secretDetection": ("Secret Detection", "Secret Management"),
    "dependencySecurity": ("Dependency Security", "Dependency Security"),
    "webSecurity": ("Web Security", "Web Application Security"),
    "toolCoverage": ("Tool Coverage", "Tool Coverage"),
}

TOOL_PURPOSES: dict[str, str] = {
    "semgrep": "Static code analysis",
    "gitleaks": "Secret detection",
    "trivy": "Vulnerability scanning",
    "osv-scanner": "Dependency vulnerabilities",
    "docker": "Container runtime",
    "zap": "Web security testing",
}

_STATUS_ICONS = {
    "SUCCESS": "✅",
    "PASSED": "✅",
    "EXCELLENT": "✅",
    "GOOD": "⚠️",
    "FAIR": "⚠️",
    "FAILED": "❌",
    "SKIPPED": "⏭️",
}

_STATUS_DESCRIPTIONS = {
    "EXCELLENT": "No issues found",
    "GOOD": "Minor issues or missing coverage",
    "FAIR": "Partial coverage",
    "FAILED": "Tool failed or not available",
}

_BAND_TEXT = {
    "Excellent": "Production ready",
    "Good": "Minor improvements needed",
    "Fair": "Some security gaps present",
    "Poor": "Significant security issues",
    "Critical": "Immediate action required",
}

_BAR_WIDTH = 26


def status_icon(status: str) -> str:
    return _STATUS_ICONS.get(status, "❓")


def tool_purpose(tool: str) -> str:
    return TOOL_PURPOSES.get(tool, "Security scanning")


def _pct(score: int, maximum: int) -> int:
    return round_half_up(score / maximum * 100) if maximum else 0


def _bullets(items: list[str] | tuple[str, ...], empty: str = "- None") -> str:
    return "\n".join(f"- {i}" for i in items) if items else empty


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

def _category_table(report: SecurityReport) -> str:
    rows = [
        "| Category | Score | Status | Details |",
        "| -------- | ----- | ------ | ------- |",
    ]
    for key, cat in report.categories.items():
        label = CATEGORY_LABELS.get(key, (key, key))[0]
        rows.append(
            f"| **{label}** | {cat.score}/{cat.max} | {status_icon(cat.status.value)} "
            f"**{cat.status.value}** | {_STATUS_DESCRIPTIONS.get(cat.status.value, '')} |"
        )
    return "\n".join(rows)


def _tool_section(outcome: ScanOutcome) -> str:
    status = {
        ScanStatus.SUCCESS: "✅ **PASSED**",
        ScanStatus.FAILED: "❌ **FAILED**",
        ScanStatus.SKIPPED: "⏭️ **SKIPPED**",
    }[outcome.status]
    version = f" v{outcome.version}" if outcome.version else ""
    lines = [
        f"### {outcome.tool.capitalize()} Security Scan",
        "",
        f"**Tool**: {outcome.tool}{version}  ",
        f"**Status**: {status}  ",
        f"**Findings**: {outcome.findings} issues detected",
    ]
    if outcome.tally is not None and outcome.tally.total:
        t = outcome.tally
        lines.append(
            f"**Breakdown**: {t.critical} critical, {t.high} high, {t.medium} medium, "
            f"{t.low} low, {t.info} info"
        )
    if outcome.error:
        lines.append(f"**Error**: {outcome.error}")
    if outcome.reason:
        lines.append(f"**Reason**: {outcome.reason}")
    if outcome.execution_time_ms:
        lines.append(f"**Execution Time**: {outcome.execution_time_ms}ms")
    return "\n".join(lines)


def _ui_section(ui: UiTestSummary) -> str:
    verdict = "✅ **PASSED**" if ui.status == "PASSED" else f"{status_icon(ui.status)} **{ui.status}**"
    lines = [
        "### UI Testing Results",
        "",
        f"**Status**: {verdict}  ",
        f"**Test Coverage**: {ui.total} tests ({ui.passed} passed, {ui.failed} failed)  ",
        f"**Success Rate**: {ui.success_rate}%  ",
        f"**Execution Time**: {round_half_up(ui.execution_time_ms / 1000)}s",
        "",
        f"- **Passed**: {ui.passed} tests",
        f"- **Failed**: {ui.failed} tests",
        f"- **Skipped**: {ui.skipped} tests",
    ]
    if ui.failed:
        lines += [
            "",
            "Failed tests usually point at application availability, stale "
            "selectors or changed authentication flows. Review them with the "
            "application running.",
        ]
    return "\n".join(lines)


def _ai_section(ai: AIAnalysis) -> str:
    if not ai.priorities:
        headline = "✅ **ANALYSIS COMPLETE**"
    elif ai.critical_issues:
        headline = "🚨 **CRITICAL ISSUES FOUND**"
    else:
        headline = "⚠️ **SECURITY ISSUES FOUND**"
    lines = [
        "### AI Security Analysis",
        "",
        f"**Status**: {headline}  ",
        f"**Total Issues**: {len(ai.priorities)} ({ai.critical_issues} critical)",
        "",
        "#### Summary",
        ai.summary or "_No summary provided._",
        "",
        "#### Priority Issues",
        _bullets([f"**{p.level.value}**: {p.description}" for p in ai.priorities]),
        "",
        "#### AI Recommendations",
        _bullets(list(ai.recommendations)),
    ]
    return "\n".join(lines)


def _usage_section(usage: dict) -> str:
    lines = [
        "### AI Usage Summary",
        "",
        f"**Total API Calls**: {usage.get('totalCalls', 0):,}  ",
        f"**Total Tokens**: {usage.get('totalTokens', 0):,}  ",
        f"**Input Tokens**: {usage.get('promptTokens', 0):,}  ",
        f"**Output Tokens**: {usage.get('completionTokens', 0):,}",
    ]
    if usage.get("totalCost"):
        lines.append(f"**Estimated Cost**: ${usage['totalCost']:.4f}")
    return "\n".join(lines)


def _strengths(report: SecurityReport) -> list[str]:
    latest = {o.tool: o for o in report.tools}.values()
    ok = [o for o in latest if o.status == ScanStatus.SUCCESS]
    out: list[str] = []
    if ok:
        out.append(f"**{len(ok)} tools operational**: security coverage across {len(ok)} scanners")
    clean = [o for o in ok if o.findings == 0]
    if clean:
        out.append(f"**Clean security posture**: no findings reported by {len(clean)} tools")
    return out


def _improvements(report: SecurityReport) -> list[str]:
    latest = list({o.tool: o for o in report.tools}.values())
    failed = [o.tool for o in latest if o.status == ScanStatus.FAILED]
    skipped = [o.tool for o in latest if o.status == ScanStatus.SKIPPED]
    out: list[str] = []
    if failed:
        out.append(f"**Fix tool installations**: {', '.join(failed)} failed to run")
    if skipped:
        out.append(f"**Enable skipped scans**: {', '.join(skipped)} were not executed")
    if report.findings.critical or report.findings.high:
        out.append(
            f"**Triage findings**: {report.findings.critical} critical and "
            f"{report.findings.high} high severity findings reported"
        )
    return out


def score_bars(report: SecurityReport) -> str:
    """Textual bar chart: one row per category plus the total."""
    rows = []
    for key, cat in report.categories.items():
        label = CATEGORY_LABELS.get(key, (key, key))[1]
        bar = "█" * min(cat.score, _BAR_WIDTH)
        rows.append(f"{label:<25}{bar} {cat.score}/{cat.max} ({_pct(cat.score, cat.max)}%)")
    total = report.overall.total
    rows.append(" " * 25 + "─" * _BAR_WIDTH)
    rows.append(f"{'TOTAL SECURITY SCORE':<25}{'█' * round_half_up(total / 4)} {total}/100 ({total}%)")
    return "\n".join(rows)


def score_interpretation(total: int) -> str:
    bounds = [(90, 100)] + [
        (low, GRADE_STEPS[i - 1][0] - 1) for i, (low, _) in enumerate(GRADE_STEPS) if i
    ]
    lines = []
    for (low, high), (_, grade) in zip(bounds, GRADE_STEPS):
        marker = " ← **Your Score**" if low <= total <= high else ""
        lines.append(f"- **{low}-{high}**: {grade} - {_BAND_TEXT[grade]}{marker}")
    floor = GRADE_STEPS[-1][0]
    marker = " ← **Your Score**" if total < floor else ""
    lines.append(f"- **<{floor}**: Critical - {_BAND_TEXT['Critical']}{marker}")
    return "\n".join(lines)


def _versions_table(report: SecurityReport) -> str:
    rows = [
        "| Tool | Version | Status | Purpose |",
        "| ---- | ------- | ------ | ------- |",
    ]
    for o in report.tools:
        rows.append(
            f"| {o.tool} | {o.version or 'Latest'} | {status_icon(o.status.value)} "
            f"{o.status.value} | {tool_purpose(o.tool)} |"
        )
    return "\n".join(rows)


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------

def render_markdown(report: SecurityReport) -> str:
    meta = report.metadata
    overall = report.overall
    rec = report.recommendations

    parts = [
        "# Security Assessment Report",
        "",
        f"**Project**: {meta.project_name}  ",
        f"**Scan Date**: {meta.scan_date}  ",
        f"**Scan Duration**: ~{meta.duration_minutes} minutes  ",
        f"**scanfuse Version**: {meta.version}",
        "",
        "---",
        "",
        "## Executive Summary",
        "",
        f"### Overall Security Score: **{overall.total}/{overall.max_possible}** "
        f"({overall.grade}) {status_icon(overall.status.value)} {overall.status.value}",
        "",
        _category_table(report),
        "",
        "---",
        "",
        "## Detailed Scan Results",
        "",
        "\n\n".join(_tool_section(o) for o in report.tools) or "_No tools were run._",
    ]
    if report.ui_testing is not None:
        parts += ["", _ui_section(report.ui_testing)]
    if report.ai_analysis is not None:
        parts += ["", _ai_section(report.ai_analysis)]
    if report.ai_usage:
        parts += ["", _usage_section(report.ai_usage)]

    parts += [
        "",
        "---",
        "",
        "## Security Posture Assessment",
        "",
        "### Strengths",
        _bullets(_strengths(report)),
        "",
        "### Areas for Improvement",
        _bullets(_improvements(report)),
        "",
        "### Recommendations",
        "",
        "#### Immediate Actions (Priority: High)",
        _bullets(rec.immediate),
        "",
        "#### Short-term (This Week)",
        _bullets(rec.short_term),
        "",
        "#### Long-term (Ongoing)",
        _bullets(rec.long_term),
        "",
        "---",
        "",
        "## Security Score Breakdown",
        "",
        "```",
        score_bars(report),
        "```",
        "",
        "### Score Interpretation",
        score_interpretation(overall.total),
        "",
        "---",
        "",
        "## Tool Versions & Configuration",
        "",
        _versions_table(report),
        "",
        "---",
        "",
        f"_Report generated by scanfuse v{meta.version} on {meta.scan_date} at {meta.scan_time}_",
    ]
    return "\n".join(parts) + "\n"
