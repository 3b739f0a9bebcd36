"""Recommendation generator: ledger -> immediate / short-term / long-term actions."""

from __future__ import annotations

from scanfuse.defaults import (
    TOOL_GITLEAKS,
    TOOL_OSV,
    TOOL_SEMGREP,
    TOOL_TRIVY,
    WEB_TOOLS,
)
from scanfuse.ledger import ScanLedger
from scanfuse.models import Recommendations, ScanStatus

# Remediation hint per failed tool; tools without an entry get no hint
INSTALL_HINTS: dict[str, str] = {
    TOOL_OSV: "Update Go to version 1.23+ to enable OSV-Scanner",
    TOOL_SEMGREP: "Install semgrep: brew install semgrep",
    TOOL_GITLEAKS: "Install gitleaks: brew install gitleaks",
    TOOL_TRIVY: "Install trivy: brew install trivy",
}

RUNTIME_HINT = "Start Docker daemon to enable OWASP ZAP web security testing"
RERUN_HINT = "Re-run comprehensive scan after fixing tool issues"

SHORT_TERM_POLICY = (
    "Integrate security scanning into CI/CD pipeline",
    "Set up automated security monitoring",
)

LONG_TERM_POLICY = (
    "Implement automated security monitoring",
    "Schedule regular dependency updates",
    "Add security training for development team",
)


def generate(ledger: ScanLedger) -> Recommendations:
    immediate: list[str] = []

    for outcome in ledger.with_status(ScanStatus.FAILED):
        hint = INSTALL_HINTS.get(outcome.tool)
        if hint and hint not in immediate:
            immediate.append(hint)

    for outcome in ledger.with_status(ScanStatus.SKIPPED):
        if outcome.tool in WEB_TOOLS and RUNTIME_HINT not in immediate:
            immediate.append(RUNTIME_HINT)

    short_term: list[str] = []
    if immediate:
        short_term.append(RERUN_HINT)
    short_term.extend(SHORT_TERM_POLICY)

    return Recommendations(
        immediate=immediate,
        short_term=short_term,
        long_term=list(LONG_TERM_POLICY),
    )
