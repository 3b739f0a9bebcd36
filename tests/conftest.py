"""Shared fixtures for scanfuse tests."""

import json
from pathlib import Path

import pytest

from scanfuse.ledger import ScanLedger
from scanfuse.models import FindingSeverity, FindingTally, ScanOutcome


# ---------------------------------------------------------------------------
# Auto-use fixtures: cleanup global state between tests
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _reset_globals():
    """Reset the LLM registry and metrics after every test."""
    yield
    from scanfuse.ai.registry import reset_adapter
    from scanfuse.observability import reset_metrics
    reset_adapter()
    reset_metrics()


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """Keep ambient SCANFUSE_* / API key variables out of config loading."""
    import os
    for key in list(os.environ):
        if key.startswith("SCANFUSE_") or key == "ANTHROPIC_API_KEY":
            monkeypatch.delenv(key, raising=False)


# ---------------------------------------------------------------------------
# Artifacts
# ---------------------------------------------------------------------------

@pytest.fixture
def project_dir(tmp_path) -> Path:
    path = tmp_path / "webshop"
    path.mkdir()
    return path


@pytest.fixture
def artifacts_dir(project_dir) -> Path:
    path = project_dir / ".scanfuse"
    path.mkdir()
    return path


def write_json(path: Path, data) -> Path:
    """Shared test helper: write ``data`` as JSON, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


# ---------------------------------------------------------------------------
# Ledgers
# ---------------------------------------------------------------------------

def ok(tool, **severities):
    """SUCCESS outcome with the given per-severity counts."""
    counts = {FindingSeverity(k): v for k, v in severities.items()}
    return ScanOutcome.success(tool, FindingTally.from_severities(counts))


@pytest.fixture
def clean_ledger() -> ScanLedger:
    """All five scored tools succeed with no findings."""
    return ScanLedger([
        ok("semgrep"), ok("gitleaks"), ok("trivy"), ok("osv-scanner"), ok("zap"),
    ])


@pytest.fixture
def degraded_ledger() -> ScanLedger:
    """Two of five tools succeed."""
    return ScanLedger([
        ScanOutcome.failed("semgrep", "semgrep not installed"),
        ok("gitleaks"),
        ok("trivy", high=2),
        ScanOutcome.skipped("osv-scanner", "not requested"),
        ScanOutcome.skipped("zap", "No app URL configured"),
    ])
