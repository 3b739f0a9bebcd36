"""UI test results reader (Playwright JSON reporter output)."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from scanfuse.defaults import UI_RESULTS_FILE
from scanfuse.models import UiTestSummary

log = logging.getLogger("scanfuse.uitest")


def _stat(stats: dict, key: str) -> int:
    value = stats.get(key, 0)
    return value if isinstance(value, int) and value > 0 else 0


def load_ui_summary(
    artifacts_dir: str | Path,
    *,
    execution_time_ms: int = 0,
    filename: str = UI_RESULTS_FILE,
) -> UiTestSummary | None:
    """Summarize ``stats.expected/unexpected/skipped``; None when no results exist."""
    path = Path(artifacts_dir) / filename
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError, RecursionError) as e:
        log.warning("Could not parse UI test results %s: %s", path, e)
        return None

    stats = data.get("stats") if isinstance(data, dict) else None
    if not isinstance(stats, dict):
        log.warning("UI test results %s carry no stats block", path)
        return None

    passed = _stat(stats, "expected")
    failed = _stat(stats, "unexpected")
    skipped = _stat(stats, "skipped")
    duration = stats.get("duration")
    if not execution_time_ms and isinstance(duration, (int, float)):
        execution_time_ms = int(duration)
    return UiTestSummary(
        total=passed + failed + skipped,
        passed=passed,
        failed=failed,
        skipped=skipped,
        execution_time_ms=execution_time_ms,
    )
