"""Semgrep static analysis adapter.

Runs ``semgrep scan`` with the CI ruleset and writes JSON results to
``semgrep.json``.  Exit code 1 means findings were reported.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from scanfuse.adapters.base import CommandScanner
from scanfuse.defaults import ARTIFACT_FILES, TOOL_SEMGREP


class SemgrepScanner(CommandScanner):
    tool_name = TOOL_SEMGREP
    binary = "semgrep"
    artifact_name = ARTIFACT_FILES[TOOL_SEMGREP]

    def __init__(self, ruleset: str = "p/ci"):
        self._ruleset = ruleset

    def command(self, path: str, artifact: Path | None, **options: Any) -> list[str]:
        return [
            "semgrep", "scan",
            "--config", options.get("ruleset", self._ruleset),
            "--json", "--output", str(artifact),
            ".",
        ]
