"""Trivy repository scanner adapter (SARIF output)."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from scanfuse.adapters.base import CommandScanner
from scanfuse.defaults import ARTIFACT_FILES, TOOL_TRIVY


class TrivyScanner(CommandScanner):
    tool_name = TOOL_TRIVY
    binary = "trivy"
    artifact_name = ARTIFACT_FILES[TOOL_TRIVY]

    def command(self, path: str, artifact: Path | None, **options: Any) -> list[str]:
        return ["trivy", "fs", "--format", "sarif", "--output", str(artifact), "."]
