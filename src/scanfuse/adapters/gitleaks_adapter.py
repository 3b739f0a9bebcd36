"""Gitleaks secrets scanner adapter."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from scanfuse.adapters.base import CommandScanner
from scanfuse.defaults import ARTIFACT_FILES, TOOL_GITLEAKS


class GitleaksScanner(CommandScanner):
    tool_name = TOOL_GITLEAKS
    binary = "gitleaks"
    artifact_name = ARTIFACT_FILES[TOOL_GITLEAKS]
    version_args = ("version",)

    def command(self, path: str, artifact: Path | None, **options: Any) -> list[str]:
        cmd = [
            "gitleaks", "detect",
            "--source", ".",
            "--report-format", "json",
            "--report-path", str(artifact),
        ]
        # Working trees without git history are scanned as plain files
        if not (Path(path) / ".git").exists():
            cmd.append("--no-git")
        return cmd
