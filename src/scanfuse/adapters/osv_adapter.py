"""OSV-Scanner dependency vulnerability adapter."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from scanfuse.adapters.base import CommandScanner
from scanfuse.defaults import ARTIFACT_FILES, TOOL_OSV


class OsvScanner(CommandScanner):
    tool_name = TOOL_OSV
    binary = "osv-scanner"
    artifact_name = ARTIFACT_FILES[TOOL_OSV]

    def command(self, path: str, artifact: Path | None, **options: Any) -> list[str]:
        return [
            "osv-scanner", "--recursive",
            "--format=json", "--output", str(artifact),
            ".",
        ]
