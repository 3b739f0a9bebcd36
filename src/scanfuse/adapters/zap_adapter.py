"""OWASP ZAP baseline scan, run through the official Docker image.

The artifacts directory is mounted as the ZAP working directory so the JSON
report lands next to the other artifacts.  The target URL is passed as the
``target`` option.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from scanfuse.adapters.base import CommandScanner, ToolRun
from scanfuse.defaults import ARTIFACT_FILES, TOOL_ZAP

ZAP_IMAGE = "ghcr.io/zaproxy/zaproxy:stable"


class ZapScanner(CommandScanner):
    tool_name = TOOL_ZAP
    binary = "docker"
    artifact_name = ARTIFACT_FILES[TOOL_ZAP]

    def __init__(self, image: str = ZAP_IMAGE):
        self._image = image

    def version(self) -> str | None:
        # Reported inside the JSON report (``@version``)
        return None

    def command(self, path: str, artifact: Path | None, **options: Any) -> list[str]:
        return [
            "docker", "run", "--rm",
            "--network", "host",
            "-v", f"{artifact.parent.resolve()}:/zap/wrk:rw",
            self._image,
            "zap-baseline.py",
            "-t", options["target"],
            "-J", artifact.name,
        ]

    def run(self, path: str, artifacts_dir: str, **options: Any) -> ToolRun:
        if not options.get("target"):
            return ToolRun(self.tool_name, None, error="no target URL given")
        return super().run(path, artifacts_dir, **options)
