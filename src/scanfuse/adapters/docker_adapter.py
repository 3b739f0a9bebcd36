"""Container runtime check.

Confirms the Docker daemon answers; the web scans depend on it.  Produces
no artifact.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from scanfuse.adapters.base import CommandScanner
from scanfuse.defaults import TOOL_DOCKER


class DockerRuntime(CommandScanner):
    tool_name = TOOL_DOCKER
    binary = "docker"

    def command(self, path: str, artifact: Path | None, **options: Any) -> list[str]:
        return ["docker", "info", "--format", "{{.ServerVersion}}"]
