"""Subprocess plumbing shared by the scanner adapters.

Every adapter runs its CLI with a timeout and reports the invocation as a
``ToolRun``.  A missing binary or a timeout is reported in ``error``; the
adapter never raises for tool-level problems.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from scanfuse.defaults import ERROR_OUTPUT_LIMIT, TOOL_TIMEOUT_SECONDS

log = logging.getLogger("scanfuse.adapters")

_VERSION_RE = re.compile(r"\d+\.\d+(?:\.\d+)?")
_VERSION_TIMEOUT_SECONDS = 15


@dataclass(frozen=True)
class ToolRun:
    """How one tool invocation went, before normalization."""

    tool: str
    returncode: int | None
    artifact: str | None = None
    duration_ms: int = 0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool": self.tool,
            "returncode": self.returncode,
            "artifact": self.artifact,
            "duration_ms": self.duration_ms,
            "error": self.error,
        }


def _tail(text: str | None) -> str:
    return (text or "").strip()[-ERROR_OUTPUT_LIMIT:]


class CommandScanner:
    """Base for adapters that wrap a single CLI invocation.

    Subclasses set ``tool_name``, ``binary`` and ``artifact_name`` and
    implement ``command()``.
    """

    tool_name = ""
    binary = ""
    artifact_name: str | None = None
    version_args: tuple[str, ...] = ("--version",)

    def is_available(self) -> bool:
        return shutil.which(self.binary) is not None

    def command(self, path: str, artifact: Path | None, **options: Any) -> list[str]:
        raise NotImplementedError

    def version(self) -> str | None:
        """Installed tool version parsed from ``<binary> --version``."""
        try:
            result = subprocess.run(
                [self.binary, *self.version_args],
                capture_output=True, text=True, timeout=_VERSION_TIMEOUT_SECONDS,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return None
        match = _VERSION_RE.search(result.stdout or result.stderr or "")
        return match.group(0) if match else None

    def run(self, path: str, artifacts_dir: str, **options: Any) -> ToolRun:
        out_dir = Path(artifacts_dir)
        out_dir.mkdir(parents=True, exist_ok=True)
        artifact = out_dir / self.artifact_name if self.artifact_name else None
        if artifact is not None:
            # A stale artifact must not be mistaken for this run's output
            artifact.unlink(missing_ok=True)
        cmd = self.command(path, artifact, **options)
        timeout = options.get("timeout", TOOL_TIMEOUT_SECONDS)

        log.info("Running %s", " ".join(cmd), extra={"tool": self.tool_name})
        start = time.monotonic()
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, timeout=timeout, cwd=path,
            )
        except FileNotFoundError:
            log.warning("%s binary not found", self.binary, extra={"tool": self.tool_name})
            return ToolRun(self.tool_name, None, error=f"{self.binary} not installed")
        except subprocess.TimeoutExpired:
            elapsed = int((time.monotonic() - start) * 1000)
            log.error("%s timed out after %ss", self.tool_name, timeout, extra={"tool": self.tool_name})
            return ToolRun(self.tool_name, None, duration_ms=elapsed,
                           error=f"timed out after {timeout}s")

        elapsed = int((time.monotonic() - start) * 1000)
        produced = str(artifact) if artifact is not None and artifact.exists() else None
        error = None
        if result.returncode != 0:
            error = _tail(result.stderr) or _tail(result.stdout) or f"exit code {result.returncode}"
        log.info("%s exited with %d in %dms", self.tool_name, result.returncode, elapsed,
                 extra={"tool": self.tool_name, "duration_ms": elapsed})
        return ToolRun(self.tool_name, result.returncode, produced, elapsed, error)
