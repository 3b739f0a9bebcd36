"""Port interfaces for scanfuse.

Scanner adapters implement ``ScannerPort``; the pipeline depends only on
this protocol, so tests and embedding callers can pass their own scanners.
The LLM port lives in ``scanfuse.ai.port``.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from scanfuse.adapters.base import ToolRun


@runtime_checkable
class ScannerPort(Protocol):
    """Port for security scanner adapters.

    Each adapter wraps one tool, writes its artifact into the artifacts
    directory and reports how the invocation went as a ``ToolRun``.
    """
    @property
    def tool_name(self) -> str: ...
    def is_available(self) -> bool: ...
    def version(self) -> str | None: ...
    def run(self, path: str, artifacts_dir: str, **options: Any) -> ToolRun: ...
