"""Exception types raised across scanfuse.

Only configuration and persistence problems propagate to callers; artifact
and tool failures are recovered locally and recorded in the scan ledger.
"""

from __future__ import annotations


class ScanfuseError(Exception):
    """Base class for scanfuse errors."""
    pass


class ConfigError(ScanfuseError):
    """Raised when a configuration file exists but cannot be loaded."""
    pass


class ReportPersistenceError(ScanfuseError):
    """Raised when a report cannot be written to the artifacts directory."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to write report {path}: {reason}")
        self.path = path
        self.reason = reason
