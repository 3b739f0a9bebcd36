"""Security scanner adapters: run each tool and report a ToolRun."""

from scanfuse.adapters.base import CommandScanner, ToolRun
from scanfuse.adapters.docker_adapter import DockerRuntime
from scanfuse.adapters.gitleaks_adapter import GitleaksScanner
from scanfuse.adapters.osv_adapter import OsvScanner
from scanfuse.adapters.semgrep_adapter import SemgrepScanner
from scanfuse.adapters.trivy_adapter import TrivyScanner
from scanfuse.adapters.zap_adapter import ZapScanner


def default_scanners() -> list:
    """Scanners in execution order: code, secrets, dependencies, web."""
    return [
        SemgrepScanner(),
        GitleaksScanner(),
        TrivyScanner(),
        OsvScanner(),
        DockerRuntime(),
        ZapScanner(),
    ]


__all__ = [
    "CommandScanner",
    "DockerRuntime",
    "GitleaksScanner",
    "OsvScanner",
    "SemgrepScanner",
    "ToolRun",
    "TrivyScanner",
    "ZapScanner",
    "default_scanners",
]
