"""Finding normalizers: raw scanner artifacts -> FindingTally.

One normalizer per artifact format.  Every normalizer is total: a missing
or malformed artifact is logged and yields the zero tally, so a broken
scanner output can never abort the pipeline.
"""

from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterable

from scanfuse.defaults import (
    ARTIFACT_FILES,
    TOOL_GITLEAKS,
    TOOL_OSV,
    TOOL_SEMGREP,
    TOOL_TRIVY,
    TOOL_ZAP,
)
from scanfuse.models import FindingSeverity, FindingTally

log = logging.getLogger("scanfuse.normalizers")

_STATIC_SEVERITY_MAP = {
    "error": FindingSeverity.CRITICAL,
    "critical": FindingSeverity.CRITICAL,
    "warning": FindingSeverity.HIGH,
    "high": FindingSeverity.HIGH,
    "medium": FindingSeverity.MEDIUM,
    "low": FindingSeverity.LOW,
}

_DEPENDENCY_SEVERITY_MAP = {
    "critical": FindingSeverity.CRITICAL,
    "high": FindingSeverity.HIGH,
    "medium": FindingSeverity.MEDIUM,
    "low": FindingSeverity.LOW,
}

# SARIF levels; anything unrecognized (including a missing level) is low
_SARIF_LEVEL_MAP = {
    "error": FindingSeverity.CRITICAL,
    "warning": FindingSeverity.HIGH,
    "note": FindingSeverity.MEDIUM,
    "info": FindingSeverity.INFO,
}

_ZAP_RISK_MAP = {
    "3": FindingSeverity.HIGH,
    "2": FindingSeverity.MEDIUM,
    "1": FindingSeverity.LOW,
    "0": FindingSeverity.INFO,
}


class ArtifactFormatError(ValueError):
    """Raised internally when an artifact does not have the expected shape."""
    pass


# ---------------------------------------------------------------------------
# Format parsers (operate on decoded JSON)
# ---------------------------------------------------------------------------

def _lower(value: Any) -> str:
    return value.lower() if isinstance(value, str) else ""


def parse_static_analysis(data: Any) -> FindingTally:
    """semgrep-style ``{"results": [{"extra": {"severity": ...}}]}``."""
    if not isinstance(data, dict):
        raise ArtifactFormatError("expected a JSON object")
    results = data.get("results") or []
    if not isinstance(results, list):
        raise ArtifactFormatError("'results' is not an array")

    counts: Counter[FindingSeverity] = Counter()
    for r in results:
        extra = r.get("extra") if isinstance(r, dict) else None
        sev = _lower(extra.get("severity")) if isinstance(extra, dict) else ""
        counts[_STATIC_SEVERITY_MAP.get(sev, FindingSeverity.INFO)] += 1
    return FindingTally.from_severities(counts)


def parse_secrets(data: Any) -> FindingTally:
    """gitleaks-style top-level array; secrets are always high severity."""
    if not isinstance(data, list):
        raise ArtifactFormatError("expected a JSON array of findings")
    return FindingTally.from_severities({FindingSeverity.HIGH: len(data)})


def parse_dependency_vulns(data: Any) -> FindingTally:
    """osv-scanner-style ``results[0].packages[0].vulnerabilities``."""
    if not isinstance(data, dict):
        raise ArtifactFormatError("expected a JSON object")
    vulns = _first(_first(data.get("results")).get("packages")).get("vulnerabilities") or []
    if not isinstance(vulns, list):
        raise ArtifactFormatError("'vulnerabilities' is not an array")

    counts: Counter[FindingSeverity] = Counter()
    for v in vulns:
        sev = ""
        if isinstance(v, dict):
            sev = _lower(_first(v.get("severity")).get("severity"))
        counts[_DEPENDENCY_SEVERITY_MAP.get(sev, FindingSeverity.INFO)] += 1
    return FindingTally.from_severities(counts)


def parse_sarif(data: Any) -> FindingTally:
    """SARIF ``runs[0].results[*].level``."""
    if not isinstance(data, dict):
        raise ArtifactFormatError("expected a JSON object")
    results = _first(data.get("runs")).get("results") or []
    if not isinstance(results, list):
        raise ArtifactFormatError("'results' is not an array")

    counts: Counter[FindingSeverity] = Counter()
    for r in results:
        level = _lower(r.get("level")) if isinstance(r, dict) else ""
        counts[_SARIF_LEVEL_MAP.get(level, FindingSeverity.LOW)] += 1
    return FindingTally.from_severities(counts)


def parse_web_alerts(data: Any) -> FindingTally:
    """ZAP JSON report ``site[*].alerts[*].riskcode`` (3 high .. 0 info)."""
    if not isinstance(data, dict):
        raise ArtifactFormatError("expected a JSON object")
    sites = data.get("site") or []
    if isinstance(sites, dict):
        sites = [sites]
    if not isinstance(sites, list):
        raise ArtifactFormatError("'site' is not an array")

    counts: Counter[FindingSeverity] = Counter()
    for site in sites:
        alerts = site.get("alerts") if isinstance(site, dict) else None
        for alert in alerts if isinstance(alerts, list) else []:
            risk = str(alert.get("riskcode", "")) if isinstance(alert, dict) else ""
            counts[_ZAP_RISK_MAP.get(risk, FindingSeverity.INFO)] += 1
    return FindingTally.from_severities(counts)


def _first(items: Any) -> dict[str, Any]:
    """First element of a JSON array when it is an object, else ``{}``."""
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return {}


# ---------------------------------------------------------------------------
# Version extraction
# ---------------------------------------------------------------------------

def _semgrep_version(data: Any) -> str | None:
    return data.get("version") if isinstance(data, dict) else None


def _sarif_version(data: Any) -> str | None:
    if not isinstance(data, dict):
        return None
    driver = _first(data.get("runs")).get("tool", {}).get("driver", {})
    return driver.get("version") if isinstance(driver, dict) else None


def _zap_version(data: Any) -> str | None:
    return data.get("@version") if isinstance(data, dict) else None


# ---------------------------------------------------------------------------
# Registry: tool identity -> artifact + parser
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Normalizer:
    tool: str
    artifact: str
    parse: Callable[[Any], FindingTally]
    version: Callable[[Any], str | None] | None = None


NORMALIZERS: dict[str, Normalizer] = {
    TOOL_SEMGREP: Normalizer(TOOL_SEMGREP, ARTIFACT_FILES[TOOL_SEMGREP],
                             parse_static_analysis, _semgrep_version),
    TOOL_GITLEAKS: Normalizer(TOOL_GITLEAKS, ARTIFACT_FILES[TOOL_GITLEAKS], parse_secrets),
    TOOL_OSV: Normalizer(TOOL_OSV, ARTIFACT_FILES[TOOL_OSV], parse_dependency_vulns),
    TOOL_TRIVY: Normalizer(TOOL_TRIVY, ARTIFACT_FILES[TOOL_TRIVY], parse_sarif, _sarif_version),
    TOOL_ZAP: Normalizer(TOOL_ZAP, ARTIFACT_FILES[TOOL_ZAP], parse_web_alerts, _zap_version),
}


def _load_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def normalize_file(
    path: str | Path,
    parser: Callable[[Any], FindingTally],
    *,
    tool: str = "",
) -> FindingTally:
    """Parse one artifact file, returning the zero tally on any failure."""
    p = Path(path)
    label = tool or p.name
    if not p.exists():
        log.warning("%s artifact not found: %s", label, p, extra={"tool": label})
        return FindingTally.zero()
    # ValueError also covers JSON, Unicode and shape errors
    try:
        return parser(_load_json(p))
    except (OSError, ValueError, RecursionError) as e:
        log.warning("Failed to parse %s results: %s", label, e, extra={"tool": label})
        return FindingTally.zero()


def normalize_tool(tool: str, artifacts_dir: str | Path) -> FindingTally | None:
    """Normalize a tool's artifact by identity.

    Returns None when no normalizer is registered for ``tool`` (for example
    the docker runtime check, which produces no artifact).
    """
    normalizer = NORMALIZERS.get(tool)
    if normalizer is None:
        return None
    return normalize_file(Path(artifacts_dir) / normalizer.artifact, normalizer.parse, tool=tool)


def tool_version(tool: str, artifacts_dir: str | Path) -> str | None:
    """Best-effort version lookup from a tool's artifact."""
    normalizer = NORMALIZERS.get(tool)
    if normalizer is None or normalizer.version is None:
        return None
    path = Path(artifacts_dir) / normalizer.artifact
    if not path.exists():
        return None
    try:
        version = normalizer.version(_load_json(path))
    except (OSError, ValueError, RecursionError, AttributeError):
        return None
    return str(version) if version else None


# ---------------------------------------------------------------------------
# SARIF merge
# ---------------------------------------------------------------------------

SARIF_VERSION = "2.1.0"


def merge_sarif(paths: Iterable[str | Path]) -> dict[str, Any]:
    """Concatenate the ``runs`` of every readable SARIF file into one log.

    Missing files are skipped silently; unreadable ones with a warning.
    """
    runs: list[Any] = []
    for path in paths:
        p = Path(path)
        if not p.exists():
            continue
        try:
            data = _load_json(p)
        except (OSError, ValueError, RecursionError) as e:
            log.warning("Skipping unreadable SARIF file %s: %s", p, e)
            continue
        file_runs = data.get("runs") if isinstance(data, dict) else None
        if isinstance(file_runs, list):
            runs.extend(file_runs)
    return {"version": SARIF_VERSION, "runs": runs}
