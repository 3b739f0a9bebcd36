"""Single source of truth for scoring constants and configuration defaults.

Every threshold, point budget or artifact name that appears in more than one
module is defined here.  Constants that are truly local to one parser stay
in that module.
"""

from __future__ import annotations


SCANFUSE_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Tool identities
# ---------------------------------------------------------------------------

TOOL_SEMGREP = "semgrep"
TOOL_GITLEAKS = "gitleaks"
TOOL_TRIVY = "trivy"
TOOL_OSV = "osv-scanner"
TOOL_ZAP = "zap"
TOOL_DOCKER = "docker"

# Tools whose results depend on a running web target / container runtime
WEB_TOOLS = frozenset({TOOL_ZAP, TOOL_DOCKER})

# ---------------------------------------------------------------------------
# Artifacts
# ---------------------------------------------------------------------------

DEFAULT_ARTIFACTS_DIR = ".scanfuse"

ARTIFACT_FILES: dict[str, str] = {
    TOOL_SEMGREP: "semgrep.json",
    TOOL_GITLEAKS: "gitleaks.json",
    TOOL_OSV: "osv.json",
    TOOL_TRIVY: "trivy.sarif",
    TOOL_ZAP: "zap.json",
}

REPORT_JSON = "security-summary.json"
REPORT_MARKDOWN = "security-report.md"
REPORT_SARIF = "report.sarif"
# Per-tool SARIF files merged into REPORT_SARIF, when present
SARIF_SOURCES = (ARTIFACT_FILES[TOOL_TRIVY], "codeql.sarif", "semgrep.sarif")
AI_DIR = "ai"
AI_SUMMARY_JSON = "summary.json"
AI_SUMMARY_MARKDOWN = "summary.md"
AI_USAGE_FILE = "total-usage.json"
UI_RESULTS_FILE = "playwright-results.json"

# ---------------------------------------------------------------------------
# Category budgets (sum to 100)
# ---------------------------------------------------------------------------

CATEGORY_MAX: dict[str, int] = {
    "staticAnalysis": 25,
    "secretDetection": 20,
    "dependencySecurity": 25,
    "webSecurity": 20,
    "toolCoverage": 10,
}

MAX_SCORE = 100

# Dependency tools share the dependencySecurity budget.  The split is a
# scoring-policy choice: trivy + osv-scanner must add up to the category max
# (12 + 13 = 25) so one tool alone earns roughly half.
TRIVY_DEPENDENCY_CREDIT = 12
OSV_DEPENDENCY_CREDIT = 13

# ---------------------------------------------------------------------------
# Tool coverage steps: (min coverage %, fraction of toolCoverage max)
# ---------------------------------------------------------------------------

COVERAGE_STEPS: list[tuple[float, float]] = [
    (80.0, 1.0),
    (60.0, 0.8),
    (40.0, 0.6),
]

# ---------------------------------------------------------------------------
# Category status by score/max ratio
# ---------------------------------------------------------------------------

STATUS_STEPS: list[tuple[float, str]] = [
    (1.0, "EXCELLENT"),
    (0.8, "GOOD"),
    (0.6, "FAIR"),
]

# ---------------------------------------------------------------------------
# Grades and verdict
# ---------------------------------------------------------------------------

GRADE_STEPS: list[tuple[int, str]] = [
    (90, "Excellent"),
    (80, "Good"),
    (70, "Fair"),
    (60, "Poor"),
]
GRADE_FLOOR = "Critical"

PASS_THRESHOLD = 70

# ---------------------------------------------------------------------------
# AI priority penalties
# ---------------------------------------------------------------------------

AI_PRIORITY_PENALTY: dict[str, int] = {
    "P0": 15,
    "P1": 10,
    "P2": 5,
}

# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------

TOOL_TIMEOUT_SECONDS = 600
WEB_PROBE_TIMEOUT_SECONDS = 5.0
ERROR_OUTPUT_LIMIT = 500
DEFAULT_AI_PROVIDER = "null"
DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"
AI_MAX_TOKENS = 4000

# Exit codes that mean "completed, findings reported" when an artifact was
# written.  Any other non-zero exit is a failed run.
FINDINGS_EXIT_CODES: dict[str, frozenset[int]] = {
    TOOL_SEMGREP: frozenset({1}),
    TOOL_GITLEAKS: frozenset({1}),
    TOOL_TRIVY: frozenset({1}),
    TOOL_OSV: frozenset({1}),
    TOOL_ZAP: frozenset({1, 2}),
}

CONFIG_FILES = (".scanfuse/config.json", "scanfuse.json")
ENV_PREFIX = "SCANFUSE_"
