"""AI executive summary: generation, persistence and loading.

The structured ``ai/summary.json`` artifact is authoritative.  The markdown
``ai/summary.md`` form is read only as a fallback, and only when it has the
exact section shape we render ourselves; anything else means no AI analysis.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from scanfuse._files import write_atomic
from scanfuse.ai.port import ExecutiveSummary, LLMPort
from scanfuse.ai.usage import UsageAccumulator
from scanfuse.defaults import AI_DIR, AI_SUMMARY_JSON, AI_SUMMARY_MARKDOWN
from scanfuse.models import AIAnalysis, AIPriority, PriorityLevel

log = logging.getLogger("scanfuse.ai.summary")

_PRIORITIES_HEADING = "## Priorities"
_PRIORITY_LINE = re.compile(r"^\s*-\s+\*\*(P[012])\*\*:\s*(.+?)\s*$", re.MULTILINE)
_RECOMMENDATIONS_SECTION = re.compile(r"^## Recommendations[ \t]*\n(.*?)(?=^##|\Z)", re.MULTILINE | re.DOTALL)
_ITEM_LINE = re.compile(r"^\s*-\s+(.+?)\s*$", re.MULTILINE)


def to_analysis(summary: ExecutiveSummary) -> AIAnalysis:
    return AIAnalysis(
        summary=summary.summary.strip(),
        priorities=tuple(
            AIPriority(level=PriorityLevel(p.level), description=p.description.strip())
            for p in summary.priorities
        ),
        recommendations=tuple(r.strip() for r in summary.recommendations if r.strip()),
    )


def render_markdown(summary: ExecutiveSummary) -> str:
    lines = [summary.summary.strip(), "", _PRIORITIES_HEADING]
    lines += [f"- **{p.level}**: {p.description}" for p in summary.priorities]
    lines += ["", "## Recommendations"]
    lines += [f"- {r}" for r in summary.recommendations]
    return "\n".join(lines) + "\n"


def parse_markdown(text: str) -> AIAnalysis | None:
    """Parse the legacy markdown summary; None if the shape does not match."""
    body = text.replace('"', "").strip()
    if _PRIORITIES_HEADING not in body:
        return None

    head, _, rest = body.partition(_PRIORITIES_HEADING)
    section = re.split(r"^##", rest, maxsplit=1, flags=re.MULTILINE)[0]
    priorities = tuple(
        AIPriority(level=PriorityLevel(level), description=desc)
        for level, desc in _PRIORITY_LINE.findall(section)
    )

    recommendations: tuple[str, ...] = ()
    match = _RECOMMENDATIONS_SECTION.search(body)
    if match:
        recommendations = tuple(item for item in _ITEM_LINE.findall(match.group(1)) if item)

    return AIAnalysis(
        summary=head.strip(),
        priorities=priorities,
        recommendations=recommendations,
    )


def load_ai_analysis(artifacts_dir: str | Path) -> AIAnalysis | None:
    """Load the AI analysis for a run, or None when unavailable."""
    ai_dir = Path(artifacts_dir) / AI_DIR
    json_path = ai_dir / AI_SUMMARY_JSON
    if json_path.exists():
        try:
            return to_analysis(ExecutiveSummary.model_validate_json(json_path.read_text(encoding="utf-8")))
        except (OSError, ValueError, RecursionError) as e:
            log.warning("Ignoring malformed AI summary %s: %s", json_path, e)

    md_path = ai_dir / AI_SUMMARY_MARKDOWN
    if not md_path.exists():
        return None
    try:
        analysis = parse_markdown(md_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log.warning("Failed to read AI summary %s: %s", md_path, e)
        return None
    if analysis is None:
        log.warning("AI summary %s has no '%s' section; ignoring it", md_path, _PRIORITIES_HEADING)
    return analysis


def generate_executive_summary(
    adapter: LLMPort,
    findings: dict[str, Any],
    usage: UsageAccumulator,
    artifacts_dir: str | Path,
) -> AIAnalysis | None:
    """Ask the LLM for a structured summary and persist both forms.

    Provider or parse failures are logged and yield None, so the base score
    stands unmodified.
    """
    if not adapter.is_available():
        return None
    try:
        result = adapter.summarize_findings(findings)
    except Exception as e:
        log.warning("AI executive summary failed (%s): %s", adapter.provider_name, e)
        return None
    usage.record(result.usage)

    ai_dir = Path(artifacts_dir) / AI_DIR
    write_atomic(ai_dir / AI_SUMMARY_JSON, json.dumps(result.summary.model_dump(), indent=2))
    write_atomic(ai_dir / AI_SUMMARY_MARKDOWN, render_markdown(result.summary))
    return to_analysis(result.summary)
