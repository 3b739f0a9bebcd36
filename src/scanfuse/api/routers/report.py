"""Report and scoring endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request

from scanfuse import recommendations, scoring
from scanfuse.api.schemas import ScoreBody
from scanfuse.ledger import ScanLedger
from scanfuse.models import AIPriority, PriorityLevel, ScanOutcome
from scanfuse.observability import record_score
from scanfuse.report import aggregate_findings, load_report

router = APIRouter(tags=["report"])


@router.get("/report")
def get_report(request: Request):
    """Last persisted report from the configured artifacts directory."""
    report = load_report(request.app.state.artifacts_dir)
    if report is None:
        raise HTTPException(status_code=404, detail="No security report found")
    return report


@router.post("/score")
def score(body: ScoreBody):
    """Score a ledger of tool outcomes, optionally penalized by AI priorities."""
    try:
        ledger = ScanLedger(
            ScanOutcome.from_dict(o.model_dump(exclude_none=True)) for o in body.outcomes
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    priorities = [
        AIPriority(level=PriorityLevel(p.level), description=p.description)
        for p in body.ai_priorities
    ]
    card = scoring.evaluate(ledger, priorities)
    record_score(card.overall.total, card.overall.status.value)

    result = card.to_dict()
    result["findings"] = aggregate_findings(ledger).to_dict()
    result["recommendations"] = recommendations.generate(ledger).to_dict()
    return result
