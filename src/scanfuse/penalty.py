"""AI priority penalty: deducts points per AI-reported priority item."""

from __future__ import annotations

from typing import Iterable, Mapping

from scanfuse.defaults import AI_PRIORITY_PENALTY
from scanfuse.models import AIPriority


def total_penalty(
    priorities: Iterable[AIPriority],
    weights: Mapping[str, int] | None = None,
) -> int:
    """Sum the per-level penalties (P0=15, P1=10, P2=5 by default)."""
    weights = AI_PRIORITY_PENALTY if weights is None else weights
    return sum(weights.get(p.level.value, 0) for p in priorities)


def apply_penalty(score: int, penalty: int) -> int:
    """Subtract a penalty, flooring at zero."""
    return max(score - max(penalty, 0), 0)
