"""Scan ledger: append-only, ordered record of tool outcomes for one run."""

from __future__ import annotations

import threading
from typing import Any, Iterable, Iterator

from scanfuse.models import ScanOutcome, ScanStatus


class ScanLedger:
    """Ordered sequence of ScanOutcome values.

    Outcomes are never removed or edited.  A retried tool appends a new
    outcome; consumers that need one outcome per tool use ``latest()``,
    which resolves duplicates to the most recent occurrence.  Appends are
    serialized so ordering stays well defined if tools run in parallel.
    """

    def __init__(self, outcomes: Iterable[ScanOutcome] = ()) -> None:
        self._outcomes: list[ScanOutcome] = []
        self._lock = threading.Lock()
        for outcome in outcomes:
            self.append(outcome)

    @classmethod
    def from_dicts(cls, items: Iterable[dict[str, Any]]) -> ScanLedger:
        return cls(ScanOutcome.from_dict(item) for item in items)

    def append(self, outcome: ScanOutcome) -> ScanOutcome:
        if not isinstance(outcome, ScanOutcome):
            raise TypeError(f"expected ScanOutcome, got {type(outcome).__name__}")
        with self._lock:
            self._outcomes.append(outcome)
        return outcome

    @property
    def outcomes(self) -> tuple[ScanOutcome, ...]:
        with self._lock:
            return tuple(self._outcomes)

    def __iter__(self) -> Iterator[ScanOutcome]:
        return iter(self.outcomes)

    def __len__(self) -> int:
        with self._lock:
            return len(self._outcomes)

    def latest(self) -> list[ScanOutcome]:
        """One outcome per tool: the last one appended, in first-seen order."""
        by_tool: dict[str, ScanOutcome] = {}
        for outcome in self.outcomes:
            by_tool[outcome.tool] = outcome
        return list(by_tool.values())

    def attempted_count(self) -> int:
        return len(self.latest())

    def success_count(self) -> int:
        return sum(1 for o in self.latest() if o.status == ScanStatus.SUCCESS)

    def with_status(self, status: ScanStatus) -> list[ScanOutcome]:
        return [o for o in self.latest() if o.status == status]

    def to_list(self) -> list[dict[str, Any]]:
        return [o.to_dict() for o in self.outcomes]
