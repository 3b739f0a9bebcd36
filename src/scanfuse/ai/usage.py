"""Token usage accumulator for AI calls.

The accumulator is an explicit value: the caller creates one per run, passes
it to every AI call site, and hands it to the report assembler.  Snapshots
are written to disk only when the caller asks for it.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from scanfuse._files import write_atomic

log = logging.getLogger("scanfuse.ai.usage")


def _tokens(usage: dict[str, Any], *keys: str) -> int:
    total = 0
    for key in keys:
        value = usage.get(key)
        if isinstance(value, (int, float)) and value > 0:
            total += int(value)
    return total


@dataclass
class UsageAccumulator:
    total_tokens: int = 0
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_calls: int = 0
    total_cost: float | None = None

    def record(self, usage: dict[str, Any] | None) -> None:
        """Add one call's usage.

        Accepts both ``prompt_tokens``/``completion_tokens`` (and their
        camelCase forms) and ``input_tokens``/``output_tokens``.  When the
        provider reports no total, it is derived from prompt + completion.
        """
        if usage is None:
            return
        self.total_calls += 1
        prompt = _tokens(usage, "prompt_tokens", "promptTokens", "input_tokens")
        completion = _tokens(usage, "completion_tokens", "completionTokens", "output_tokens")
        total = _tokens(usage, "total_tokens", "totalTokens") or prompt + completion
        self.prompt_tokens += prompt
        self.completion_tokens += completion
        self.total_tokens += total
        cost = usage.get("cost")
        if isinstance(cost, (int, float)):
            self.total_cost = (self.total_cost or 0.0) + float(cost)

    @property
    def is_empty(self) -> bool:
        return self.total_calls == 0

    def snapshot(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "totalTokens": self.total_tokens,
            "promptTokens": self.prompt_tokens,
            "completionTokens": self.completion_tokens,
            "totalCalls": self.total_calls,
        }
        if self.total_cost is not None:
            d["totalCost"] = round(self.total_cost, 6)
        return d

    def save(self, path: str | Path) -> Path:
        return write_atomic(path, json.dumps(self.snapshot(), indent=2))

    @classmethod
    def load(cls, path: str | Path) -> UsageAccumulator:
        """Load a snapshot; a missing or unreadable file yields an empty accumulator."""
        p = Path(path)
        if not p.exists():
            return cls()
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError, RecursionError) as e:
            log.warning("Failed to load AI usage snapshot %s: %s", p, e)
            return cls()
        if not isinstance(data, dict):
            return cls()
        cost = data.get("totalCost")
        return cls(
            total_tokens=_tokens(data, "totalTokens"),
            prompt_tokens=_tokens(data, "promptTokens"),
            completion_tokens=_tokens(data, "completionTokens"),
            total_calls=_tokens(data, "totalCalls"),
            total_cost=float(cost) if isinstance(cost, (int, float)) else None,
        )
