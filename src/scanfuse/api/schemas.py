"""Pydantic request models for strict input validation."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class TallyBody(BaseModel):
    total: int = Field(default=0, ge=0)
    critical: int = Field(default=0, ge=0)
    high: int = Field(default=0, ge=0)
    medium: int = Field(default=0, ge=0)
    low: int = Field(default=0, ge=0)
    info: int = Field(default=0, ge=0)


class OutcomeBody(BaseModel):
    tool: str = Field(..., min_length=1)
    status: Literal["SUCCESS", "FAILED", "SKIPPED"]
    findings: int | None = Field(default=None, ge=0)
    version: str | None = None
    executionTime: int | None = Field(default=None, ge=0)
    tally: TallyBody | None = None
    error: str | None = None
    reason: str | None = None


class PriorityBody(BaseModel):
    level: Literal["P0", "P1", "P2"]
    description: str = ""


class ScoreBody(BaseModel):
    outcomes: list[OutcomeBody] = Field(default_factory=list)
    ai_priorities: list[PriorityBody] = Field(default_factory=list)
