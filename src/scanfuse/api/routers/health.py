"""Health check and metrics endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Response

from scanfuse.defaults import SCANFUSE_VERSION
from scanfuse.models import now_iso
from scanfuse.observability import generate_metrics

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    return {"status": "ok", "version": SCANFUSE_VERSION, "timestamp": now_iso()}


@router.get("/metrics")
def metrics():
    """Prometheus-compatible metrics endpoint."""
    return Response(content=generate_metrics(), media_type="text/plain; charset=utf-8")
