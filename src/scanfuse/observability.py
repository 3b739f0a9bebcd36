"""Observability: structured logging and Prometheus metrics."""

from __future__ import annotations

import json
import logging
import time
from collections import defaultdict
from typing import Any

from fastapi import FastAPI, Request, Response

# --- Metrics constants ---
_HTTP_ERROR_THRESHOLD = 500
_MS_PER_SECOND = 1000

_EXTRA_FIELDS = ("tool", "status", "duration_ms", "method", "path", "status_code", "trace_id")


# ---------------------------------------------------------------------------
# Structured JSON logging
# ---------------------------------------------------------------------------

class JsonFormatter(logging.Formatter):
    """Emit log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_dict: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            log_dict["exception"] = self.formatException(record.exc_info)
        for key in _EXTRA_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                log_dict[key] = val
        return json.dumps(log_dict, default=str)


def setup_logging(level: str = "INFO", *, json_output: bool = True) -> None:
    """Configure the root logger on stderr, as JSON lines by default."""
    handler = logging.StreamHandler()
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    # Quiet noisy loggers
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# Prometheus-compatible metrics (no external dependency)
# ---------------------------------------------------------------------------

_request_count: dict[tuple[str, str, str], int] = defaultdict(int)
_request_latency_sum: dict[tuple[str, str], float] = defaultdict(float)
_request_latency_count: dict[tuple[str, str], int] = defaultdict(int)
_error_count: dict[tuple[str, str], int] = defaultdict(int)
_score_count: dict[str, int] = defaultdict(int)
_last_score: dict[str, int] = {}


def record_request(method: str, path: str, status: int, duration: float) -> None:
    _request_count[(method, path, str(status))] += 1
    _request_latency_sum[(method, path)] += duration
    _request_latency_count[(method, path)] += 1
    if status >= _HTTP_ERROR_THRESHOLD:
        _error_count[(method, path)] += 1


def record_score(total: int, verdict: str) -> None:
    """Count a computed score by verdict and remember the latest total."""
    _score_count[verdict] += 1
    _last_score["total"] = total


def reset_metrics() -> None:
    """Clear all collected metrics (for tests)."""
    for store in (_request_count, _request_latency_sum, _request_latency_count,
                  _error_count, _score_count, _last_score):
        store.clear()


def generate_metrics() -> str:
    """Render metrics in Prometheus text exposition format."""
    lines: list[str] = []

    lines.append("# HELP scanfuse_http_requests_total Total HTTP requests by method, path, status.")
    lines.append("# TYPE scanfuse_http_requests_total counter")
    for (method, path, status), count in sorted(_request_count.items()):
        lines.append(f'scanfuse_http_requests_total{{method="{method}",path="{path}",status="{status}"}} {count}')

    lines.append("# HELP scanfuse_http_request_duration_seconds Total request duration by method and path.")
    lines.append("# TYPE scanfuse_http_request_duration_seconds summary")
    for (method, path), total in sorted(_request_latency_sum.items()):
        cnt = _request_latency_count[(method, path)]
        lines.append(f'scanfuse_http_request_duration_seconds_sum{{method="{method}",path="{path}"}} {total:.6f}')
        lines.append(f'scanfuse_http_request_duration_seconds_count{{method="{method}",path="{path}"}} {cnt}')

    lines.append("# HELP scanfuse_http_errors_total Total 5xx errors.")
    lines.append("# TYPE scanfuse_http_errors_total counter")
    for (method, path), count in sorted(_error_count.items()):
        lines.append(f'scanfuse_http_errors_total{{method="{method}",path="{path}"}} {count}')

    lines.append("# HELP scanfuse_scores_total Scores computed, by verdict.")
    lines.append("# TYPE scanfuse_scores_total counter")
    for verdict, count in sorted(_score_count.items()):
        lines.append(f'scanfuse_scores_total{{verdict="{verdict}"}} {count}')

    if "total" in _last_score:
        lines.append("# HELP scanfuse_last_score Most recently computed security score.")
        lines.append("# TYPE scanfuse_last_score gauge")
        lines.append(f"scanfuse_last_score {_last_score['total']}")

    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# FastAPI middleware
# ---------------------------------------------------------------------------

def add_observability_middleware(app: FastAPI) -> None:
    """Add request logging and metrics collection middleware."""

    @app.middleware("http")
    async def observe_request(request: Request, call_next) -> Response:
        start = time.time()
        response: Response = await call_next(request)
        duration = time.time() - start

        path = request.url.path
        method = request.method
        status = response.status_code

        record_request(method, path, status, duration)

        logger = logging.getLogger("scanfuse.access")
        logger.info(
            "%s %s %d %.0fms",
            method, path, status, duration * _MS_PER_SECOND,
            extra={
                "method": method,
                "path": path,
                "status_code": status,
                "duration_ms": round(duration * _MS_PER_SECOND, 1),
                "trace_id": request.headers.get("x-trace-id", ""),
            },
        )
        return response
