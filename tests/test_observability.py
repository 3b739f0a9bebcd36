"""Tests for structured logging and metrics rendering."""

import json
import logging

from scanfuse.observability import (
    JsonFormatter,
    generate_metrics,
    record_request,
    record_score,
    setup_logging,
)


class TestJsonFormatter:
    def test_extra_fields(self):
        record = logging.LogRecord("scanfuse.pipeline", logging.INFO, __file__, 1,
                                   "%s completed", ("semgrep",), None)
        record.tool = "semgrep"
        record.status = "SUCCESS"
        record.duration_ms = 1234
        data = json.loads(JsonFormatter().format(record))
        assert data["message"] == "semgrep completed"
        assert data["logger"] == "scanfuse.pipeline"
        assert data["tool"] == "semgrep"
        assert data["duration_ms"] == 1234

    def test_setup_logging_sets_level(self):
        setup_logging("warning")
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        setup_logging("INFO", json_output=False)
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)


class TestMetrics:
    def test_request_counters(self):
        record_request("GET", "/report", 200, 0.01)
        record_request("GET", "/report", 500, 0.02)
        text = generate_metrics()
        assert 'scanfuse_http_requests_total{method="GET",path="/report",status="500"} 1' in text
        assert 'scanfuse_http_errors_total{method="GET",path="/report"} 1' in text
        assert 'scanfuse_http_request_duration_seconds_count{method="GET",path="/report"} 2' in text

    def test_scores(self):
        record_score(42, "FAILED")
        text = generate_metrics()
        assert 'scanfuse_scores_total{verdict="FAILED"} 1' in text
        assert "scanfuse_last_score 42" in text
