"""Tests for the UI test results reader."""

from conftest import write_json
from scanfuse.uitest import load_ui_summary


class TestUiSummary:
    def test_stats(self, artifacts_dir):
        write_json(artifacts_dir / "playwright-results.json",
                   {"stats": {"expected": 8, "unexpected": 1, "skipped": 1, "duration": 4200.5}})
        ui = load_ui_summary(artifacts_dir)
        assert (ui.total, ui.passed, ui.failed, ui.skipped) == (10, 8, 1, 1)
        assert ui.status == "FAILED"
        assert ui.success_rate == 80
        assert ui.execution_time_ms == 4200

    def test_all_passed(self, artifacts_dir):
        write_json(artifacts_dir / "playwright-results.json", {"stats": {"expected": 3}})
        assert load_ui_summary(artifacts_dir).status == "PASSED"

    def test_no_tests_is_skipped(self, artifacts_dir):
        write_json(artifacts_dir / "playwright-results.json", {"stats": {}})
        assert load_ui_summary(artifacts_dir).status == "SKIPPED"

    def test_missing_file(self, artifacts_dir):
        assert load_ui_summary(artifacts_dir) is None

    def test_malformed(self, artifacts_dir):
        (artifacts_dir / "playwright-results.json").write_text("<html>")
        assert load_ui_summary(artifacts_dir) is None
        write_json(artifacts_dir / "playwright-results.json", {"suites": []})
        assert load_ui_summary(artifacts_dir) is None
