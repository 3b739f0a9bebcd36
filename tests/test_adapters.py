"""Tests for scanner adapters (subprocess is mocked)."""

import subprocess
from unittest.mock import MagicMock, patch

from scanfuse.adapters import (
    DockerRuntime,
    GitleaksScanner,
    OsvScanner,
    SemgrepScanner,
    TrivyScanner,
    ZapScanner,
    default_scanners,
)
from scanfuse.ports import ScannerPort


def _completed(returncode=0, stdout="", stderr=""):
    return MagicMock(returncode=returncode, stdout=stdout, stderr=stderr)


class TestCommands:
    def test_semgrep(self, project_dir, artifacts_dir):
        cmd = SemgrepScanner().command(str(project_dir), artifacts_dir / "semgrep.json")
        assert cmd[:2] == ["semgrep", "scan"]
        assert "p/ci" in cmd
        assert str(artifacts_dir / "semgrep.json") in cmd

    def test_gitleaks_without_git_history(self, project_dir, artifacts_dir):
        cmd = GitleaksScanner().command(str(project_dir), artifacts_dir / "gitleaks.json")
        assert "--no-git" in cmd

    def test_gitleaks_with_git_history(self, project_dir, artifacts_dir):
        (project_dir / ".git").mkdir()
        cmd = GitleaksScanner().command(str(project_dir), artifacts_dir / "gitleaks.json")
        assert "--no-git" not in cmd

    def test_trivy_sarif(self, project_dir, artifacts_dir):
        cmd = TrivyScanner().command(str(project_dir), artifacts_dir / "trivy.sarif")
        assert cmd[cmd.index("--format") + 1] == "sarif"

    def test_osv(self, project_dir, artifacts_dir):
        assert "--recursive" in OsvScanner().command(str(project_dir), artifacts_dir / "osv.json")

    def test_zap_mounts_artifacts(self, project_dir, artifacts_dir):
        cmd = ZapScanner().command(str(project_dir), artifacts_dir / "zap.json",
                                   target="http://localhost:3000")
        assert f"{artifacts_dir.resolve()}:/zap/wrk:rw" in cmd
        assert cmd[cmd.index("-t") + 1] == "http://localhost:3000"
        assert cmd[-2:] == ["-J", "zap.json"]

    def test_default_order_and_port(self):
        scanners = default_scanners()
        assert [s.tool_name for s in scanners] == [
            "semgrep", "gitleaks", "trivy", "osv-scanner", "docker", "zap",
        ]
        assert all(isinstance(s, ScannerPort) for s in scanners)


class TestRun:
    def test_success_with_artifact(self, project_dir, artifacts_dir):
        def fake_run(cmd, **kwargs):
            (artifacts_dir / "gitleaks.json").write_text("[]")
            return _completed(0)

        with patch("scanfuse.adapters.base.subprocess.run", side_effect=fake_run) as run:
            result = GitleaksScanner().run(str(project_dir), str(artifacts_dir), timeout=30)
        assert result.returncode == 0
        assert result.error is None
        assert result.artifact == str(artifacts_dir / "gitleaks.json")
        assert run.call_args.kwargs["timeout"] == 30
        assert run.call_args.kwargs["cwd"] == str(project_dir)

    def test_stale_artifact_removed(self, project_dir, artifacts_dir):
        (artifacts_dir / "semgrep.json").write_text('{"results": []}')
        with patch("scanfuse.adapters.base.subprocess.run", return_value=_completed(2, stderr="bad config")):
            result = SemgrepScanner().run(str(project_dir), str(artifacts_dir))
        assert result.artifact is None
        assert result.returncode == 2
        assert result.error == "bad config"

    def test_missing_binary(self, project_dir, artifacts_dir):
        with patch("scanfuse.adapters.base.subprocess.run", side_effect=FileNotFoundError):
            result = TrivyScanner().run(str(project_dir), str(artifacts_dir))
        assert result.returncode is None
        assert result.error == "trivy not installed"

    def test_timeout(self, project_dir, artifacts_dir):
        exc = subprocess.TimeoutExpired(cmd="osv-scanner", timeout=5)
        with patch("scanfuse.adapters.base.subprocess.run", side_effect=exc):
            result = OsvScanner().run(str(project_dir), str(artifacts_dir), timeout=5)
        assert result.returncode is None
        assert "timed out after 5s" in result.error

    def test_error_output_truncated(self, project_dir, artifacts_dir):
        with patch("scanfuse.adapters.base.subprocess.run",
                   return_value=_completed(3, stderr="x" * 2000)):
            result = DockerRuntime().run(str(project_dir), str(artifacts_dir))
        assert len(result.error) == 500

    def test_zap_requires_target(self, project_dir, artifacts_dir):
        with patch("scanfuse.adapters.base.subprocess.run") as run:
            result = ZapScanner().run(str(project_dir), str(artifacts_dir))
        run.assert_not_called()
        assert result.error == "no target URL given"


class TestVersion:
    def test_parses_version(self):
        with patch("scanfuse.adapters.base.subprocess.run",
                   return_value=_completed(0, stdout="gitleaks version 8.18.2\n")):
            assert GitleaksScanner().version() == "8.18.2"

    def test_missing_binary(self):
        with patch("scanfuse.adapters.base.subprocess.run", side_effect=FileNotFoundError):
            assert SemgrepScanner().version() is None

    def test_availability(self):
        with patch("scanfuse.adapters.base.shutil.which", return_value=None):
            assert not TrivyScanner().is_available()
        with patch("scanfuse.adapters.base.shutil.which", return_value="/usr/bin/trivy"):
            assert TrivyScanner().is_available()
