"""Tests for layered configuration loading."""

import pytest

from conftest import write_json
from scanfuse.config import ScanConfig, load_config
from scanfuse.errors import ConfigError


class TestLoadConfig:
    def test_defaults(self, project_dir):
        cfg = load_config(project_dir, env={})
        assert cfg.artifacts_dir == ".scanfuse"
        assert cfg.tool_timeout == 600
        assert cfg.ai_provider == "null"
        assert cfg.source == "default"
        assert cfg.artifacts_path == project_dir / ".scanfuse"

    def test_config_file(self, project_dir):
        write_json(project_dir / ".scanfuse" / "config.json",
                   {"app_url": "http://localhost:8080", "tool_timeout": 120, "unknown": 1})
        cfg = load_config(project_dir, env={})
        assert cfg.app_url == "http://localhost:8080"
        assert cfg.tool_timeout == 120
        assert cfg.source == "config"

    def test_fallback_config_name(self, project_dir):
        write_json(project_dir / "scanfuse.json", {"ai_enabled": False})
        assert load_config(project_dir, env={}).ai_enabled is False

    def test_env_beats_file(self, project_dir):
        write_json(project_dir / "scanfuse.json", {"tool_timeout": 120, "ai_enabled": True})
        cfg = load_config(project_dir, env={
            "SCANFUSE_TOOL_TIMEOUT": "30",
            "SCANFUSE_AI_ENABLED": "off",
        })
        assert cfg.tool_timeout == 30
        assert cfg.ai_enabled is False
        assert cfg.source == "env"

    def test_overrides_beat_env(self, project_dir):
        cfg = load_config(project_dir, env={"SCANFUSE_APP_URL": "http://a"},
                          app_url="http://b", ai_model=None)
        assert cfg.app_url == "http://b"
        assert cfg.ai_model == ""

    def test_api_key_sources(self, project_dir):
        assert load_config(project_dir, env={"ANTHROPIC_API_KEY": "sk-a"}).ai_api_key == "sk-a"
        cfg = load_config(project_dir, env={"SCANFUSE_LLM_API_KEY": "sk-s", "ANTHROPIC_API_KEY": "sk-a"})
        assert cfg.ai_api_key == "sk-s"

    def test_key_redacted_in_dict(self, project_dir):
        cfg = load_config(project_dir, env={"ANTHROPIC_API_KEY": "sk-a"})
        assert cfg.to_dict()["ai_api_key"] == "***"

    def test_invalid_json(self, project_dir):
        (project_dir / "scanfuse.json").write_text("{oops")
        with pytest.raises(ConfigError):
            load_config(project_dir, env={})

    def test_non_object(self, project_dir):
        write_json(project_dir / "scanfuse.json", [1])
        with pytest.raises(ConfigError):
            load_config(project_dir, env={})

    def test_explicit_missing_file(self, project_dir):
        with pytest.raises(ConfigError):
            load_config(project_dir, config_path=project_dir / "nope.json", env={})

    def test_bad_integer(self, project_dir):
        with pytest.raises(ConfigError):
            load_config(project_dir, env={"SCANFUSE_TOOL_TIMEOUT": "soon"})

    def test_non_positive_timeout(self, project_dir):
        with pytest.raises(ConfigError):
            load_config(project_dir, env={}, tool_timeout=0)

    def test_absolute_artifacts_dir(self, project_dir, tmp_path):
        cfg = ScanConfig(project_path=str(project_dir), artifacts_dir=str(tmp_path / "out"))
        assert cfg.artifacts_path == tmp_path / "out"
