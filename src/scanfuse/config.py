"""Run configuration.

Loaded in layers: defaults → JSON config file → environment variables
(``SCANFUSE_<FIELD>``) → explicit overrides such as CLI flags.  The
config file is looked up relative to the project, first ``.scanfuse/config.json`` then
``scanfuse.json``.  A config file that exists but cannot be parsed raises
ConfigError; unknown keys are ignored.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Mapping

from scanfuse.defaults import (
    CONFIG_FILES,
    DEFAULT_AI_PROVIDER,
    DEFAULT_ARTIFACTS_DIR,
    ENV_PREFIX,
    TOOL_TIMEOUT_SECONDS,
)
from scanfuse.errors import ConfigError

log = logging.getLogger("scanfuse.config")

_TRUTHY = ("1", "true", "yes", "on")


@dataclass
class ScanConfig:
    project_path: str = "."
    artifacts_dir: str = DEFAULT_ARTIFACTS_DIR
    app_url: str = ""
    tool_timeout: int = TOOL_TIMEOUT_SECONDS
    ai_enabled: bool = True
    ai_provider: str = DEFAULT_AI_PROVIDER
    ai_model: str = ""
    ai_api_key: str = ""
    ai_critical_to_fail: bool = False
    source: str = "default"         # default | config | env

    @property
    def artifacts_path(self) -> Path:
        """Artifacts directory, resolved against the project when relative."""
        p = Path(self.artifacts_dir)
        return p if p.is_absolute() else Path(self.project_path) / p

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        # Never echo secrets
        d["ai_api_key"] = "***" if self.ai_api_key else ""
        return d


def _coerce(name: str, current: Any, value: Any) -> Any:
    if isinstance(current, bool):
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUTHY
    if isinstance(current, int):
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{name} must be an integer, got {value!r}") from e
    return "" if value is None else str(value)


def _read_config_file(project_path: Path, config_path: str | Path | None) -> tuple[dict[str, Any], Path | None]:
    candidates = [Path(config_path)] if config_path else [project_path / c for c in CONFIG_FILES]
    for p in candidates:
        if not p.exists():
            continue
        try:
            with open(p, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            raise ConfigError(f"Cannot load config {p}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config {p} must contain a JSON object")
        return data, p
    if config_path:
        raise ConfigError(f"Config file not found: {config_path}")
    return {}, None


def load_config(
    project_path: str | Path = ".",
    *,
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
    **overrides: Any,
) -> ScanConfig:
    """Build a ScanConfig from defaults, config file, env and explicit overrides.

    ``overrides`` (typically CLI flags) win over every other layer; ``None``
    values are ignored.
    """
    env = os.environ if env is None else env
    cfg = ScanConfig(project_path=str(project_path))
    names = {f.name: f for f in fields(ScanConfig) if f.name != "source"}

    # 1. Config file
    data, found = _read_config_file(Path(project_path), config_path)
    for key, value in data.items():
        if key in names and key != "project_path":
            setattr(cfg, key, _coerce(key, getattr(cfg, key), value))
            cfg.source = "config"
    if found is not None:
        log.debug("Loaded config from %s", found)

    # 2. Environment
    for name in names:
        if name == "project_path":
            continue
        env_val = env.get(f"{ENV_PREFIX}{name.upper()}")
        if env_val is not None:
            setattr(cfg, name, _coerce(name, getattr(cfg, name), env_val))
            cfg.source = "env"
    if not cfg.ai_api_key:
        cfg.ai_api_key = env.get(f"{ENV_PREFIX}LLM_API_KEY") or env.get("ANTHROPIC_API_KEY", "")

    # 3. Explicit overrides
    for name, value in overrides.items():
        if value is None:
            continue
        if name not in names:
            raise ConfigError(f"Unknown config field: {name}")
        setattr(cfg, name, _coerce(name, getattr(cfg, name), value))

    if cfg.tool_timeout <= 0:
        raise ConfigError(f"tool_timeout must be positive, got {cfg.tool_timeout}")
    return cfg
