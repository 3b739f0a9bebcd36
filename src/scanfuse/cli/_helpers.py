"""Shared CLI helpers."""

from __future__ import annotations

import argparse
import json
from typing import Any

from scanfuse.config import ScanConfig, load_config


def _out(data: Any) -> int:
    print(json.dumps(data, indent=2, default=str))
    if isinstance(data, dict) and "error" in data:
        return 1
    return 0


def _config_from_args(args: argparse.Namespace) -> ScanConfig:
    """Resolve config layers, with explicit CLI flags on top."""
    ai_enabled = False if getattr(args, "no_ai", False) else None
    return load_config(
        args.project,
        config_path=args.config,
        artifacts_dir=args.artifacts_dir,
        app_url=getattr(args, "app_url", None),
        tool_timeout=getattr(args, "timeout", None),
        ai_enabled=ai_enabled,
        ai_provider=getattr(args, "ai_provider", None),
        ai_model=getattr(args, "ai_model", None),
    )
