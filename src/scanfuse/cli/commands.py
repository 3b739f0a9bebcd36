"""CLI commands: scan, score, report, show, config, serve."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from scanfuse import pipeline, recommendations, scoring
from scanfuse.adapters import default_scanners
from scanfuse.cli._helpers import _config_from_args, _out
from scanfuse.defaults import REPORT_MARKDOWN
from scanfuse.ledger import ScanLedger
from scanfuse.models import AIPriority, PriorityLevel, RunMode
from scanfuse.report import load_report


def cmd_scan(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    scanners = default_scanners()
    if args.tools:
        wanted = {t.strip() for t in args.tools.split(",") if t.strip()}
        unknown = wanted - {s.tool_name for s in scanners}
        if unknown:
            return _out({"error": f"Unknown tools: {', '.join(sorted(unknown))}"})
        scanners = [s for s in scanners if s.tool_name in wanted]

    result = pipeline.run_scan(cfg, scanners=scanners, mode=RunMode(args.mode))
    _out(result.to_dict())
    return result.exit_code


def cmd_report(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    result = pipeline.rebuild_report(cfg, mode=RunMode(args.mode))
    _out(result.to_dict())
    return result.exit_code


def cmd_score(args: argparse.Namespace) -> int:
    try:
        data = json.loads(Path(args.file).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        return _out({"error": f"Cannot read {args.file}: {e}"})
    if isinstance(data, dict):
        data = data.get("tools", data.get("outcomes"))
    if not isinstance(data, list):
        return _out({"error": "Expected a list of tool outcomes"})

    try:
        ledger = ScanLedger.from_dicts(data)
    except (ValueError, AttributeError) as e:
        return _out({"error": f"Invalid tool outcome: {e}"})
    priorities = [AIPriority(PriorityLevel(level), "") for level in args.priority]
    card = scoring.evaluate(ledger, priorities)
    result = card.to_dict()
    result["recommendations"] = recommendations.generate(ledger).to_dict()
    return _out(result)


def cmd_show(args: argparse.Namespace) -> int:
    cfg = _config_from_args(args)
    if args.markdown:
        path = cfg.artifacts_path / REPORT_MARKDOWN
        if not path.exists():
            return _out({"error": f"No report found at {path}"})
        print(path.read_text(encoding="utf-8"), end="")
        return 0
    report = load_report(cfg.artifacts_path)
    if report is None:
        return _out({"error": f"No report found in {cfg.artifacts_path}"})
    return _out(report)


def cmd_config(args: argparse.Namespace) -> int:
    return _out(_config_from_args(args).to_dict())


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    from scanfuse.api import create_app

    app = create_app(artifacts_dir=args.artifacts_dir)
    uvicorn.run(app, host=args.host, port=args.port, log_config=None)
    return 0
