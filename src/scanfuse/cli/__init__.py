"""CLI for scanfuse.

Commands:
  scanfuse scan      run scanners, AI summary, report and verdict
  scanfuse report    rebuild the report from existing artifacts
  scanfuse score     score a JSON list of tool outcomes
  scanfuse show      print the last persisted report
  scanfuse config    show the resolved configuration
  scanfuse serve     start the HTTP API
"""

from __future__ import annotations

import logging
import sys

from scanfuse.cli._helpers import _out  # noqa: F401 (re-exported for tests)
from scanfuse.cli._parser import build_parser
from scanfuse.cli.commands import (
    cmd_config,
    cmd_report,
    cmd_scan,
    cmd_score,
    cmd_serve,
    cmd_show,
)
from scanfuse.errors import ScanfuseError
from scanfuse.observability import setup_logging

log = logging.getLogger("scanfuse.cli")


# ===================================================================
# Dispatch
# ===================================================================

_DISPATCH = {
    "scan": cmd_scan,
    "report": cmd_report,
    "score": cmd_score,
    "show": cmd_show,
    "config": cmd_config,
    "serve": cmd_serve,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.log_level, json_output=args.log_format == "json")

    handler = _DISPATCH.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except ScanfuseError as e:
        log.error("%s failed: %s", args.command, e)
        return _out({"error": str(e)})
