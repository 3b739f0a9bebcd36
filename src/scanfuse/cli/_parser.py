"""Argparse parser definition for the scanfuse CLI."""

from __future__ import annotations

import argparse

from scanfuse.defaults import SCANFUSE_VERSION
from scanfuse.models import RunMode


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scanfuse",
        description="Run security scanners and fuse their results into one scored report",
    )
    parser.add_argument("--version", action="version", version=f"scanfuse {SCANFUSE_VERSION}")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-format", default="json", choices=["json", "text"])
    sub = parser.add_subparsers(dest="command")

    _register_scan_commands(sub)
    _register_report_commands(sub)
    _register_server_commands(sub)

    return parser


def _add_project_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--project", default=".", help="Project directory (default: .)")
    p.add_argument("--config", help="JSON config file (default: .scanfuse/config.json or scanfuse.json)")
    p.add_argument("--artifacts-dir", help="Artifacts directory, relative to the project")


def _add_mode_arg(p: argparse.ArgumentParser) -> None:
    p.add_argument("--mode", default=RunMode.STANDALONE.value,
                   choices=[m.value for m in RunMode],
                   help="aggregate: always exit 0 and leave the verdict to the caller")


def _register_scan_commands(sub: argparse._SubParsersAction) -> None:
    # -- scan --
    p = sub.add_parser("scan", help="Run all scanners and write the security report")
    _add_project_args(p)
    _add_mode_arg(p)
    p.add_argument("--app-url", help="Running application URL for web scans")
    p.add_argument("--timeout", type=int, help="Per-tool timeout in seconds")
    p.add_argument("--tools", help="Comma-separated subset of tools to run")
    p.add_argument("--no-ai", action="store_true", help="Skip the AI executive summary")
    p.add_argument("--ai-provider", choices=["null", "anthropic"])
    p.add_argument("--ai-model")

    # -- score --
    p = sub.add_parser("score", help="Score a JSON list of tool outcomes")
    p.add_argument("--file", required=True,
                   help="JSON file: list of outcomes or an object with 'tools'/'outcomes'")
    p.add_argument("--priority", action="append", default=[], choices=["P0", "P1", "P2"],
                   help="AI priority level to penalize (repeatable)")


def _register_report_commands(sub: argparse._SubParsersAction) -> None:
    # -- report --
    p = sub.add_parser("report", help="Rebuild the report from existing artifacts")
    _add_project_args(p)
    _add_mode_arg(p)
    p.add_argument("--no-ai", action="store_true", help="Ignore any AI summary artifact")

    # -- show --
    p = sub.add_parser("show", help="Print the last persisted report")
    _add_project_args(p)
    p.add_argument("--markdown", action="store_true", help="Print the markdown document")

    # -- config --
    p = sub.add_parser("config", help="Show the resolved configuration")
    _add_project_args(p)


def _register_server_commands(sub: argparse._SubParsersAction) -> None:
    # -- serve --
    p = sub.add_parser("serve", help="Start HTTP API server")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=9876)
    p.add_argument("--artifacts-dir", default="", help="Directory holding the persisted report")
