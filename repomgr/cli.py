"""CLI entry point for git-repo-mgr."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional

from repomgr import PROGRAM_NAME, __version__
from repomgr.config import CONFIG_FILE, Config, load_config
from repomgr.errors import ConfigError, ScanError, ScanRootError
from repomgr.log import configure_logging
from repomgr.manager import Manager, ScanReport
from repomgr.state import utcnow

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_SCAN_FAILED = 1
EXIT_FATAL = 2


def print_summary(report: ScanReport) -> None:
    """Print a Rich table of every tracked repository to stdout."""
    from rich.console import Console
    from rich.table import Table

    from repomgr.theme import CYAN, MUTED, PURPLE, SURFACE, age_text, outcome_text

    console = Console()
    now = utcnow()

    table = Table(
        title=f"[bold {CYAN}]{PROGRAM_NAME}[/bold {CYAN}] {report.root}",
        border_style=SURFACE,
        show_edge=True,
        pad_edge=True,
    )
    table.add_column("Repo", style=f"bold {CYAN}")
    table.add_column("Status", no_wrap=True)
    table.add_column("Branch", style=PURPLE)
    table.add_column("Origin", style=MUTED, overflow="fold")
    table.add_column("Last commit", justify="right")
    table.add_column("Updated", justify="right")

    for name in sorted(report.outcomes):
        outcome = report.outcomes[name]
        if name not in report.states and name not in report.errors:
            continue
        state = report.states.get(name)
        table.add_row(
            name,
            outcome_text(outcome.value),
            state.branch if state else "",
            state.remote_origin if state else str(report.errors.get(name, "")),
            age_text(state.last_commit_time if state else None, now),
            age_text(state.updated_at if state else None, now),
        )

    console.print(table)
    seen = sorted(set(report.outcomes.values()), key=lambda o: o.value)
    counts = ", ".join(f"{report.count(o)} {o.value}" for o in seen)
    console.print(f"  [{MUTED}]{len(report.outcomes)} entries: {counts or 'none'}[/{MUTED}]")


def report_to_dict(report: ScanReport) -> dict:
    return {
        "root": report.root,
        "outcomes": {name: report.outcomes[name].value for name in sorted(report.outcomes)},
        "states": {name: report.states[name].to_dict() for name in sorted(report.states)},
        "errors": {name: str(err) for name, err in sorted(report.errors.items())},
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROGRAM_NAME,
        description="Record origin, branch and last-commit time beside every git repo in a directory.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help=f"Directory whose children are scanned (default: 'path' from {CONFIG_FILE}, else ./)",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        default=CONFIG_FILE,
        help=f"JSON config file (default: {CONFIG_FILE})",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        metavar="N",
        default=None,
        help="Maximum git processes at once (default: 10)",
    )
    parser.add_argument(
        "--summary",
        action="store_true",
        help="Print a table of tracked repos after the scan",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print the scan report as JSON",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Debug logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"{PROGRAM_NAME} {__version__}",
    )
    return parser


def run(argv: Optional[list[str]] = None) -> int:
    """Parse ``argv``, scan once and return the process exit code."""
    args = build_parser().parse_args(argv)
    configure_logging("DEBUG" if args.verbose else "INFO")

    try:
        config: Config = load_config(args.config)
        if args.path:
            config.path = args.path
        if args.concurrency is not None:
            config.concurrency = args.concurrency
        config.validate()
    except ConfigError as e:
        logger.error("config: %s", e)
        return EXIT_FATAL

    code = EXIT_OK
    try:
        report = Manager(config).run()
    except ScanRootError as e:
        logger.error("%s", e)
        return EXIT_FATAL
    except ScanError as e:
        logger.error("failed: %s", e)
        report = e.report
        code = EXIT_SCAN_FAILED

    if report is not None:
        if args.json_output:
            print(json.dumps(report_to_dict(report), indent=2))
        elif args.summary:
            print_summary(report)
    return code


def main() -> None:
    """Entry point for the git-repo-mgr CLI."""
    sys.exit(run())


if __name__ == "__main__":
    main()
