"""Command line interface: print the local-only refs of one or more repositories."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from .config import Config, load_configuration, parse_categories, validate_configuration
from .git_refs.error_types import RefScoutError
from .git_refs.models import RefCategory, ReconcileMode
from .git_refs.reconciler import reconcile
from .git_refs.report import render, render_json
from .platform import validate_git_availability
from .server import setup_logging

EXIT_OK = 0
EXIT_FATAL = 1


class ProgressLine:
    """Overwritable status line; cleared before any report output."""

    def __init__(self, stream: TextIO, label: str = "Checking"):
        self.stream = stream
        self.label = label
        self.enabled = stream.isatty()
        self._width = 0

    def __call__(self, done: int, total: int) -> None:
        if not self.enabled:
            return
        text = f"{self.label} {done}/{total}..."
        self._width = max(self._width, len(text))
        self.stream.write("\r" + text.ljust(self._width))
        self.stream.flush()

    def clear(self) -> None:
        if self.enabled and self._width:
            self.stream.write("\r" + " " * self._width + "\r")
            self.stream.flush()
            self._width = 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="refscout",
        description="List local branches, tags and stashes that are not on any remote"
    )
    parser.add_argument("path", nargs="?", default=".", help="repository path (default: current directory)")
    parser.add_argument(
        "--categories",
        help="comma separated subset of branches,tags,stashes (default: all)"
    )
    parser.add_argument("--skip-tags", action="store_true", help="do not check tags")
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in ReconcileMode],
        help="exact queries remotes, heuristic uses local history only"
    )
    parser.add_argument("--no-fetch", action="store_true", help="same as --mode heuristic")
    parser.add_argument(
        "--refresh-tracking",
        action="store_true",
        help="fetch each remote (with --prune) before listing it"
    )
    parser.add_argument("--limit", type=int, help="check only the first N refs of each category")
    parser.add_argument(
        "--remote",
        action="append",
        dest="remotes",
        help="candidate remote name, repeatable, checked in order (default: upstream, origin)"
    )
    parser.add_argument("--workspace", action="store_true", help="also show uncommitted and untracked files")
    parser.add_argument("--scan", metavar="DIR", help="report every repository directly under DIR")
    parser.add_argument("--json", action="store_true", help="print the report as JSON")
    parser.add_argument("--debug", action="store_true", help="trace every lookup on stderr")
    return parser


def _config_from_args(args: argparse.Namespace, base: Config) -> Config:
    categories = parse_categories(args.categories) if args.categories else base.categories
    if args.skip_tags:
        categories = tuple(category for category in categories if category is not RefCategory.TAGS)

    mode = ReconcileMode.HEURISTIC if args.no_fetch else args.mode

    return base.replace(
        categories=categories,
        mode=mode,
        limit=args.limit,
        remote_candidates=tuple(args.remotes) if args.remotes else None,
        refresh_tracking=True if args.refresh_tracking else None,
        debug=True if args.debug else None,
    )


def _emit(report, as_json: bool, out: TextIO) -> None:
    if as_json:
        out.write(json.dumps(render_json(report), indent=2) + "\n")
    else:
        out.write(render(report))


def _run_single(args: argparse.Namespace, config: Config, out: TextIO, err: TextIO) -> int:
    progress = ProgressLine(err)
    try:
        report = reconcile(
            args.path,
            config=config,
            on_progress=progress,
            include_workspace=args.workspace
        )
    except RefScoutError as e:
        progress.clear()
        logging.getLogger('refscout.init').error(str(e))
        err.write(f"Error: {e}\n")
        return EXIT_FATAL

    progress.clear()
    _emit(report, args.json, out)
    return EXIT_OK


def _outcome_to_dict(outcome) -> dict:
    if outcome.success:
        return {"path": str(outcome.path), "report": render_json(outcome.report)}
    return {
        "path": str(outcome.path),
        "error": {"error_code": outcome.error.error_code, "message": str(outcome.error)},
    }


def _run_scan(args: argparse.Namespace, config: Config, out: TextIO, err: TextIO) -> int:
    from .batch import scan_repositories

    status = EXIT_OK
    outcomes = []
    separator = "-" * 40
    for outcome in scan_repositories(args.scan, config, include_workspace=args.workspace):
        if not outcome.success:
            err.write(f"Error: {outcome.path}: {outcome.error}\n")
            status = EXIT_FATAL
        if args.json:
            # One document for the whole scan
            outcomes.append(_outcome_to_dict(outcome))
            continue
        out.write(f"Processing {outcome.path}\n")
        if outcome.success:
            _emit(outcome.report, False, out)
        out.write(separator + "\n")

    if args.json:
        out.write(json.dumps({"repositories": outcomes}, indent=2) + "\n")
    return status


def main(argv: Optional[List[str]] = None, out: TextIO = None, err: TextIO = None) -> int:
    out = out or sys.stdout
    err = err or sys.stderr
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.limit is not None and args.limit < 0:
        parser.error("--limit must be non-negative")

    if args.scan and not Path(args.scan).is_dir():
        parser.error(f"--scan: not a directory: {args.scan}")

    try:
        config = _config_from_args(args, load_configuration())
    except ValueError as e:
        parser.error(str(e))

    setup_logging(config)
    init_logger = logging.getLogger('refscout.init')
    for issue in validate_configuration(config):
        init_logger.warning(issue[len("WARNING: "):])

    git_available, git_error = validate_git_availability()
    if not git_available:
        err.write(f"Error: {git_error}\n")
        return EXIT_FATAL

    if args.scan:
        return _run_scan(args, config, out, err)
    return _run_single(args, config, out, err)


if __name__ == "__main__":
    sys.exit(main())
