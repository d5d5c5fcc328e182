"""CLI entry point for running MCP test files."""

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any

from mcpt.config_loader import ConfigError, load_run_config
from mcpt.discovery import resolve_targets
from mcpt.interpreters import InterpreterRegistry
from mcpt.models.config import DEFAULT_EXCLUDE, DEFAULT_INCLUDE, RunConfig
from mcpt.models.result import RunSummary
from mcpt.orchestrator import TestOrchestrator
from mcpt.ordering import order_by_mtime
from mcpt.reporting import LogReporter, Reporter


async def run(
    targets: Sequence[str],
    config: RunConfig,
    *,
    reporter: Reporter,
    cwd: Path | None = None,
    interpreters: InterpreterRegistry | None = None,
) -> RunSummary:
    """Discover, order and run test files, returning the run totals.

    Never raises: any unexpected error is logged and reported as a degraded
    summary with one failure.
    """
    log = logging.getLogger("mcpt")

    try:
        discovery = resolve_targets(targets, config.include, config.exclude, cwd)
        if discovery.skipped:
            log.debug("Skipped %d unreadable path(s)", len(discovery.skipped))

        files = order_by_mtime(discovery.files)
        if not files:
            reporter.no_files()
            return RunSummary()

        reporter.files_discovered(files)

        orchestrator = TestOrchestrator(
            interpreters=interpreters or InterpreterRegistry.default(),
            reporter=reporter,
            timeout=config.timeout,
            color=config.color,
        )
        report = await orchestrator.run_tests(files)
    except Exception as e:
        log.error("💥 Error running tests: %s", e, exc_info=e if config.verbose else None)
        return RunSummary.degraded()

    return report.summary


def exit_code(summary: RunSummary) -> int:
    """Process exit code for a run: 1 if anything failed, else 0."""
    return 1 if summary.has_failures else 0


def get_version() -> str:
    """Installed version of mcpt, or 0.0.0 when running from a checkout."""
    try:
        return version("mcpt")
    except PackageNotFoundError:
        return "0.0.0"


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser.

    Option defaults are None so that only flags given explicitly override
    values from the config file.
    """
    parser = argparse.ArgumentParser(
        prog="mcpt",
        description="A CLI tool for running Model Context Protocol (MCP) tests",
    )
    parser.add_argument("files", nargs="*", help="Specific test files or patterns to run")
    parser.add_argument(
        "-v", "--version", action="version", version=f"%(prog)s {get_version()}"
    )
    parser.add_argument(
        "-e",
        "--exclude",
        default=None,
        help=f"Exclude paths matching the patterns, comma-separated "
        f"(default: {','.join(DEFAULT_EXCLUDE)})",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        dest="timeout_ms",
        type=int,
        default=None,
        help="Per-file timeout in milliseconds (default: 30000)",
    )
    parser.add_argument(
        "--pattern",
        dest="include",
        default=None,
        help=f"Test file pattern to match (default: {DEFAULT_INCLUDE})",
    )
    parser.add_argument(
        "--verbose", action="store_true", default=None, help="Show more detailed output"
    )
    parser.add_argument(
        "--no-color",
        dest="color",
        action="store_false",
        default=None,
        help="Disable colored output",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a YAML config file (default: ./mcpt.yaml if present)",
    )
    return parser


def config_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Extract the config-related options from parsed arguments."""
    return {
        "include": args.include,
        "exclude": args.exclude,
        "timeout_ms": args.timeout_ms,
        "verbose": args.verbose,
        "color": args.color,
    }


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
    )
    log = logging.getLogger("mcpt")

    try:
        config = load_run_config(args.config, config_overrides(args))
    except ConfigError as e:
        log.error("%s", e)
        sys.exit(1)

    if config.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    reporter = LogReporter(verbose=config.verbose, color=config.color)
    summary = asyncio.run(run(args.files, config, reporter=reporter))
    reporter.summary(summary)
    sys.exit(exit_code(summary))


if __name__ == "__main__":  # pragma: no cover
    main()
