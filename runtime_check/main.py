"""Command line entry point: run an app's startup checks outside the app.

    runtime-check run myapp.checks:Checks
    runtime-check run myapp.checks:CHECKS --json --no-log
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from collections.abc import Sequence
from importlib.metadata import PackageNotFoundError, version
from typing import Any

from rich.console import Console
from rich.panel import Panel

from runtime_check.check import Check
from runtime_check.config import settings
from runtime_check.gate import RuntimeCheck, run
from runtime_check.render import render_outcome, report_to_json

console = Console()

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


class TargetError(Exception):
    """The ``module:attr`` target can't be turned into a list of checks."""


def load_checks(target: str) -> list[Check]:
    """Resolve ``module:attr`` to a list of checks.

    ``attr`` may be a ``RuntimeCheck`` subclass or instance, a list of checks,
    a single check, or a zero-arg callable returning one of those.
    """
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise TargetError(f"Expected module:attribute, got {target!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise TargetError(f"Cannot import {module_name}: {e}") from e

    obj: Any = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise TargetError(f"{module_name} has no attribute {attr}") from None

    try:
        if isinstance(obj, type) and issubclass(obj, RuntimeCheck):
            obj = obj()
        if isinstance(obj, RuntimeCheck):
            obj = obj.checks()
        elif callable(obj) and not isinstance(obj, Check):
            obj = obj()
    except Exception as e:
        raise TargetError(f"Building checks from {target} failed: {type(e).__name__}: {e}") from e

    if isinstance(obj, Check):
        return [obj]
    if isinstance(obj, (list, tuple)) and all(isinstance(c, Check) for c in obj):
        return list(obj)
    raise TargetError(f"{target} did not resolve to checks, got {type(obj).__name__}")


def run_checks(target: str, log: bool = True, as_json: bool = False) -> int:
    """Run the checks at ``target`` and print the report. Returns the exit code."""
    try:
        checks = load_checks(target)
    except TargetError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return EXIT_USAGE

    if as_json:
        outcome = run(checks, log=log)
        print(report_to_json(outcome))
        return EXIT_OK if outcome.ok else EXIT_FAILED

    console.print(Panel(f"Running {len(checks)} checks from {target}", title="RuntimeCheck", style="bold blue"))
    outcome = run(checks, log=log)
    console.print(render_outcome(outcome))
    return EXIT_OK if outcome.ok else EXIT_FAILED


def package_version() -> str:
    try:
        return version("runtime-check")
    except PackageNotFoundError:
        return "unknown"


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="runtime-check", description="Run startup system checks")
    sub = parser.add_subparsers(dest="command")

    run_parser = sub.add_parser("run", help="Run the checks from module:attribute")
    run_parser.add_argument("target", help="e.g. myapp.checks:Checks")
    run_parser.add_argument("--no-log", action="store_true", help="Don't log the per-check trace")
    run_parser.add_argument("--json", action="store_true", help="Print the report as JSON")

    sub.add_parser("version", help="Show the installed version")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    if args.command == "run":
        return run_checks(args.target, log=not args.no_log, as_json=args.json)
    if args.command == "version":
        console.print(package_version())
        return EXIT_OK

    parser.print_help()
    return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
