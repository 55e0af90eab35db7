"""Rich rendering of check reports for the CLI."""

from __future__ import annotations

import json
from typing import Any

from rich.text import Text
from rich.tree import Tree

from .check import CheckFault, Outcome, Report, Status

STYLES = {
    Status.PASSED: "bold green",
    Status.IGNORED: "yellow",
    Status.FAILED: "bold red",
}


def render_outcome(outcome: Outcome, title: str = "RuntimeCheck") -> Tree:
    """Tree of the report: ignored checks in yellow, failures in red with their reason."""
    tree = Tree(Text(f"{title}: {outcome.status.value}", style=STYLES[outcome.status]))
    if not outcome.report:
        tree.add(Text("all checks passed", style="dim"))
    _add_entries(tree, outcome.report)
    return tree


def _add_entries(tree: Tree, report: Report) -> None:
    for name, entry in report.items():
        if entry is Status.IGNORED:
            tree.add(Text(f"{name}: ignored", style=STYLES[Status.IGNORED]))
        elif isinstance(entry, Report):
            style = STYLES[Status.FAILED] if _has_failure(entry) else ""
            _add_entries(tree.add(Text(f"{name}", style=style)), entry)
        else:
            tree.add(Text(f"{name}: {_reason_text(entry)}", style=STYLES[Status.FAILED]))


def _has_failure(report: Report) -> bool:
    return any(
        _has_failure(entry) if isinstance(entry, Report) else entry is not Status.IGNORED
        for entry in report.values()
    )


def _reason_text(reason: Any) -> str:
    if isinstance(reason, CheckFault):
        return str(reason)
    if isinstance(reason, str):
        return reason
    return repr(reason)


def report_to_json(outcome: Outcome) -> str:
    """JSON document ``{"ok": ..., "report": ...}``. Faults become their short form."""
    return json.dumps(
        {"ok": outcome.ok, "status": outcome.status.value, "report": _jsonable(outcome.report)},
        indent=2,
        default=str,
    )


def _jsonable(report: Report) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for name, entry in report.items():
        if isinstance(entry, Report):
            out[name] = _jsonable(entry)
        elif isinstance(entry, Status):
            out[name] = entry.value
        elif isinstance(entry, (str, int, float, bool)) or entry is None:
            out[name] = entry
        else:
            out[name] = str(entry)
    return out
