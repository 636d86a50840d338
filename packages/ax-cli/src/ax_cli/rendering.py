"""Rich rendering of projection results."""
from __future__ import annotations

from typing import TYPE_CHECKING

from ax_targets.types import FileAction
from rich.table import Table

if TYPE_CHECKING:
    from ax_targets.types import FileRecord, TargetProjectionResult
    from rich.console import Console

_ACTION_STYLES: dict[FileAction, str] = {
    FileAction.CREATED: "green",
    FileAction.UPDATED: "yellow",
    FileAction.UNCHANGED: "dim",
    FileAction.SKIPPED: "magenta",
    FileAction.REMOVED: "red",
}


def _display_path(record: FileRecord, result: TargetProjectionResult) -> str:
    try:
        rel = record.path.relative_to(result.root)
    except ValueError:
        return str(record.path)
    return str(rel) if str(rel) != "." else f"{result.root}"


def result_table(result: TargetProjectionResult, title: str | None = None) -> Table:
    table = Table(
        title=title or f"{result.target} ({result.scope}) → {result.root}",
        show_header=True,
        header_style="bold cyan",
        title_justify="left",
    )
    table.add_column("Action")
    table.add_column("Path")
    table.add_column("Entry / reason", style="dim")

    for record in result.files:
        style = _ACTION_STYLES[record.action]
        detail = record.entry or ""
        if record.reason:
            detail = f"{detail}: {record.reason}" if detail else record.reason
        table.add_row(
            f"[{style}]{record.action.value}[/{style}]",
            _display_path(record, result),
            detail,
        )
    return table


def print_results(console: Console, results: list[TargetProjectionResult]) -> None:
    for result in results:
        console.print(result_table(result))
        console.print()


def summarize(results: list[TargetProjectionResult]) -> str:
    counts: dict[FileAction, int] = {}
    for result in results:
        for record in result.files:
            counts[record.action] = counts.get(record.action, 0) + 1
    parts = [f"{count} {action.value}" for action, count in counts.items()]
    return ", ".join(parts) if parts else "nothing to do"
