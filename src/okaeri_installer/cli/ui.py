"""Rich rendering helpers for the installer CLI."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from okaeri_installer.engine.log import LogSeverity, MergeLog
from okaeri_installer.engine.phases import Phase

_SEVERITY_STYLE: dict[LogSeverity, str] = {
    LogSeverity.INFO: "white",
    LogSeverity.ERROR: "red",
    LogSeverity.SUCCESS: "green",
}

_SEVERITY_SYMBOL: dict[LogSeverity, str] = {
    LogSeverity.INFO: "[cyan]○[/cyan]",
    LogSeverity.ERROR: "[red]●[/red]",
    LogSeverity.SUCCESS: "[green]●[/green]",
}


def render_merge_log(log: MergeLog, title: str) -> Tree:
    """Render log lines as a tree, nesting lines by their depth."""
    tree = Tree(f"[cyan]{title}[/cyan]", guide_style="grey50")
    branches: list[Tree] = [tree]
    for line in log:
        depth = min(line.depth, len(branches) - 1)
        parent = branches[depth]
        style = _SEVERITY_STYLE[line.severity]
        node = parent.add(f"{_SEVERITY_SYMBOL[line.severity]} [{style}]{escape(line.message)}[/{style}]")
        del branches[depth + 1 :]
        branches.append(node)
    return tree


def render_phases(history: list[Phase]) -> str:
    """One-line summary of the phases an operation went through."""
    parts = []
    for phase in history:
        if phase is Phase.FAILED:
            parts.append(f"[red]{phase.value}[/red]")
        elif phase is Phase.DONE:
            parts.append(f"[green]{phase.value}[/green]")
        else:
            parts.append(f"[bright_black]{phase.value}[/bright_black]")
    return " → ".join(parts)


def reasons_table(title: str, reasons: list[str]) -> Table:
    table = Table(title=title, show_header=False)
    table.add_column("Reason")
    for reason in reasons:
        table.add_row(escape(reason))
    return table


def print_errors(console: Console, errors: list[str]) -> None:
    for error in errors:
        console.print(f"[red]✗[/red] {escape(error)}")
