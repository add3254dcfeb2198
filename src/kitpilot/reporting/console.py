"""Rich-powered console output."""

from __future__ import annotations

from datetime import datetime

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from kitpilot.history.views import current_stage_index, status_badge
from kitpilot.models import ApplicationRecord

_console = Console()

_BADGE_STYLES = {
    "rejected": "bold red",
    "hired": "bold green",
    "ghosted": "dim",
    "applied": "bold blue",
    "active": "bold cyan",
    "unknown": "yellow",
}


def _short_date(value: str | None) -> str:
    if not value:
        return "-"
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return value


def print_banner() -> None:
    """Display the startup banner."""
    _console.print(
        Panel.fit(
            "[bold cyan]KitPilot[/bold cyan]  Application Tracker",
            border_style="cyan",
        )
    )


def print_history(records: list[ApplicationRecord]) -> None:
    """Display the application list in the given order."""
    if not records:
        _console.print("[dim]No history yet. Saved applications will appear here.[/dim]")
        return

    table = Table(
        title=f"{len(records)} Applications", show_header=True, header_style="bold magenta"
    )
    table.add_column("ID", style="dim")
    table.add_column("Status")
    table.add_column("Company", style="cyan")
    table.add_column("Title")
    table.add_column("Applied", justify="right")
    table.add_column("Stage", justify="right")

    for record in records:
        badge = status_badge(record)
        style = _BADGE_STYLES.get(badge.style, "")
        idx = current_stage_index(record)
        table.add_row(
            escape(record.id),
            f"[{style}]{escape(badge.label)}[/{style}]" if style else escape(badge.label),
            escape(record.company),
            escape(record.title),
            _short_date(record.date),
            f"{idx + 1}/{len(record.stages)}" if idx >= 0 else f"-/{len(record.stages)}",
        )

    _console.print()
    _console.print(table)
    _console.print()


def print_record(record: ApplicationRecord) -> None:
    """Display one application's stage timeline and generated assets."""
    badge = status_badge(record)
    _console.print(
        f"[bold]{escape(record.title)}[/bold] at [cyan]{escape(record.company)}[/cyan]  "
        f"({escape(badge.label)}, applied {_short_date(record.date)})"
    )
    for idx, stage in enumerate(record.stages):
        if stage.current:
            marker = "[bold green]>[/bold green]"
        elif stage.completed:
            marker = "[green]x[/green]"
        else:
            marker = " "
        _console.print(f"  {marker} {idx:>2}  {escape(stage.label):<30} {_short_date(stage.date)}")

    missing = record.assets.missing()
    if missing:
        _console.print(
            "  [dim]Not generated yet:[/dim] " + ", ".join(t.value for t in missing)
        )
