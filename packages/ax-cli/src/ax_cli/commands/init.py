"""`ax init`: detect installed editors and write ~/.ax/config.toml."""
from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

import typer
from ax_core.config import AxConfig
from ax_core.errors import ConfigError
from ax_core.paths import (
    ax_config_dir,
    claude_config_dir,
    codex_config_dir,
    cursor_config_dir,
    vscode_available,
)
from InquirerPy import inquirer
from rich.console import Console
from rich.table import Table

console = Console()


@dataclass(frozen=True, slots=True)
class Detection:
    name: str
    target: str | None
    installed: bool
    location: Path | None = None


def detect_editors() -> list[Detection]:
    """Look for the editors ax knows about. Never raises."""
    cursor_dir = cursor_config_dir()
    if not cursor_dir.exists() and (Path.cwd() / ".cursor").exists():
        cursor_dir = Path.cwd() / ".cursor"

    return [
        Detection("Claude Code", "claude", claude_config_dir().exists(), claude_config_dir()),
        Detection("Cursor", "cursor", cursor_dir.exists(), cursor_dir),
        Detection("Codex", "codex", codex_config_dir().exists(), codex_config_dir()),
        Detection("VS Code", None, vscode_available()),
    ]


def choose_default_target(detections: list[Detection]) -> str:
    """First detected of claude, cursor; claude when neither is found."""
    for preferred in ("claude", "cursor"):
        if any(d.target == preferred and d.installed for d in detections):
            return preferred
    return "claude"


def init_command(
    non_interactive: bool = typer.Option(
        False, "--non-interactive", "-y", help="Accept the detected default target"
    ),
) -> None:
    """Initialize ax and detect installed editors."""
    console.print("[cyan]→[/cyan] Detecting installed editors...\n")
    detections = detect_editors()

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Editor", style="bold")
    table.add_column("Status")
    table.add_column("Location", style="dim")
    for d in detections:
        status = "[green]✓ detected[/green]" if d.installed else "[red]✗[/red] [dim]not found[/dim]"
        location = str(d.location) if d.installed and d.location else ""
        table.add_row(d.name, status, location)
    console.print(table)
    console.print()

    default_target = choose_default_target(detections)
    installed_targets = [d.target for d in detections if d.installed and d.target]
    if not non_interactive and len(installed_targets) > 1:
        default_target = inquirer.select(
            message="Default install target:",
            choices=installed_targets,
            default=default_target,
        ).execute()

    config_path = ax_config_dir() / "config.toml"
    config = replace(AxConfig.from_toml(config_path), default_target=default_target)
    try:
        written = config.save(config_path)
    except ConfigError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from None

    console.print(f"[green]✓[/green] Created configuration at [cyan]{written}[/cyan]")
    console.print(f"[green]✓[/green] Default target set to: [bold cyan]{default_target}[/bold cyan]")
    console.print()
    console.print("[green]ax initialized.[/green] Run [bold cyan]ax list[/bold cyan] to see available agents.")
