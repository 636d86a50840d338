"""`ax install` / `ax uninstall`: project an agent into editor targets."""
from __future__ import annotations

from pathlib import Path

import typer
from ax_core.config import AxConfig
from ax_core.errors import (
    DefinitionError,
    MergeConflictError,
    PartialInstallError,
    RegistryError,
    UnknownTargetError,
)
from ax_schema.dependencies import check_dependencies
from ax_schema.registry import RegistryClient
from ax_targets.installer import AgentInstaller
from ax_targets.registry import default_registry
from rich.console import Console
from rich.panel import Panel

from ax_cli.rendering import print_results, result_table, summarize

console = Console()

_NEXT_STEPS: dict[str, str] = {
    "claude": "Restart Claude Code, then pick the agent with /agents",
    "cursor": "Reload the Cursor window; the rules apply to new chats",
    "codex": "Start a new Codex session to pick up the skills",
}


def _report_partial(exc: PartialInstallError) -> None:
    if exc.completed:
        console.print("[green]Completed before the failure:[/green]")
        print_results(console, exc.completed)
    if exc.partial is not None and exc.partial.files:
        console.print(result_table(exc.partial, title=f"{exc.failed_target} (partial)"))
        console.print()

    cause = exc.cause
    if isinstance(cause, MergeConflictError):
        owner = f"agent '{cause.owner}'" if cause.owner else "a hand-authored entry"
        console.print(
            f"[red]Conflict:[/red] {cause.kind} [bold]{cause.name}[/bold]"
            f" in {exc.failed_target} belongs to {owner}."
        )
        console.print("[dim]Nothing was overwritten. Uninstall the other agent or rename the entry.[/dim]")
    else:
        console.print(f"[red]Error:[/red] {exc}")


def install_command(
    agent: str = typer.Argument(help="Registry name or path to an agent YAML file"),
    target: list[str] | None = typer.Option(
        None, "--target", "-t", help="Target editor (repeatable; default from config)"
    ),
    global_: bool = typer.Option(
        False, "--global", "-g", help="Install into the home directory instead of the project"
    ),
    dest: Path | None = typer.Option(
        None, "--dest", help="Base directory for target roots (overrides --global location)"
    ),
) -> None:
    """Install an agent into one or more editors."""
    config = AxConfig.load()
    target_ids = target or [config.default_target]

    with RegistryClient(config.registry_url) as client:
        installer = AgentInstaller(
            default_registry(config.lock_timeout_seconds), registry_client=client,
        )
        try:
            writers = installer.select(target_ids)
            with console.status(f"Loading [bold]{agent}[/bold]..."):
                definition = installer.load_definition(agent)
        except UnknownTargetError as exc:
            console.print(f"[red]Error:[/red] {exc}")
            raise typer.Exit(1) from None
        except DefinitionError as exc:
            console.print(f"[red]Invalid agent definition:[/red] {exc}")
            raise typer.Exit(1) from None
        except RegistryError as exc:
            console.print(f"[red]Registry error:[/red] {exc}")
            raise typer.Exit(1) from None
        except ValueError as exc:
            console.print(f"[red]Error:[/red] {exc}")
            raise typer.Exit(1) from None

    console.print(
        f"[cyan]→[/cyan] Installing [bold]{definition.name}[/bold] v{definition.version}"
        f" into {', '.join(w.target_id for w in writers)}\n"
    )

    for missing in check_dependencies(definition):
        tools = ", ".join(missing.tools)
        console.print(
            f"[yellow]![/yellow] [bold]{missing.command}[/bold] not found on PATH"
            f" (needed by {tools})"
        )
        if missing.hint:
            console.print(f"  [dim]{missing.hint}[/dim]")

    try:
        results = installer.install_definition(definition, writers, dest, global_)
    except PartialInstallError as exc:
        _report_partial(exc)
        raise typer.Exit(1) from None

    print_results(console, results)

    setup_urls = [t for t in definition.mcp if t.setup_url]
    for tool in setup_urls:
        console.print(f"[cyan]→[/cyan] {tool.name} needs setup: {tool.setup_url}")

    steps = "\n".join(
        f"[cyan]→[/cyan] {_NEXT_STEPS[w.target_id]}"
        for w in writers
        if w.target_id in _NEXT_STEPS
    )
    console.print(Panel(
        f"[green]✓[/green] {summarize(results)}\n{steps}".rstrip(),
        title=f"{definition.name} installed",
        border_style="green",
    ))


def uninstall_command(
    agent: str = typer.Argument(help="Name of the installed agent"),
    target: list[str] | None = typer.Option(
        None, "--target", "-t", help="Target editor (repeatable; default from config)"
    ),
    global_: bool = typer.Option(
        False, "--global", "-g", help="Uninstall from the home directory"
    ),
    dest: Path | None = typer.Option(
        None, "--dest", help="Base directory the agent was installed under"
    ),
) -> None:
    """Remove an agent's files and MCP servers from one or more editors."""
    config = AxConfig.load()
    installer = AgentInstaller(default_registry(config.lock_timeout_seconds))

    try:
        results = installer.uninstall(agent, target or [config.default_target], dest, global_)
    except (UnknownTargetError, ValueError) as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from None
    except PartialInstallError as exc:
        _report_partial(exc)
        raise typer.Exit(1) from None

    print_results(console, results)
    if not any(r.files for r in results):
        console.print(f"[yellow]![/yellow] Nothing recorded for [bold]{agent}[/bold].")
        return
    console.print(f"[green]✓[/green] Uninstalled [bold]{agent}[/bold]: {summarize(results)}")
