"""`ax list`: show the agents published in the registry."""
from __future__ import annotations

import typer
from ax_core.config import AxConfig
from ax_core.errors import RegistryError
from ax_schema.registry import RegistryClient
from rich.console import Console
from rich.table import Table

console = Console()

_DESCRIPTION_WIDTH = 40


def list_command() -> None:
    """List available agents from the registry."""
    config = AxConfig.load()

    with console.status("Fetching registry..."), RegistryClient(config.registry_url) as client:
        try:
            agents = client.fetch_index()
        except RegistryError as exc:
            console.print(f"[red]Registry error:[/red] {exc}")
            raise typer.Exit(1) from None

    if not agents:
        console.print("[yellow]![/yellow] No agents found in registry.")
        raise typer.Exit(0)

    table = Table(
        title="Available Agents",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("Name", style="green")
    table.add_column("Version", style="dim")
    table.add_column("Description", max_width=_DESCRIPTION_WIDTH)
    table.add_column("Author", style="dim")

    for agent in agents:
        table.add_row(agent.name, agent.version, agent.description, agent.author)

    console.print(table)
    console.print(f"\n[cyan]→[/cyan] [bold]{len(agents)}[/bold] agent(s) available")
    console.print("[cyan]→[/cyan] Install with: [bold cyan]ax install <agent-name>[/bold cyan]")
