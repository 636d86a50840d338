from __future__ import annotations

import typer
from ax_core import AxConfig, __version__
from ax_core.logging import setup_logging
from rich.console import Console

from ax_cli.commands.init import init_command
from ax_cli.commands.install import install_command, uninstall_command
from ax_cli.commands.registry import list_command

app = typer.Typer(
    name="ax",
    help="Write an agent once, install it into Claude Code, Cursor, or Codex.",
    no_args_is_help=True,
)

app.command("init")(init_command)
app.command("list")(list_command)
app.command("install")(install_command)
app.command("uninstall")(uninstall_command)


@app.callback()
def _root(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log every file action"
    ),
    log_json: bool = typer.Option(
        False, "--log-json", help="Write log lines to stderr as JSON"
    ),
) -> None:
    verbose = verbose or AxConfig.load().verbose
    setup_logging("DEBUG" if verbose else "WARNING", json_output=log_json)


@app.command()
def version() -> None:
    """Show the ax version."""
    Console().print(f"ax {__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
