"""Checks that the commands an agent's MCP servers run exist on PATH."""
from __future__ import annotations

import shutil
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ax_schema.types import AgentDefinition

_INSTALL_HINTS: dict[str, str] = {
    "docker": "Install Docker: https://docs.docker.com/get-docker/",
    "cargo": "Install Rust: https://rustup.rs/",
    "npm": "Install Node.js: https://nodejs.org/",
    "npx": "Install Node.js: https://nodejs.org/",
    "python": "Install Python: https://www.python.org/downloads/",
    "python3": "Install Python: https://www.python.org/downloads/",
    "go": "Install Go: https://go.dev/dl/",
    "uv": "Install uv: pip install uv",
}


@dataclass(frozen=True, slots=True)
class MissingCommand:
    command: str
    tools: tuple[str, ...]
    hint: str | None = None


def install_hint(command: str) -> str | None:
    return _INSTALL_HINTS.get(command)


def check_dependencies(definition: AgentDefinition) -> list[MissingCommand]:
    """Return the MCP commands that are not available on PATH.

    Each missing command is reported once, with every tool that needs it.
    """
    needed: dict[str, list[str]] = {}
    for tool in definition.mcp:
        needed.setdefault(tool.command, []).append(tool.name)

    return [
        MissingCommand(command=cmd, tools=tuple(tools), hint=install_hint(cmd))
        for cmd, tools in needed.items()
        if shutil.which(cmd) is None
    ]
