"""Agent definition types for the universal agent.yaml schema."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


def _empty_env() -> Mapping[str, str]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True)
class Identity:
    """The agent's brain: rendered verbatim as its system prompt."""

    system_prompt: str
    model: str | None = None
    icon: str | None = None


@dataclass(frozen=True, slots=True)
class Skill:
    """A named unit of knowledge text, projected to one file per target."""

    name: str
    content: str
    description: str | None = None


@dataclass(frozen=True, slots=True)
class McpTool:
    """A declared MCP server invocation."""

    name: str
    command: str
    args: tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=_empty_env)
    setup_url: str | None = None

    def spec(self) -> dict[str, object]:
        """The target-neutral server spec (command, args, env)."""
        return {
            "command": self.command,
            "args": list(self.args),
            "env": dict(self.env),
        }


@dataclass(frozen=True, slots=True)
class AgentDefinition:
    """A parsed, validated agent definition.

    Built once per install from raw bytes and never mutated; skills and
    MCP tools keep document order so file emission is deterministic.
    """

    name: str
    version: str
    description: str = ""
    author: str = ""
    identity: Identity | None = None
    skills: tuple[Skill, ...] = ()
    mcp: tuple[McpTool, ...] = ()


@dataclass(frozen=True, slots=True)
class AgentInfo:
    """Minimal agent info for registry listings."""

    name: str
    version: str
    description: str = ""
    author: str = ""

    @classmethod
    def from_definition(cls, definition: AgentDefinition) -> AgentInfo:
        return cls(
            name=definition.name,
            version=definition.version,
            description=definition.description,
            author=definition.author,
        )
