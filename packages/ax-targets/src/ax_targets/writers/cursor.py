"""Cursor writer.

Layout under the target root (``.cursor``)::

    rules/<agent>-identity.mdc     identity as an always-applied rule
    rules/<agent>-<skill>.mdc      one rule per skill
    mcp.json                       shared MCP servers (merged)

Rule files share one directory with every other agent's rules, hence
the agent-name prefix.
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from ax_targets.base import BaseWriter, Rendered
from ax_targets.writers._frontmatter import one_line

if TYPE_CHECKING:
    from ax_schema.types import AgentDefinition, Skill

_DEFAULT_ICON = "🤖"


def render_mdc(title: str, description: str, content: str) -> str:
    return (
        "---\n"
        f"description: {one_line(description)}\n"
        "globs: \n"
        "alwaysApply: true\n"
        "---\n"
        "\n"
        f"# {title}\n"
        "\n"
        f"{content}\n"
    )


class CursorWriter(BaseWriter):
    target_id = "cursor"
    display_name = "Cursor"
    default_dirname = ".cursor"
    mcp_filename = "mcp.json"

    def render_identity(self, definition: AgentDefinition) -> Rendered:
        relpath = _identity_relpath(definition.name)
        identity = definition.identity
        if identity is None:
            return Rendered.skipped(relpath, "definition has no identity")

        icon = identity.icon or _DEFAULT_ICON
        return Rendered(
            relpath,
            render_mdc(
                f"{icon} {definition.name} Agent",
                definition.description,
                identity.system_prompt,
            ),
        )

    def render_skill(self, definition: AgentDefinition, skill: Skill) -> Rendered:
        relpath = f"rules/{definition.name}-{skill.name}.mdc"
        if relpath == _identity_relpath(definition.name):
            return Rendered.skipped(relpath, "skill name collides with the identity rule")

        return Rendered(
            relpath,
            render_mdc(
                f"{definition.name} - {skill.name}",
                skill.description or f"Knowledge base for {definition.name} agent",
                skill.content,
            ),
        )


def _identity_relpath(agent: str) -> str:
    return f"rules/{agent}-identity.mdc"
