"""Codex writer.

Layout under the target root (``.codex``)::

    skills/<skill>/SKILL.md        frontmatter (name, description) + content
    config.toml                    ``[mcp_servers.<tool>]`` tables (merged)

Codex has no agent identity format, so the identity is reported as
skipped. Skill directories are not agent-scoped; the ownership record
keeps two agents from overwriting each other's skill. ``config.toml``
also holds the user's own Codex settings, which are kept as written.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ax_targets import merge
from ax_targets.base import BaseWriter, Rendered
from ax_targets.writers._frontmatter import one_line, with_frontmatter

if TYPE_CHECKING:
    from ax_schema.types import AgentDefinition, McpTool, Skill


class CodexWriter(BaseWriter):
    target_id = "codex"
    display_name = "Codex"
    default_dirname = ".codex"
    mcp_filename = "config.toml"
    mcp_format = merge.TOML_FORMAT

    def render_identity(self, definition: AgentDefinition) -> Rendered:
        return Rendered.skipped("", "Codex has no agent identity format")

    def render_skill(self, definition: AgentDefinition, skill: Skill) -> Rendered:
        description = skill.description or definition.description or f"Skill: {skill.name}"
        meta = {"name": skill.name, "description": one_line(description)}
        return Rendered(f"skills/{skill.name}/SKILL.md", with_frontmatter(meta, skill.content))

    def render_server(self, tool: McpTool) -> dict[str, Any]:
        # Empty args/env are left out, as Codex's own docs write them
        server: dict[str, Any] = {"command": tool.command}
        if tool.args:
            server["args"] = list(tool.args)
        if tool.env:
            server["env"] = dict(tool.env)
        return server
