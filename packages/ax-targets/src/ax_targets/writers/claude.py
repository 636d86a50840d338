"""Claude Code writer.

Layout under the target root (``.claude``)::

    agents/<agent>.md              identity as markdown with YAML frontmatter
    skills/<agent>/<skill>.md      one file per skill, content verbatim
    mcp.json                       shared MCP servers (merged)
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ax_targets.base import BaseWriter, Rendered
from ax_targets.writers._frontmatter import one_line, with_frontmatter

if TYPE_CHECKING:
    from ax_schema.types import AgentDefinition, McpTool, Skill

_DEFAULT_MODEL = "sonnet"
_DEFAULT_ICON = "🤖"
_MODEL_FAMILIES = ("sonnet", "opus", "haiku")


def short_model(model: str | None) -> str:
    """Map a full model id to the family alias Claude Code expects.

    ``claude-3-5-sonnet-latest`` → ``sonnet``; unknown ids pass through.
    """
    if not model:
        return _DEFAULT_MODEL
    for family in _MODEL_FAMILIES:
        if family in model:
            return family
    return model


class ClaudeWriter(BaseWriter):
    target_id = "claude"
    display_name = "Claude Code"
    default_dirname = ".claude"
    mcp_filename = "mcp.json"

    def render_identity(self, definition: AgentDefinition) -> Rendered:
        relpath = f"agents/{definition.name}.md"
        identity = definition.identity
        if identity is None:
            return Rendered.skipped(relpath, "definition has no identity")

        meta: dict[str, Any] = {
            "name": definition.name,
            "description": one_line(definition.description),
            "model": short_model(identity.model),
            "icon": identity.icon or _DEFAULT_ICON,
        }
        if definition.skills:
            meta["skills"] = ", ".join(s.name for s in definition.skills)

        return Rendered(relpath, with_frontmatter(meta, identity.system_prompt))

    def render_skill(self, definition: AgentDefinition, skill: Skill) -> Rendered:
        return Rendered(f"skills/{definition.name}/{skill.name}.md", skill.content)

    def render_server(self, tool: McpTool) -> dict[str, Any]:
        return {"type": "stdio", **tool.spec()}
