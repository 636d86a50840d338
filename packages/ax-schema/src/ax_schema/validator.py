"""Agent definition validation: checks the invariants of the universal schema."""
from __future__ import annotations

import re
from collections import Counter
from typing import TYPE_CHECKING

from ax_core.errors import ValidationError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from ax_schema.types import AgentDefinition

# Agent and skill names become file names under a target root
_SAFE_NAME_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")
_NAME_MAX_LENGTH = 128


def is_safe_name(name: str) -> bool:
    """Whether *name* can be used as a single path component."""
    return (
        bool(_SAFE_NAME_PATTERN.match(name))
        and ".." not in name
        and len(name) <= _NAME_MAX_LENGTH
    )


class AgentValidator:
    """Validates an AgentDefinition against the agent.yaml schema."""

    def validate(self, agent: AgentDefinition) -> list[str]:
        """Return a list of validation error messages.

        An empty list means the agent definition is valid.
        """
        errors: list[str] = []

        # Name checks
        if not agent.name:
            errors.append("Agent name is required.")
        elif not is_safe_name(agent.name):
            errors.append(
                f"Agent name must be letters, digits, '.', '_' or '-' "
                f"(max {_NAME_MAX_LENGTH}): '{agent.name}'."
            )

        if not agent.version:
            errors.append("Agent version is required.")

        if agent.identity is not None and not agent.identity.system_prompt:
            errors.append("Identity is present but has no system_prompt.")

        # Skills
        for index, skill in enumerate(agent.skills):
            if not skill.name:
                errors.append(f"Skill #{index + 1} has no name.")
            elif not is_safe_name(skill.name):
                errors.append(
                    f"Skill name must be letters, digits, '.', '_' or '-': "
                    f"'{skill.name}'."
                )
        errors.extend(
            f"Duplicate skill name: '{name}'."
            for name in _duplicates(s.name for s in agent.skills)
        )

        # MCP tools
        for index, tool in enumerate(agent.mcp):
            if not tool.name:
                errors.append(f"MCP entry #{index + 1} has no name.")
            if not tool.command:
                errors.append(
                    f"MCP entry '{tool.name or index + 1}' has no command."
                )
        errors.extend(
            f"Duplicate MCP name: '{name}'."
            for name in _duplicates(t.name for t in agent.mcp)
        )

        return errors

    def validate_strict(self, agent: AgentDefinition) -> None:
        """Validate and raise ValidationError if invalid.

        Raises:
            ValidationError: With all validation errors joined.
        """
        errors = self.validate(agent)
        if errors:
            combined = "; ".join(errors)
            msg = f"Agent '{agent.name or '<unnamed>'}' validation failed: {combined}"
            raise ValidationError(msg)


def _duplicates(names: Iterable[str]) -> list[str]:
    counts = Counter(n for n in names if n)
    return [name for name, count in counts.items() if count > 1]
