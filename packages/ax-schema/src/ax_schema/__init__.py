"""ax schema: the universal agent definition, its parser, and the registry client."""
from __future__ import annotations

from ax_schema.dependencies import MissingCommand, check_dependencies, install_hint
from ax_schema.parser import parse, parse_file
from ax_schema.registry import FetchedDefinition, RegistryClient
from ax_schema.types import AgentDefinition, AgentInfo, Identity, McpTool, Skill
from ax_schema.validator import AgentValidator, is_safe_name

__all__ = [
    "AgentDefinition",
    "AgentInfo",
    "AgentValidator",
    "FetchedDefinition",
    "Identity",
    "McpTool",
    "MissingCommand",
    "RegistryClient",
    "Skill",
    "check_dependencies",
    "install_hint",
    "is_safe_name",
    "parse",
    "parse_file",
]
