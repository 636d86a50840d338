"""agent.yaml parser: turns raw bytes into a validated AgentDefinition."""
from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import yaml
from ax_core.errors import ParseError, ValidationError

from ax_schema.types import AgentDefinition, Identity, McpTool, Skill
from ax_schema.validator import AgentValidator

if TYPE_CHECKING:
    from pathlib import Path

_NUMERIC_TAGS = frozenset({"tag:yaml.org,2002:int", "tag:yaml.org,2002:float"})


class _TextLoader(yaml.SafeLoader):
    """SafeLoader that keeps numeric-looking plain scalars as written.

    ``version: 1.10`` stays ``"1.10"`` instead of becoming the float 1.1.
    """


_TextLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag not in _NUMERIC_TAGS]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def parse(raw: bytes) -> AgentDefinition:
    """Parse an agent.yaml document into an AgentDefinition.

    Parsing is all-or-nothing: either every invariant holds on the
    returned definition or an exception is raised. Unknown keys, at the
    top level and inside ``skills``/``mcp`` entries, are ignored.

    Args:
        raw: The document bytes (UTF-8 YAML).

    Returns:
        A fully validated AgentDefinition.

    Raises:
        ParseError: If the bytes are not UTF-8, not valid YAML, or the
            document is not a mapping.
        ValidationError: If the document is well-formed but violates
            the schema (types, required fields, duplicate names).
    """
    meta = _load_mapping(raw)
    definition = _build(meta)
    AgentValidator().validate_strict(definition)
    return definition


def parse_file(path: Path) -> AgentDefinition:
    """Read *path* and :func:`parse` its bytes."""
    return parse(path.read_bytes())


def _load_mapping(raw: bytes) -> dict[str, Any]:
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        msg = f"Agent definition is not valid UTF-8: {exc}"
        raise ParseError(msg) from exc

    # A leading BOM is part of the encoding, not the document
    text = text.removeprefix("\ufeff")

    try:
        result = yaml.load(text, Loader=_TextLoader)
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in agent definition: {exc}"
        raise ParseError(msg) from exc
    except RecursionError as exc:
        msg = "Agent definition is nested too deeply"
        raise ParseError(msg) from exc

    if not isinstance(result, dict):
        kind = "empty document" if result is None else type(result).__name__
        msg = f"Agent definition must be a mapping, got {kind}"
        raise ParseError(msg)

    return result


def _build(meta: dict[str, Any]) -> AgentDefinition:
    identity_raw = meta.get("identity")
    identity = None if identity_raw is None else _build_identity(identity_raw)

    skills_raw = _as_list(meta.get("skills"), "skills")
    mcp_raw = _as_list(meta.get("mcp"), "mcp")

    return AgentDefinition(
        name=_as_text(meta.get("name"), "name"),
        version=_as_text(meta.get("version"), "version"),
        description=_as_text(meta.get("description"), "description"),
        author=_as_text(meta.get("author"), "author"),
        identity=identity,
        skills=tuple(
            _build_skill(entry, i) for i, entry in enumerate(skills_raw)
        ),
        mcp=tuple(_build_tool(entry, i) for i, entry in enumerate(mcp_raw)),
    )


def _build_identity(raw: Any) -> Identity:
    if not isinstance(raw, dict):
        msg = f"'identity' must be a mapping, got {type(raw).__name__}"
        raise ValidationError(msg)

    prompt = raw.get("system_prompt")
    if prompt is None or prompt == "":
        msg = "'identity' is present but 'identity.system_prompt' is missing"
        raise ValidationError(msg)
    if not isinstance(prompt, str):
        msg = "'identity.system_prompt' must be text"
        raise ValidationError(msg)

    return Identity(
        system_prompt=prompt,
        model=_as_optional_text(raw.get("model"), "identity.model"),
        icon=_as_optional_text(raw.get("icon"), "identity.icon"),
    )


def _build_skill(raw: Any, index: int) -> Skill:
    where = f"skills[{index}]"
    if not isinstance(raw, dict):
        msg = f"'{where}' must be a mapping, got {type(raw).__name__}"
        raise ValidationError(msg)

    content = raw.get("content", "")
    if not isinstance(content, str):
        msg = f"'{where}.content' must be text"
        raise ValidationError(msg)

    return Skill(
        name=_as_text(raw.get("name"), f"{where}.name"),
        content=content,
        description=_as_optional_text(
            raw.get("description"), f"{where}.description"
        ),
    )


def _build_tool(raw: Any, index: int) -> McpTool:
    where = f"mcp[{index}]"
    if not isinstance(raw, dict):
        msg = f"'{where}' must be a mapping, got {type(raw).__name__}"
        raise ValidationError(msg)

    args = _as_list(raw.get("args"), f"{where}.args")
    for arg in args:
        if not isinstance(arg, str):
            msg = f"'{where}.args' must contain only strings, got {arg!r}"
            raise ValidationError(msg)

    env = raw.get("env")
    if env is None:
        env = {}
    if not isinstance(env, dict):
        msg = f"'{where}.env' must be a mapping"
        raise ValidationError(msg)
    for key, value in env.items():
        if not isinstance(key, str) or not isinstance(value, str):
            msg = f"'{where}.env' must map strings to strings, got {key!r}: {value!r}"
            raise ValidationError(msg)

    return McpTool(
        name=_as_text(raw.get("name"), f"{where}.name"),
        command=_as_text(raw.get("command"), f"{where}.command"),
        args=tuple(args),
        env=MappingProxyType(dict(env)),
        setup_url=_as_optional_text(raw.get("setup_url"), f"{where}.setup_url"),
    )


def _as_list(value: Any, field_name: str) -> list[Any]:
    """Return *value* as a list; None means an empty list."""
    if value is None:
        return []
    if not isinstance(value, list):
        msg = f"'{field_name}' must be a list, got {type(value).__name__}"
        raise ValidationError(msg)
    return value


def _as_text(value: Any, field_name: str) -> str:
    """Return *value* as text; None becomes the empty string.

    Numbers already arrive as their source text (see :class:`_TextLoader`),
    so anything else that is not a string (booleans, dates, explicitly
    tagged values, collections) is rejected rather than reformatted.
    """
    if value is None:
        return ""
    if not isinstance(value, str):
        msg = f"'{field_name}' must be text, got {type(value).__name__}"
        raise ValidationError(msg)
    return value


def _as_optional_text(value: Any, field_name: str) -> str | None:
    if value is None:
        return None
    return _as_text(value, field_name)
