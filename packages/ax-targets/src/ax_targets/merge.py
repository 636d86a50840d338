"""MCP server merge: folds one agent's servers into a shared config file.

The merge file maps server name to spec under one key: ``mcpServers`` in
a JSON document (Claude, Cursor) or ``[mcp_servers.<name>]`` tables in a
TOML document (Codex). Other top-level keys, and servers that belong to
other agents, are carried through untouched.
"""
from __future__ import annotations

import json
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import tomlkit
from ax_core.errors import MergeConflictError, WriteError
from ax_core.fs import atomic_write, read_bytes_or_none
from tomlkit.exceptions import TOMLKitError

from ax_targets.types import FileAction

if TYPE_CHECKING:
    from pathlib import Path

    from ax_targets.ownership import OwnershipRecord

SERVERS_KEY = "mcpServers"
TOML_SERVERS_KEY = "mcp_servers"


@dataclass(slots=True)
class MergePlan:
    """The fully computed outcome of a merge, before anything is written."""

    servers: dict[str, Any]
    owners: dict[str, str]
    actions: list[tuple[str, FileAction]] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return any(action is not FileAction.UNCHANGED for _, action in self.actions)


def plan_merge(
    existing: dict[str, Any],
    owners: dict[str, str],
    agent: str,
    entries: list[tuple[str, dict[str, Any]]],
) -> MergePlan:
    """Compute the merged server map for *agent*'s *entries*.

    Per entry: absent → CREATED and owned by *agent*; identical →
    UNCHANGED (ownership untouched); different → UPDATED only when
    *agent* already owns it.

    Raises:
        MergeConflictError: If a differing entry is owned by another
            agent or has no owner at all. Inputs are not modified.
    """
    servers = dict(existing)
    new_owners = dict(owners)
    plan = MergePlan(servers=servers, owners=new_owners)

    for name, spec in entries:
        if name not in servers:
            servers[name] = spec
            new_owners[name] = agent
            plan.actions.append((name, FileAction.CREATED))
        elif servers[name] == spec:
            plan.actions.append((name, FileAction.UNCHANGED))
        elif owners.get(name) == agent:
            servers[name] = spec
            plan.actions.append((name, FileAction.UPDATED))
        else:
            raise MergeConflictError(name, owners.get(name), agent, kind="mcp")

    return plan


def plan_removal(
    existing: dict[str, Any],
    record: OwnershipRecord,
    agent: str,
) -> tuple[dict[str, Any], list[str]]:
    """Drop the servers *agent* owns; return (servers, removed names)."""
    servers = dict(existing)
    removed = [name for name in record.tools_of(agent) if name in servers]
    for name in removed:
        del servers[name]
    return servers, removed


def read_document(path: Path) -> dict[str, Any]:
    """Read a merge file; absent or blank means an empty document.

    Raises:
        WriteError: If the file holds something other than a JSON
            object with an object-valued ``mcpServers``. Such a file is
            never overwritten.
    """
    raw = read_bytes_or_none(path)
    if raw is None or not raw.strip():
        return {}

    try:
        document = json.loads(raw)
    except ValueError as exc:
        msg = f"Existing MCP config {path} is not valid JSON; refusing to overwrite it"
        raise WriteError(msg) from exc

    if not isinstance(document, dict):
        msg = f"Existing MCP config {path} is not a JSON object; refusing to overwrite it"
        raise WriteError(msg)

    servers = document.get(SERVERS_KEY, {})
    if not isinstance(servers, dict):
        msg = f"'{SERVERS_KEY}' in {path} is not an object; refusing to overwrite it"
        raise WriteError(msg)

    return document


def servers_of(document: dict[str, Any]) -> dict[str, Any]:
    return dict(document.get(SERVERS_KEY, {}))


def write_document(path: Path, document: dict[str, Any], servers: dict[str, Any]) -> None:
    updated = dict(document)
    updated[SERVERS_KEY] = servers
    atomic_write(path, json.dumps(updated, indent=2, ensure_ascii=False) + "\n")


# ── TOML documents ──────────────────────────────────────────────────


def read_toml_document(path: Path) -> tomlkit.TOMLDocument:
    """Read a TOML merge file, keeping comments and layout for rewriting.

    Raises:
        WriteError: If the file is not valid TOML or ``mcp_servers`` is
            not a table. Such a file is never overwritten.
    """
    raw = read_bytes_or_none(path)
    if raw is None or not raw.strip():
        return tomlkit.document()

    try:
        document = tomlkit.parse(raw.decode("utf-8"))
    except (UnicodeDecodeError, TOMLKitError) as exc:
        msg = f"Existing MCP config {path} is not valid TOML; refusing to overwrite it"
        raise WriteError(msg) from exc

    servers = document.get(TOML_SERVERS_KEY, {})
    if not isinstance(servers, Mapping) or not all(
        isinstance(spec, Mapping) for spec in servers.values()
    ):
        msg = f"'{TOML_SERVERS_KEY}' in {path} is not a table of tables; refusing to overwrite it"
        raise WriteError(msg)

    return document


def toml_servers_of(document: tomlkit.TOMLDocument) -> dict[str, Any]:
    """Plain-Python copy of the ``mcp_servers`` tables, for comparison."""
    servers = document.get(TOML_SERVERS_KEY)
    if servers is None:
        return {}
    return {str(name): spec.unwrap() for name, spec in servers.items()}


def write_toml_document(
    path: Path,
    document: tomlkit.TOMLDocument,
    servers: dict[str, Any],
) -> None:
    """Rewrite only the server tables that changed; everything else keeps its text."""
    current = toml_servers_of(document)
    if TOML_SERVERS_KEY not in document:
        document[TOML_SERVERS_KEY] = tomlkit.table(is_super_table=True)
    table = document[TOML_SERVERS_KEY]

    for name in current:
        if name not in servers:
            del table[name]
    for name, spec in servers.items():
        if current.get(name) != spec:
            table[name] = _server_table(spec)

    atomic_write(path, tomlkit.dumps(document))


def _server_table(spec: dict[str, Any]) -> tomlkit.items.Table:
    server = tomlkit.table()
    for key, value in spec.items():
        if isinstance(value, dict):
            sub = tomlkit.table()
            sub.update(value)
            server[key] = sub
        else:
            server[key] = value
    return server


# ── Formats ─────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class ServerFileFormat:
    """How a writer reads, inspects, and rewrites its merge file."""

    read: Callable[[Path], Any]
    servers_of: Callable[[Any], dict[str, Any]]
    write: Callable[[Path, Any, dict[str, Any]], None]


JSON_FORMAT = ServerFileFormat(read_document, servers_of, write_document)
TOML_FORMAT = ServerFileFormat(read_toml_document, toml_servers_of, write_toml_document)
