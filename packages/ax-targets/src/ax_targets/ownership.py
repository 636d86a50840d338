"""Persisted ownership record for a target root.

Lives at ``<target root>/.ax-owners.json`` and answers two questions
for later installs: which agent put a given MCP server into the shared
merge file, and which files each agent wrote. Both are consulted and
updated under the target lock on every projection.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ax_core.errors import WriteError
from ax_core.fs import atomic_write, read_bytes_or_none

if TYPE_CHECKING:
    from pathlib import Path

OWNERS_FILENAME = ".ax-owners.json"
_FORMAT_VERSION = 1


@dataclass(slots=True)
class OwnershipRecord:
    target: str
    mcp: dict[str, str] = field(default_factory=dict)
    files: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def load(cls, root: Path, target: str) -> OwnershipRecord:
        """Read the record for *root*; a missing file is an empty record.

        Raises:
            WriteError: If the file exists but is not a valid record.
                The record is never silently reset, since that would
                hand every tracked entry over to the next installer.
        """
        path = root / OWNERS_FILENAME
        raw = read_bytes_or_none(path)
        if raw is None or not raw.strip():
            return cls(target=target)

        try:
            data = json.loads(raw)
        except ValueError as exc:
            msg = f"Ownership record {path} is not valid JSON; fix or remove it"
            raise WriteError(msg) from exc

        if not isinstance(data, dict):
            msg = f"Ownership record {path} must be a JSON object"
            raise WriteError(msg)

        mcp = data.get("mcp", {})
        files = data.get("files", {})
        if not _is_owner_map(mcp) or not _is_file_map(files):
            msg = f"Ownership record {path} has an unexpected shape; fix or remove it"
            raise WriteError(msg)

        return cls(
            target=str(data.get("target", target)),
            mcp=dict(mcp),
            files={agent: list(paths) for agent, paths in files.items()},
        )

    def to_json(self) -> str:
        data = {
            "version": _FORMAT_VERSION,
            "target": self.target,
            "mcp": dict(sorted(self.mcp.items())),
            "files": {
                agent: sorted(set(paths))
                for agent, paths in sorted(self.files.items())
                if paths
            },
        }
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    def save(self, root: Path) -> tuple[bool, bool]:
        """Write the record if its content changed.

        Returns:
            ``(existed, written)`` so callers can report the action.
        """
        path = root / OWNERS_FILENAME
        existing = read_bytes_or_none(path)
        content = self.to_json()
        if existing is not None and existing == content.encode("utf-8"):
            return True, False
        atomic_write(path, content)
        return existing is not None, True

    # ── Queries ─────────────────────────────────────────────────────

    def mcp_owner(self, tool: str) -> str | None:
        return self.mcp.get(tool)

    def file_owner(self, relpath: str) -> str | None:
        for agent, paths in self.files.items():
            if relpath in paths:
                return agent
        return None

    def files_of(self, agent: str) -> list[str]:
        return list(self.files.get(agent, []))

    def tools_of(self, agent: str) -> list[str]:
        return [tool for tool, owner in self.mcp.items() if owner == agent]

    # ── Mutations ───────────────────────────────────────────────────

    def claim_file(self, agent: str, relpath: str) -> None:
        paths = self.files.setdefault(agent, [])
        if relpath not in paths:
            paths.append(relpath)

    def release_agent(self, agent: str) -> None:
        self.files.pop(agent, None)
        for tool in self.tools_of(agent):
            del self.mcp[tool]


def _is_owner_map(value: object) -> bool:
    return isinstance(value, dict) and all(
        isinstance(owner, str) and owner for owner in value.values()
    )


def _is_file_map(value: object) -> bool:
    return isinstance(value, dict) and all(
        isinstance(paths, list) and all(isinstance(p, str) for p in paths)
        for paths in value.values()
    )
