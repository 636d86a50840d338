"""Projection result types shared by every target writer."""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path


class FileAction(enum.Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    REMOVED = "removed"


_CHANGING_ACTIONS = frozenset({FileAction.CREATED, FileAction.UPDATED, FileAction.REMOVED})


@dataclass(frozen=True, slots=True)
class FileRecord:
    """What happened to one file, or to one entry inside a merge file.

    ``entry`` names the logical entry (an MCP server) when ``path`` is a
    shared merge file; ``reason`` explains a SKIPPED action.
    """

    path: Path
    action: FileAction
    reason: str | None = None
    entry: str | None = None


@dataclass(frozen=True, slots=True)
class TargetProjectionResult:
    """Outcome of projecting one agent into one target."""

    target: str
    agent: str
    root: Path
    files: tuple[FileRecord, ...] = ()
    scope: str = "project"

    @property
    def changed(self) -> bool:
        return any(r.action in _CHANGING_ACTIONS for r in self.files)

    def with_action(self, action: FileAction) -> list[FileRecord]:
        return [r for r in self.files if r.action is action]


@dataclass(slots=True)
class ProjectionRecorder:
    """Collects records while a writer runs; frozen into a result at the end."""

    target: str
    agent: str
    root: Path
    scope: str = "project"
    records: list[FileRecord] = field(default_factory=list)

    def add(
        self,
        path: Path,
        action: FileAction,
        reason: str | None = None,
        entry: str | None = None,
    ) -> None:
        self.records.append(FileRecord(path=path, action=action, reason=reason, entry=entry))

    def result(self) -> TargetProjectionResult:
        return TargetProjectionResult(
            target=self.target,
            agent=self.agent,
            root=self.root,
            files=tuple(self.records),
            scope=self.scope,
        )
