"""Target writer protocol and the shared projection machinery."""
from __future__ import annotations

import abc
import contextlib
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, runtime_checkable

from ax_core.errors import MergeConflictError, ProjectionError, WriteError
from ax_core.fs import atomic_write, read_bytes_or_none
from ax_core.logging import get_logger
from ax_core.paths import is_within
from filelock import FileLock, Timeout

from ax_targets import merge
from ax_targets.ownership import OWNERS_FILENAME, OwnershipRecord
from ax_targets.types import (
    FileAction,
    ProjectionRecorder,
    TargetProjectionResult,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from ax_schema.types import AgentDefinition, McpTool, Skill

logger = get_logger("targets")

LOCK_FILENAME = ".ax.lock"
DEFAULT_LOCK_TIMEOUT_SECONDS = 10.0


@runtime_checkable
class TargetWriter(Protocol):
    """Renders an agent definition into one editor's on-disk layout."""

    target_id: str
    display_name: str
    default_dirname: str

    def project(
        self,
        definition: AgentDefinition,
        destination_root: Path,
        global_: bool = False,
    ) -> TargetProjectionResult: ...

    def uninstall(
        self,
        agent_name: str,
        destination_root: Path,
        global_: bool = False,
    ) -> TargetProjectionResult: ...


@dataclass(frozen=True, slots=True)
class Rendered:
    """One file a writer wants on disk, or the reason it has none."""

    relpath: str
    content: str | None = None
    skip_reason: str | None = None

    @classmethod
    def skipped(cls, relpath: str, reason: str) -> Rendered:
        return cls(relpath=relpath, skip_reason=reason)


def write_file(path: Path, content: str) -> FileAction:
    """Write *content* unless the file already holds exactly those bytes."""
    encoded = content.encode("utf-8")
    existing = read_bytes_or_none(path)
    if existing == encoded:
        return FileAction.UNCHANGED
    atomic_write(path, encoded)
    return FileAction.CREATED if existing is None else FileAction.UPDATED


class BaseWriter(abc.ABC):
    """Shared projection flow; subclasses only decide what files look like.

    A projection runs under a per-root file lock: the ownership record
    is loaded, agent files are written, MCP servers are merged, and the
    record is saved. Identity and skill files are written before the
    merge, so a merge conflict leaves them in place.
    """

    target_id: ClassVar[str]
    display_name: ClassVar[str]
    default_dirname: ClassVar[str]
    mcp_filename: ClassVar[str]
    mcp_format: ClassVar[merge.ServerFileFormat] = merge.JSON_FORMAT

    def __init__(self, lock_timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS) -> None:
        self._lock_timeout = lock_timeout

    # ── Rendering hooks ─────────────────────────────────────────────

    @abc.abstractmethod
    def render_identity(self, definition: AgentDefinition) -> Rendered: ...

    @abc.abstractmethod
    def render_skill(self, definition: AgentDefinition, skill: Skill) -> Rendered: ...

    def render_server(self, tool: McpTool) -> dict[str, Any]:
        return tool.spec()

    # ── Operations ──────────────────────────────────────────────────

    def project(
        self,
        definition: AgentDefinition,
        destination_root: Path,
        global_: bool = False,
    ) -> TargetProjectionResult:
        """Project *definition* under *destination_root*.

        Raises:
            WriteError: On I/O failure, lock timeout, or an unreadable
                existing config. ``partial`` lists what was written.
            MergeConflictError: If a shared entry belongs to someone
                else. The merge file is left as it was.
        """
        root = Path(destination_root)
        recorder = ProjectionRecorder(
            target=self.target_id,
            agent=definition.name,
            root=root,
            scope="global" if global_ else "project",
        )

        try:
            root.mkdir(parents=True, exist_ok=True)
            with self._locked(root):
                record = OwnershipRecord.load(root, self.target_id)
                try:
                    self._emit(self.render_identity(definition), definition.name, root, record, recorder)
                    for skill in definition.skills:
                        self._emit(
                            self.render_skill(definition, skill),
                            definition.name, root, record, recorder,
                        )
                    self._merge_servers(definition, root, record, recorder)
                finally:
                    self._save_record(root, record, recorder)
        except ProjectionError as exc:
            exc.partial = recorder.result()
            raise
        except OSError as exc:
            msg = f"Failed writing {self.display_name} files under {root}: {exc}"
            raise WriteError(msg, partial=recorder.result()) from exc

        result = recorder.result()
        logger.info(
            "Projected '%s' into %s at %s (%d record(s), changed=%s)",
            definition.name, self.target_id, root, len(result.files), result.changed,
        )
        return result

    def uninstall(
        self,
        agent_name: str,
        destination_root: Path,
        global_: bool = False,
    ) -> TargetProjectionResult:
        """Remove everything the ownership record attributes to *agent_name*.

        Files and MCP servers owned by other agents, or by nobody, are
        left alone.
        """
        root = Path(destination_root)
        recorder = ProjectionRecorder(
            target=self.target_id,
            agent=agent_name,
            root=root,
            scope="global" if global_ else "project",
        )
        if not root.is_dir():
            return recorder.result()

        try:
            with self._locked(root):
                record = OwnershipRecord.load(root, self.target_id)
                if not record.files_of(agent_name) and not record.tools_of(agent_name):
                    return recorder.result()
                for relpath in record.files_of(agent_name):
                    path = root / relpath
                    if not is_within(path, root) or not path.is_file():
                        continue
                    path.unlink()
                    recorder.add(path, FileAction.REMOVED)
                    _prune_empty_dirs(path.parent, root)

                if record.tools_of(agent_name):
                    self._remove_servers(agent_name, root, record, recorder)

                record.release_agent(agent_name)
                self._save_record(root, record, recorder)
        except ProjectionError as exc:
            exc.partial = recorder.result()
            raise
        except OSError as exc:
            msg = f"Failed removing {self.display_name} files under {root}: {exc}"
            raise WriteError(msg, partial=recorder.result()) from exc

        logger.info("Uninstalled '%s' from %s at %s", agent_name, self.target_id, root)
        return recorder.result()

    # ── Internals ───────────────────────────────────────────────────

    @contextlib.contextmanager
    def _locked(self, root: Path) -> Iterator[None]:
        lock = FileLock(str(root / LOCK_FILENAME), timeout=self._lock_timeout)
        try:
            lock.acquire()
        except Timeout as exc:
            msg = (
                f"Timed out after {self._lock_timeout}s waiting for the"
                f" {self.display_name} lock at {root}"
            )
            raise WriteError(msg) from exc
        try:
            yield
        finally:
            lock.release()

    def _emit(
        self,
        rendered: Rendered,
        agent: str,
        root: Path,
        record: OwnershipRecord,
        recorder: ProjectionRecorder,
    ) -> None:
        path = root / rendered.relpath
        if rendered.skip_reason is not None or rendered.content is None:
            recorder.add(path, FileAction.SKIPPED, reason=rendered.skip_reason)
            return

        if not is_within(path, root):
            msg = f"Refusing to write outside {root}: {path}"
            raise WriteError(msg)

        owner = record.file_owner(rendered.relpath)
        if owner is not None and owner != agent:
            raise MergeConflictError(rendered.relpath, owner, agent, kind="file")

        action = write_file(path, rendered.content)
        record.claim_file(agent, rendered.relpath)
        recorder.add(path, action)
        logger.debug("%s %s", action.value, path)

    def _merge_servers(
        self,
        definition: AgentDefinition,
        root: Path,
        record: OwnershipRecord,
        recorder: ProjectionRecorder,
    ) -> None:
        if not definition.mcp:
            return

        fmt = self.mcp_format
        path = root / self.mcp_filename
        document = fmt.read(path)
        plan = merge.plan_merge(
            fmt.servers_of(document),
            record.mcp,
            definition.name,
            [(tool.name, self.render_server(tool)) for tool in definition.mcp],
        )
        if plan.changed:
            fmt.write(path, document, plan.servers)
        record.mcp = plan.owners

        for name, action in plan.actions:
            recorder.add(path, action, entry=name)
            logger.debug("%s MCP server '%s' in %s", action.value, name, path)

    def _remove_servers(
        self,
        agent_name: str,
        root: Path,
        record: OwnershipRecord,
        recorder: ProjectionRecorder,
    ) -> None:
        fmt = self.mcp_format
        path = root / self.mcp_filename
        document = fmt.read(path)
        servers, removed = merge.plan_removal(fmt.servers_of(document), record, agent_name)
        if removed:
            fmt.write(path, document, servers)
        for name in removed:
            recorder.add(path, FileAction.REMOVED, entry=name)

    def _save_record(
        self,
        root: Path,
        record: OwnershipRecord,
        recorder: ProjectionRecorder,
    ) -> None:
        existed, written = record.save(root)
        if not written:
            action = FileAction.UNCHANGED
        else:
            action = FileAction.UPDATED if existed else FileAction.CREATED
        recorder.add(root / OWNERS_FILENAME, action)


def _prune_empty_dirs(directory: Path, root: Path) -> None:
    """Remove *directory* and empty parents, stopping at *root*."""
    current = directory
    while current != root and is_within(current, root):
        try:
            current.rmdir()
        except OSError:
            return
        current = current.parent
