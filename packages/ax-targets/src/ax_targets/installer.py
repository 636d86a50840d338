"""Install orchestration: definition source → validated model → writers.

Everything that can be checked before touching the filesystem is
checked first (source resolution, parsing, validation, target lookup).
Writers then run one at a time in the requested order; the first
failure stops the run and is reported together with what already
succeeded.
"""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from ax_core.errors import PartialInstallError, ProjectionError
from ax_core.logging import get_logger
from ax_core.paths import install_base
from ax_schema.parser import parse

if TYPE_CHECKING:
    from ax_schema.registry import RegistryClient
    from ax_schema.types import AgentDefinition

    from ax_targets.base import TargetWriter
    from ax_targets.registry import TargetRegistry
    from ax_targets.types import TargetProjectionResult

logger = get_logger("targets.installer")


def _dedupe(target_ids: list[str]) -> list[str]:
    return list(dict.fromkeys(target_ids))


class AgentInstaller:
    """Installs agent definitions into one or more targets."""

    def __init__(
        self,
        targets: TargetRegistry,
        registry_client: RegistryClient | None = None,
    ) -> None:
        self._targets = targets
        self._client = registry_client

    def load_definition(self, source: str | Path) -> AgentDefinition:
        """Resolve *source* to bytes and parse them.

        An existing file path is read from disk; anything else is
        treated as a registry name.

        Raises:
            ParseError, ValidationError: From the schema parser.
            NotFoundError, NetworkError: From the registry client.
            ValueError: If *source* is a name and no client is configured.
        """
        path = Path(source).expanduser()
        if path.is_file():
            logger.info("Loading agent definition from %s", path)
            return parse(path.read_bytes())

        if self._client is None:
            msg = f"'{source}' is not a file and no registry client is configured"
            raise ValueError(msg)

        fetched = self._client.fetch_agent(str(source))
        logger.info("Resolved '%s' to %s (version %s)", source, fetched.url, fetched.version)
        return parse(fetched.raw)

    def install(
        self,
        source: str | Path,
        target_ids: list[str],
        destination_root: Path | None = None,
        global_: bool = False,
    ) -> list[TargetProjectionResult]:
        """Install the agent at *source* into each target in *target_ids*.

        *destination_root* is the base directory target roots are made
        under (``<base>/.claude`` etc.); when omitted it is the home
        directory for a global install and the working directory
        otherwise.

        Raises:
            ValueError: If *target_ids* is empty.
            UnknownTargetError: Before any writer runs.
            PartialInstallError: When a writer fails; carries the
                results of writers that completed.
        """
        writers = self.select(target_ids)
        definition = self.load_definition(source)
        return self.install_definition(definition, writers, destination_root, global_)

    def install_definition(
        self,
        definition: AgentDefinition,
        writers: list[TargetWriter],
        destination_root: Path | None = None,
        global_: bool = False,
    ) -> list[TargetProjectionResult]:
        base = install_base(global_, destination_root)
        completed: list[TargetProjectionResult] = []

        for writer in writers:
            root = base / writer.default_dirname
            try:
                completed.append(writer.project(definition, root, global_))
            except ProjectionError as exc:
                logger.warning("Projection into %s failed: %s", writer.target_id, exc)
                raise PartialInstallError(
                    writer.target_id, completed, exc.partial, exc,
                ) from exc

        return completed

    def uninstall(
        self,
        agent_name: str,
        target_ids: list[str],
        destination_root: Path | None = None,
        global_: bool = False,
    ) -> list[TargetProjectionResult]:
        """Remove *agent_name*'s files and owned MCP servers from each target."""
        writers = self.select(target_ids)
        base = install_base(global_, destination_root)
        completed: list[TargetProjectionResult] = []

        for writer in writers:
            root = base / writer.default_dirname
            try:
                completed.append(writer.uninstall(agent_name, root, global_))
            except ProjectionError as exc:
                raise PartialInstallError(
                    writer.target_id, completed, exc.partial, exc,
                ) from exc

        return completed

    def select(self, target_ids: list[str]) -> list[TargetWriter]:
        """Resolve target ids to writers, collapsing duplicates in order.

        Raises:
            ValueError: If *target_ids* is empty.
            UnknownTargetError: For the first unknown id.
        """
        if not target_ids:
            msg = "At least one target is required"
            raise ValueError(msg)
        return self._targets.resolve(_dedupe(target_ids))
