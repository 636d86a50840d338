"""Target registry: maps target ids to writer instances."""
from __future__ import annotations

from typing import TYPE_CHECKING

from ax_core.errors import UnknownTargetError
from ax_core.logging import get_logger

from ax_targets.base import DEFAULT_LOCK_TIMEOUT_SECONDS
from ax_targets.writers import ClaudeWriter, CodexWriter, CursorWriter

if TYPE_CHECKING:
    from ax_targets.base import TargetWriter

logger = get_logger("targets.registry")


class TargetRegistry:
    """Open set of target writers, selected at runtime by id.

    New targets register an instance; the id is taken from the writer.
    """

    def __init__(self) -> None:
        self._writers: dict[str, TargetWriter] = {}

    def register(self, writer: TargetWriter, *, replace: bool = False) -> None:
        target_id = writer.target_id
        if target_id in self._writers and not replace:
            msg = f"Target '{target_id}' is already registered"
            raise ValueError(msg)
        self._writers[target_id] = writer
        logger.debug("Registered target writer '%s'", target_id)

    def get(self, target_id: str) -> TargetWriter:
        try:
            return self._writers[target_id]
        except KeyError:
            raise UnknownTargetError(target_id, self.ids()) from None

    def resolve(self, target_ids: list[str]) -> list[TargetWriter]:
        """Look up every id, in order, before any of them is used.

        Raises:
            UnknownTargetError: For the first id with no writer.
        """
        return [self.get(target_id) for target_id in target_ids]

    def ids(self) -> list[str]:
        return list(self._writers)

    def __contains__(self, target_id: object) -> bool:
        return target_id in self._writers


def default_registry(
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT_SECONDS,
) -> TargetRegistry:
    """A registry holding the built-in Claude, Cursor, and Codex writers."""
    registry = TargetRegistry()
    for writer_cls in (ClaudeWriter, CursorWriter, CodexWriter):
        registry.register(writer_cls(lock_timeout=lock_timeout))
    return registry
