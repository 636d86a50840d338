from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ax_targets.types import TargetProjectionResult


class AxError(Exception):
    """Base exception for all ax errors."""


# ── Definition Errors ────────────────────────────────────────────────

class DefinitionError(AxError):
    """Base for agent definition errors. Raised before any write."""


class ParseError(DefinitionError):
    """Raw bytes are not a well-formed agent document."""


class ValidationError(DefinitionError):
    """Agent document is well-formed but semantically invalid."""


# ── Target Errors ────────────────────────────────────────────────────

class TargetError(AxError):
    """Base for target selection and projection errors."""


class UnknownTargetError(TargetError):
    """No writer is registered under the requested target id."""

    def __init__(self, target_id: str, known: list[str]) -> None:
        self.target_id = target_id
        self.known = known
        msg = (
            f"Unknown target '{target_id}'"
            f" (available: {', '.join(known) or 'none'})"
        )
        super().__init__(msg)


class ProjectionError(TargetError):
    """A writer failed part-way through a projection.

    ``partial`` holds the records of files the writer had already
    handled before the failure, so callers can report them.
    """

    def __init__(
        self,
        message: str,
        partial: TargetProjectionResult | None = None,
    ) -> None:
        super().__init__(message)
        self.partial = partial


class WriteError(ProjectionError):
    """Filesystem failure, lock timeout, or unreadable target config."""


class MergeConflictError(ProjectionError):
    """A shared entry belongs to another agent or to the user."""

    def __init__(
        self,
        name: str,
        owner: str | None,
        agent: str,
        kind: str = "mcp",
        partial: TargetProjectionResult | None = None,
    ) -> None:
        self.name = name
        self.owner = owner
        self.agent = agent
        self.kind = kind
        label = "MCP server" if kind == "mcp" else "file"
        held_by = f"agent '{owner}'" if owner else "no ax agent (hand-authored)"
        msg = (
            f"{label} '{name}' is owned by {held_by};"
            f" refusing to overwrite it for '{agent}'"
        )
        super().__init__(msg, partial)


# ── Registry Errors ──────────────────────────────────────────────────

class RegistryError(AxError):
    """Base for registry client errors."""


class NotFoundError(RegistryError):
    """Agent is not present in the registry."""


class NetworkError(RegistryError):
    """Registry could not be reached or answered with an error."""


# ── Install Errors ───────────────────────────────────────────────────

class InstallError(AxError):
    """Base for orchestrator failures after writers started running."""


class PartialInstallError(InstallError):
    """A writer failed; earlier writers' results still stand."""

    def __init__(
        self,
        failed_target: str,
        completed: list[TargetProjectionResult],
        partial: TargetProjectionResult | None,
        cause: ProjectionError,
    ) -> None:
        self.failed_target = failed_target
        self.completed = completed
        self.partial = partial
        self.cause = cause
        msg = f"Install into '{failed_target}' failed: {cause}"
        super().__init__(msg)


# ── Config Errors ────────────────────────────────────────────────────

class ConfigError(AxError):
    """Invalid or unwritable configuration."""
