"""ax core: shared errors, config, paths, and logging."""
from __future__ import annotations

from ax_core._version import __version__
from ax_core.config import DEFAULT_REGISTRY_URL, AxConfig
from ax_core.errors import (
    AxError,
    ConfigError,
    DefinitionError,
    InstallError,
    MergeConflictError,
    NetworkError,
    NotFoundError,
    ParseError,
    PartialInstallError,
    ProjectionError,
    RegistryError,
    TargetError,
    UnknownTargetError,
    ValidationError,
    WriteError,
)
from ax_core.logging import get_logger, setup_logging

__all__ = [
    # Config
    "DEFAULT_REGISTRY_URL",
    "AxConfig",
    # Errors
    "AxError",
    "ConfigError",
    "DefinitionError",
    "InstallError",
    "MergeConflictError",
    "NetworkError",
    "NotFoundError",
    "ParseError",
    "PartialInstallError",
    "ProjectionError",
    "RegistryError",
    "TargetError",
    "UnknownTargetError",
    "ValidationError",
    "WriteError",
    # Version
    "__version__",
    # Logging
    "get_logger",
    "setup_logging",
]
