"""ax targets: projecting agent definitions into editor-native layouts."""
from __future__ import annotations

from ax_targets.base import BaseWriter, Rendered, TargetWriter, write_file
from ax_targets.installer import AgentInstaller
from ax_targets.merge import MergePlan, plan_merge
from ax_targets.ownership import OWNERS_FILENAME, OwnershipRecord
from ax_targets.registry import TargetRegistry, default_registry
from ax_targets.types import (
    FileAction,
    FileRecord,
    ProjectionRecorder,
    TargetProjectionResult,
)
from ax_targets.writers import ClaudeWriter, CodexWriter, CursorWriter

__all__ = [
    "OWNERS_FILENAME",
    "AgentInstaller",
    "BaseWriter",
    "ClaudeWriter",
    "CodexWriter",
    "CursorWriter",
    "FileAction",
    "FileRecord",
    "MergePlan",
    "OwnershipRecord",
    "ProjectionRecorder",
    "Rendered",
    "TargetProjectionResult",
    "TargetRegistry",
    "TargetWriter",
    "default_registry",
    "plan_merge",
    "write_file",
]
