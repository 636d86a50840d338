"""Concrete target writers."""
from __future__ import annotations

from ax_targets.writers.claude import ClaudeWriter
from ax_targets.writers.codex import CodexWriter
from ax_targets.writers.cursor import CursorWriter

__all__ = ["ClaudeWriter", "CodexWriter", "CursorWriter"]
