"""Filesystem locations used by ax and by the editors it installs into."""
from __future__ import annotations

import shutil
from pathlib import Path


def ax_config_dir() -> Path:
    """The ax configuration directory (``~/.ax``)."""
    return Path.home() / ".ax"


def claude_config_dir() -> Path:
    return Path.home() / ".claude"


def cursor_config_dir() -> Path:
    return Path.home() / ".cursor"


def codex_config_dir() -> Path:
    return Path.home() / ".codex"


def vscode_available() -> bool:
    """VS Code has no config dir we write to, so detection goes by PATH."""
    return shutil.which("code") is not None


def install_base(global_: bool, dest: Path | str | None = None) -> Path:
    """Resolve the base directory that target roots are created under.

    An explicit *dest* wins; otherwise a global install lands under the
    home directory and a project install under the working directory.
    """
    if dest is not None:
        return Path(dest).expanduser().resolve()
    return Path.home() if global_ else Path.cwd()


def is_within(path: Path, parent: Path) -> bool:
    """Whether *path* resolves inside *parent* (symlinks followed)."""
    try:
        path.resolve().relative_to(parent.resolve())
    except ValueError:
        return False
    return True
