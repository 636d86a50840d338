"""Atomic file writes and read helpers for target files."""
from __future__ import annotations

import os
import tempfile
from pathlib import Path


def atomic_write(file_path: Path | str, content: str | bytes) -> None:
    """Write content atomically using tempfile + rename pattern."""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = "wb" if isinstance(content, bytes) else "w"

    # Same directory so os.replace stays on one filesystem
    fd, tmp_path = tempfile.mkstemp(
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
    )

    try:
        if mode == "w":
            with os.fdopen(fd, mode, encoding="utf-8", newline="") as f:
                f.write(content)
        else:
            with os.fdopen(fd, mode) as f:
                f.write(content)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def read_bytes_or_none(file_path: Path | str) -> bytes | None:
    """Return file contents, or None when the file does not exist."""
    try:
        return Path(file_path).read_bytes()
    except FileNotFoundError:
        return None
