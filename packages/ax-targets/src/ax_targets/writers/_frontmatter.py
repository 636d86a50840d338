from __future__ import annotations

from typing import Any

import yaml


def with_frontmatter(meta: dict[str, Any], body: str) -> str:
    """Render ``---`` delimited YAML frontmatter followed by *body* verbatim."""
    header = yaml.safe_dump(
        meta,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=10_000,
    )
    return f"---\n{header}---\n\n{body}"


def one_line(text: str) -> str:
    return " ".join(text.split())
