from __future__ import annotations

import textwrap
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME and the working directory at scratch dirs for every test."""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.chdir(work)
    return home


@pytest.fixture
def code_cleaner_yaml() -> bytes:
    return textwrap.dedent("""\
        name: code-cleaner
        version: 1.0.0
        description: Keeps code tidy
        author: ax
        identity:
          system_prompt: Be thorough.
          model: claude-3-5-sonnet-latest
        skills:
          - name: rules
            content: Use snake_case.
    """).encode("utf-8")


@pytest.fixture
def github_helper_yaml() -> bytes:
    return textwrap.dedent("""\
        name: gh-helper
        version: 0.2.0
        description: Works with GitHub
        identity:
          system_prompt: You manage GitHub issues.
        skills:
          - name: triage
            content: Label every issue.
        mcp:
          - name: github
            command: npx
            args: ["-y", "@modelcontextprotocol/server-github"]
            env:
              GITHUB_TOKEN: "${GITHUB_TOKEN}"
            setup_url: https://github.com/settings/tokens
    """).encode("utf-8")
