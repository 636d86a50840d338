"""Tests for the ax command line."""
from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest
from ax_cli.main import app
from ax_core.config import AxConfig
from ax_schema.registry import RegistryClient
from typer.testing import CliRunner

if TYPE_CHECKING:
    from pathlib import Path

runner = CliRunner()


@pytest.fixture
def agent_file(tmp_path: Path, code_cleaner_yaml: bytes) -> Path:
    path = tmp_path / "code-cleaner.yaml"
    path.write_bytes(code_cleaner_yaml)
    return path


class TestVersion:
    def test_version(self) -> None:
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "ax 1.2.1" in result.output


class TestInstall:
    def test_install_local_file(self, tmp_path: Path, agent_file: Path) -> None:
        dest = tmp_path / "dest"
        result = runner.invoke(app, [
            "install", str(agent_file), "-t", "claude", "-t", "cursor", "--dest", str(dest),
        ])
        assert result.exit_code == 0, result.output
        assert "code-cleaner installed" in result.output
        assert (dest / ".claude/agents/code-cleaner.md").is_file()
        assert (dest / ".cursor/rules/code-cleaner-rules.mdc").is_file()

    def test_default_target_from_config(self, tmp_path: Path, agent_file: Path) -> None:
        AxConfig(default_target="codex").save()
        dest = tmp_path / "dest"
        result = runner.invoke(app, ["install", str(agent_file), "--dest", str(dest)])
        assert result.exit_code == 0, result.output
        assert (dest / ".codex/skills/rules/SKILL.md").is_file()

    def test_unknown_target(self, tmp_path: Path, agent_file: Path) -> None:
        dest = tmp_path / "dest"
        result = runner.invoke(app, [
            "install", str(agent_file), "-t", "claude", "-t", "vscode", "--dest", str(dest),
        ])
        assert result.exit_code == 1
        assert "Unknown target 'vscode'" in result.output
        assert not dest.exists()

    def test_invalid_definition(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.yaml"
        bad.write_text("name: [unclosed\n")
        result = runner.invoke(app, ["install", str(bad), "--dest", str(tmp_path / "dest")])
        assert result.exit_code == 1
        assert "Invalid agent definition" in result.output

    def test_conflict_exits_non_zero(self, tmp_path: Path, github_helper_yaml: bytes) -> None:
        dest = tmp_path / "dest"
        (dest / ".claude").mkdir(parents=True)
        (dest / ".claude/mcp.json").write_text('{"mcpServers": {"github": {"command": "gh"}}}')
        source = tmp_path / "gh.yaml"
        source.write_bytes(github_helper_yaml)

        result = runner.invoke(app, ["install", str(source), "--dest", str(dest)])

        assert result.exit_code == 1
        assert "Conflict" in result.output
        assert "hand-authored" in result.output

    def test_uninstall(self, tmp_path: Path, agent_file: Path) -> None:
        dest = tmp_path / "dest"
        runner.invoke(app, ["install", str(agent_file), "--dest", str(dest)])

        result = runner.invoke(app, ["uninstall", "code-cleaner", "--dest", str(dest)])

        assert result.exit_code == 0, result.output
        assert "Uninstalled" in result.output
        assert not (dest / ".claude/agents/code-cleaner.md").exists()

    def test_uninstall_nothing_recorded(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["uninstall", "ghost", "--dest", str(tmp_path)])
        assert result.exit_code == 0
        assert "Nothing recorded" in result.output


class TestList:
    def test_lists_registry_agents(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=[
                {"name": "code-cleaner", "version": "1.0.0", "description": "Tidy", "author": "ax"},
            ])

        def make_client(base_url: str) -> RegistryClient:
            return RegistryClient(base_url, client=httpx.Client(transport=httpx.MockTransport(handler)))

        monkeypatch.setattr("ax_cli.commands.registry.RegistryClient", make_client)
        result = runner.invoke(app, ["list"])

        assert result.exit_code == 0, result.output
        assert "code-cleaner" in result.output
        assert "1 agent(s) available" in result.output

    def test_registry_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        def make_client(base_url: str) -> RegistryClient:
            return RegistryClient(base_url, client=httpx.Client(transport=httpx.MockTransport(handler)))

        monkeypatch.setattr("ax_cli.commands.registry.RegistryClient", make_client)
        result = runner.invoke(app, ["list"])

        assert result.exit_code == 1
        assert "Registry error" in result.output


class TestInit:
    def test_non_interactive_picks_detected_editor(self, isolated_home: Path) -> None:
        (isolated_home / ".cursor").mkdir()

        result = runner.invoke(app, ["init", "-y"])

        assert result.exit_code == 0, result.output
        assert AxConfig.from_toml(isolated_home / ".ax/config.toml").default_target == "cursor"

    def test_defaults_to_claude(self, isolated_home: Path) -> None:
        result = runner.invoke(app, ["init", "--non-interactive"])
        assert result.exit_code == 0, result.output
        assert AxConfig.from_toml(isolated_home / ".ax/config.toml").default_target == "claude"

    def test_keeps_existing_settings(self, isolated_home: Path) -> None:
        AxConfig(registry_url="https://mirror.example").save()
        runner.invoke(app, ["init", "-y"])
        config = AxConfig.from_toml(isolated_home / ".ax/config.toml")
        assert config.registry_url == "https://mirror.example"
