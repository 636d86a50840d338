from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from ax_core.config import DEFAULT_REGISTRY_URL, AxConfig
from ax_core.errors import ConfigError

if TYPE_CHECKING:
    from pathlib import Path


class TestConfig:
    def test_default_config(self) -> None:
        config = AxConfig()
        assert config.default_target == "claude"
        assert config.registry_url == DEFAULT_REGISTRY_URL
        assert config.verbose is False

    def test_from_toml_missing_file(self) -> None:
        config = AxConfig.from_toml("/nonexistent/path/config.toml")
        assert config == AxConfig()

    def test_from_toml_ignores_unknown_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text('default_target = "cursor"\nlock_timeout_seconds = 3\ncolour = "red"\n')
        config = AxConfig.from_toml(path)
        assert config.default_target == "cursor"
        assert config.lock_timeout_seconds == 3.0

    def test_invalid_toml_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("not = [toml")
        assert AxConfig.from_toml(path) == AxConfig()

    def test_project_overrides_global(self, isolated_home: Path, tmp_path: Path) -> None:
        (isolated_home / ".ax").mkdir()
        (isolated_home / ".ax/config.toml").write_text(
            'default_target = "cursor"\nregistry_url = "https://global.example"\n'
        )
        project = tmp_path / "project"
        (project / ".ax").mkdir(parents=True)
        (project / ".ax/config.toml").write_text('default_target = "codex"\n')

        config = AxConfig.load(project)

        assert config.default_target == "codex"
        assert config.registry_url == "https://global.example"

    def test_save_round_trip(self, isolated_home: Path) -> None:
        config = AxConfig(default_target="cursor", registry_url='https://x.example/"q"', verbose=True)
        path = config.save()
        assert path == isolated_home / ".ax/config.toml"
        assert AxConfig.from_toml(path) == config

    def test_save_failure_is_config_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("")
        with pytest.raises(ConfigError):
            AxConfig().save(blocker / "config.toml")
