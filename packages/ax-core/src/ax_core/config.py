from __future__ import annotations

import tomllib
from dataclasses import asdict, dataclass
from pathlib import Path

from ax_core.errors import ConfigError
from ax_core.paths import ax_config_dir

DEFAULT_REGISTRY_URL = "https://raw.githubusercontent.com/ahmed6ww/ax-agents/main"


def _load_toml(path: Path) -> dict:
    """Load a TOML file, returning empty dict if missing or unreadable."""
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        return {}


def _toml_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


@dataclass(frozen=True, slots=True)
class AxConfig:
    """Top-level configuration, parsed from ``~/.ax/config.toml``."""
    default_target: str = "claude"
    registry_url: str = DEFAULT_REGISTRY_URL
    verbose: bool = False
    lock_timeout_seconds: float = 10.0

    @classmethod
    def from_toml(cls, path: Path | str) -> AxConfig:
        return cls._from_raw(_load_toml(Path(path)))

    @classmethod
    def load(cls, project_dir: Path | str | None = None) -> AxConfig:
        """Load config with global → project layering.

        Resolution order (later wins):
        1. Built-in defaults
        2. ~/.ax/config.toml (global)
        3. <project>/.ax/config.toml (project)
        """
        project_dir = Path.cwd() if project_dir is None else Path(project_dir)

        global_raw = _load_toml(ax_config_dir() / "config.toml")
        project_raw = _load_toml(project_dir / ".ax" / "config.toml")

        return cls._from_raw({**global_raw, **project_raw})

    @classmethod
    def _from_raw(cls, raw: dict) -> AxConfig:
        fields = cls.__dataclass_fields__
        picked = {k: v for k, v in raw.items() if k in fields}
        if "lock_timeout_seconds" in picked:
            picked["lock_timeout_seconds"] = float(picked["lock_timeout_seconds"])
        return cls(**picked)

    def save(self, path: Path | str | None = None) -> Path:
        """Write this config as TOML and return the path written."""
        target = Path(path) if path is not None else ax_config_dir() / "config.toml"
        lines = [f"{k} = {_toml_value(v)}" for k, v in asdict(self).items()]
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text("\n".join(lines) + "\n", encoding="utf-8")
        except OSError as exc:
            msg = f"Cannot write config to {target}: {exc}"
            raise ConfigError(msg) from exc
        return target
