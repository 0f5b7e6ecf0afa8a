"""Loading and saving the user's configuration file."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

CONFIG_NAME = "config"
CONFIG_EXTENSIONS = (".yaml", ".yml")

DEFAULTS: dict[str, Any] = {
    "comments_language": "Русский",
    "api_key": "",
    "max_retry": 5,
    "channels": 10,
}


class ConfigError(Exception):
    """Raised when the configuration cannot be read or written."""


def default_config_dir() -> Path:
    """Return the directory that holds the configuration by default."""
    try:
        home = Path.home()
    except RuntimeError as exc:
        raise ConfigError(f"could not determine home directory: {exc}") from exc
    return home / ".aifmt"


def _find_config(directories: list[Path]) -> Path | None:
    for directory in directories:
        for ext in CONFIG_EXTENSIONS:
            candidate = directory / f"{CONFIG_NAME}{ext}"
            if candidate.is_file():
                return candidate
    return None


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"could not read configuration {path}: {exc}") from exc
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"could not parse configuration {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"configuration {path} is not a mapping")
    return {str(key).lower(): value for key, value in data.items()}


@dataclass
class Config:
    """Key/value settings stored in a YAML file. Keys are case-insensitive."""

    path: Path
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def load(cls, config_dir: str | Path | None = None) -> "Config":
        """Read the configuration, creating it with defaults when none is found.

        The configuration directory is searched first, then the current
        working directory.
        """
        directory = Path(config_dir) if config_dir is not None else default_config_dir()
        if not directory.exists():
            try:
                directory.mkdir(mode=0o700)
            except OSError as exc:
                raise ConfigError(
                    f"could not create configuration directory {directory}: {exc}"
                ) from exc

        found = _find_config([directory, Path.cwd()])
        if found is not None:
            return cls(path=found, data=_read_yaml(found))

        path = directory / f"{CONFIG_NAME}.yaml"
        print(f"Configuration file not found, creating a new one in {path}")
        config = cls(path=path, data=dict(DEFAULTS))
        config.save()
        return config

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under a key, or the default."""
        return self.data.get(key.lower(), default)

    def set(self, key: str, value: Any) -> None:
        """Store a value under a key."""
        self.data[key.lower()] = value

    def save(self) -> None:
        """Write the configuration back to its file."""
        text = yaml.safe_dump(self.data, allow_unicode=True, sort_keys=True)
        try:
            self.path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"could not write configuration {self.path}: {exc}") from exc