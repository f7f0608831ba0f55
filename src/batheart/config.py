"""Configuration system for batheart."""

import os
from dataclasses import dataclass
from pathlib import Path

import tomlkit

APP_NAME = "batheart"


class ConfigError(ValueError):
    """Config file exists but can't be used."""


def _xdg_dir(env_var: str, fallback: Path) -> Path:
    value = os.environ.get(env_var)
    if value:
        return Path(value) / APP_NAME
    return fallback / APP_NAME


@dataclass(frozen=True)
class Config:
    """Main configuration container.

    Instances are never mutated. A reload builds a new Config and the daemon
    swaps its reference to it.
    """

    threshold: int = 80  # Capacity % at which conservation mode is reconsidered

    @property
    def config_dir(self) -> Path:
        """Configuration directory."""
        return _xdg_dir("XDG_CONFIG_HOME", Path.home() / ".config")

    @property
    def config_path(self) -> Path:
        """Path to config file."""
        return self.config_dir / "config.toml"

    @property
    def state_dir(self) -> Path:
        """State directory for logs."""
        return _xdg_dir("XDG_STATE_HOME", Path.home() / ".local" / "state")

    @property
    def log_path(self) -> Path:
        """Daemon log path."""
        return self.state_dir / "daemon.log"

    def save(self, path: Path | None = None) -> None:
        """Save config to TOML file, creating the directory if needed."""
        path = path or self.config_path
        path.parent.mkdir(parents=True, exist_ok=True)

        doc = tomlkit.document()
        doc.add(tomlkit.comment("Battery % at which conservation mode kicks in"))
        doc.add("threshold", self.threshold)

        path.write_text(tomlkit.dumps(doc))

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Parse config from a TOML file, from scratch.

        Missing keys fall back to the dataclass defaults. A missing file
        raises FileNotFoundError; callers that want a default file should use
        load_or_create().

        Raises:
            ConfigError: If the file can't be parsed or threshold is invalid.
        """
        defaults = cls()
        path = path or defaults.config_path

        with open(path) as f:
            try:
                data = tomlkit.load(f)
            except tomlkit.exceptions.TOMLKitError as e:
                raise ConfigError(f"Failed to parse config file {path}: {e}") from e

        threshold = data.get("threshold", defaults.threshold)
        # bool is an int subclass; `threshold = true` is a typo, not 1
        if isinstance(threshold, bool) or not isinstance(threshold, int):
            raise ConfigError(f"threshold must be an integer, got {threshold!r}")
        if threshold < 0:
            raise ConfigError(f"threshold must be >= 0, got {threshold}")

        return cls(threshold=int(threshold))


def load_or_create(path: Path | None = None) -> tuple[Config, bool]:
    """Load config, writing a default file first if none exists.

    Returns:
        (config, created) where created is True if a default file was written.

    Raises:
        ConfigError: Config file is malformed.
        OSError: Config file or directory can't be read or created.
    """
    path = path or Config().config_path
    try:
        return Config.load(path), False
    except FileNotFoundError:
        config = Config()
        config.save(path)
        return config, True
