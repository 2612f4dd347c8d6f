"""Shared configuration utilities."""

import os
from pathlib import Path
from typing import Callable, Generic, TypeVar

import yaml

T = TypeVar('T')

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_DIR = PROJECT_ROOT / "configs"


def get_config_dir() -> Path:
    """Return the config directory, honouring the CONFIG_DIR env var."""
    override = os.environ.get("CONFIG_DIR")
    return Path(override) if override else DEFAULT_CONFIG_DIR


def find_config_path(
    config_name: str | None,
    config_dir: Path,
    default_name: str = "prod",
    env_var: str | None = None,
) -> Path:
    """Find config file path, checking env var and defaults.

    Args:
        config_name: Name of config (without .yaml) or None for default
        config_dir: Directory containing config files
        default_name: Default config name if config_name is None
        env_var: Environment variable to check for config name

    Returns:
        Path to the config file

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    if config_name is None:
        config_name = os.environ.get(env_var, default_name) if env_var else default_name

    config_path = config_dir / f"{config_name}.yaml"
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    return config_path


def load_yaml(path: Path) -> dict:
    """Load YAML file and return dict (empty files load as {})."""
    with open(path) as f:
        return yaml.safe_load(f) or {}


def env_override(name: str, value: T, cast: Callable[[str], T]) -> T:
    """Return ``cast(os.environ[name])`` when set, else ``value``."""
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return value
    return cast(raw)


class ConfigSingleton(Generic[T]):
    """Generic config singleton manager.

    Module-level get/set/reset for a lazily loaded config; tests call
    ``set`` with a hand-built instance instead of touching YAML.

    Example:
        >>> _manager = ConfigSingleton(load_config)
        >>> get_config, set_config = _manager.get, _manager.set
    """

    def __init__(self, loader: Callable[[], T] | None = None):
        self._config: T | None = None
        self._loader = loader

    def get(self) -> T:
        """Get the config, loading it lazily if needed."""
        if self._config is None:
            if self._loader is None:
                raise RuntimeError("No config loaded and no loader set")
            self._config = self._loader()
        return self._config

    def set(self, config: T) -> None:
        """Set the config directly."""
        self._config = config

    def reset(self) -> None:
        """Reset the config, forcing reload on next get()."""
        self._config = None
