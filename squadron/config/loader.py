"""Layered TOML configuration.

Layers are merged in order, later layers win:

1. ``default.toml``: required, checked into the repo
2. ``{SQUADRON_ENV}.toml``: per-environment overrides (development, test, production)
3. ``local.toml``: untracked operator overrides, e.g. a staging provisioning URL

``SQUADRON_*`` environment variables are applied on top by ``Settings``.
"""

import os
import tomllib
from pathlib import Path
from typing import Any

CONFIG_DIR_ENV = "SQUADRON_CONFIG_DIR"
ENVIRONMENT_ENV = "SQUADRON_ENV"
DEFAULT_ENVIRONMENT = "development"
LOCAL_OVERRIDES = "local.toml"


def get_environment() -> str:
    """Name of the active environment, lower-cased."""
    return os.environ.get(ENVIRONMENT_ENV, DEFAULT_ENVIRONMENT).strip().lower()


def get_config_dir() -> Path:
    """Locate the config directory.

    SQUADRON_CONFIG_DIR wins when set and must exist. Otherwise the nearest
    ``config/`` holding a ``default.toml``, searching from the working
    directory upwards.
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        path = Path(override)
        if not path.is_dir():
            raise FileNotFoundError(f"Config directory not found: {override}")
        return path

    cwd = Path.cwd()
    for directory in (cwd, *cwd.parents):
        candidate = directory / "config"
        if (candidate / "default.toml").is_file():
            return candidate
    return cwd / "config"


def load_toml(file_path: Path) -> dict[str, Any]:
    """Read one TOML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the TOML syntax is invalid
    """
    if not file_path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")
    with file_path.open("rb") as f:
        return tomllib.load(f)


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into a copy of base; tables merge, everything else is replaced."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def config_layers(config_dir: Path, environment: str) -> list[Path]:
    """Every layer file for an environment, lowest precedence first."""
    return [
        config_dir / "default.toml",
        config_dir / f"{environment}.toml",
        config_dir / LOCAL_OVERRIDES,
    ]


def load_config(
    config_dir: Path | None = None,
    environment: str | None = None,
) -> dict[str, Any]:
    """Load and merge every configuration layer that exists.

    Args:
        config_dir: Directory to read; located with get_config_dir when omitted
        environment: Environment layer to apply; SQUADRON_ENV when omitted

    Raises:
        FileNotFoundError: If default.toml is missing
    """
    config_dir = config_dir or get_config_dir()
    default, *overlays = config_layers(config_dir, environment or get_environment())

    if not default.is_file():
        raise FileNotFoundError(
            f"Default configuration file not found: {default}. "
            f"Create it or point {CONFIG_DIR_ENV} at a directory that has one."
        )

    config = load_toml(default)
    for layer in overlays:
        if layer.is_file():
            config = deep_merge(config, load_toml(layer))
    return config
