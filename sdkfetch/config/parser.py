"""YAML configuration parser for sdkfetch.

This module provides parsing and validation for sdkfetch.yaml configuration files:

    version: 1
    install:
      destination: sdk
      temp_dir: null
      prune: [examples, docs]
      staged_extraction: false
      lock_timeout: 300
    download:
      timeout: 30
      max_redirects: 5
      retries: 0
    catalog: null

Relative paths are resolved against the project root.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional, Tuple

import yaml

from sdkfetch.core.exceptions import ConfigError

DEFAULT_CONFIG_NAME = "sdkfetch.yaml"
DEFAULT_PRUNE_DIRS = ("examples", "docs")

_INSTALL_KEYS = {"destination", "temp_dir", "prune", "staged_extraction", "lock_timeout"}
_DOWNLOAD_KEYS = {"timeout", "max_redirects", "retries"}
_TOP_LEVEL_KEYS = {"version", "install", "download", "catalog"}


@dataclass(frozen=True)
class InstallerConfig:
    """Complete sdkfetch configuration."""

    destination: Path = Path("sdk")
    temp_dir: Optional[Path] = None
    prune: Tuple[str, ...] = field(default=DEFAULT_PRUNE_DIRS)
    staged_extraction: bool = False
    lock_timeout: float = 300.0
    timeout: float = 30.0
    max_redirects: int = 5
    retries: int = 0
    catalog: Optional[Path] = None

    def override(self, **changes) -> "InstallerConfig":
        """Return a copy with the non-None values in changes applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def parse_config(config_path: Path, project_root: Optional[Path] = None) -> InstallerConfig:
    """
    Parse sdkfetch.yaml configuration file.

    Args:
        config_path: Path to sdkfetch.yaml
        project_root: Base for relative paths (default: the file's directory)

    Returns:
        Parsed and validated configuration

    Raises:
        ConfigError: If configuration is invalid
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax: {e}")

    if data is None:
        raise ConfigError("Configuration file is empty")

    root = Path(project_root) if project_root is not None else config_path.parent
    return _parse_and_validate(data, root)


def load_config(
    config_path: Optional[Path] = None, project_root: Optional[Path] = None
) -> InstallerConfig:
    """
    Load configuration, falling back to defaults.

    An explicitly given config_path must exist; otherwise
    <project_root>/sdkfetch.yaml is used when present.

    Raises:
        ConfigError: If configuration is invalid
    """
    root = Path(project_root) if project_root is not None else Path.cwd()

    if config_path is not None:
        return parse_config(Path(config_path), root)

    default_path = root / DEFAULT_CONFIG_NAME
    if default_path.exists():
        return parse_config(default_path, root)

    return InstallerConfig(destination=root / "sdk")


def _parse_and_validate(data: Any, root: Path) -> InstallerConfig:
    """Parse and validate configuration data."""
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping")

    unknown = set(data) - _TOP_LEVEL_KEYS
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    if data.get("version", 1) != 1:
        raise ConfigError(f"Unsupported version: {data['version']} (expected 1)")

    install = _section(data, "install", _INSTALL_KEYS)
    download = _section(data, "download", _DOWNLOAD_KEYS)

    prune = install.get("prune", list(DEFAULT_PRUNE_DIRS))
    if not isinstance(prune, list) or not all(isinstance(p, str) for p in prune):
        raise ConfigError("install.prune must be a list of directory names")

    catalog = data.get("catalog")
    temp_dir = install.get("temp_dir")

    return InstallerConfig(
        destination=root / _string(install.get("destination", "sdk"), "install.destination"),
        temp_dir=root / _string(temp_dir, "install.temp_dir") if temp_dir else None,
        prune=tuple(prune),
        staged_extraction=_bool(
            install.get("staged_extraction", False), "install.staged_extraction"
        ),
        lock_timeout=_number(install.get("lock_timeout", 300), "install.lock_timeout"),
        timeout=_number(download.get("timeout", 30), "download.timeout"),
        max_redirects=int(
            _number(download.get("max_redirects", 5), "download.max_redirects", integer=True)
        ),
        retries=int(_number(download.get("retries", 0), "download.retries", integer=True)),
        catalog=root / _string(catalog, "catalog") if catalog else None,
    )


def _section(data: dict, name: str, allowed: set) -> dict:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"'{name}' must be a mapping")

    unknown = set(section) - allowed
    if unknown:
        raise ConfigError(f"Unknown keys in '{name}': {', '.join(sorted(unknown))}")
    return section


def _string(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{name} must be a non-empty string")
    return value


def _bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{name} must be true or false")
    return value


def _number(value: Any, name: str, integer: bool = False) -> float:
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{name} must be a number")
    if integer and not isinstance(value, int):
        raise ConfigError(f"{name} must be an integer")
    if value < 0:
        raise ConfigError(f"{name} cannot be negative")
    return value
