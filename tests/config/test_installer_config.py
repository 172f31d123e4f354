"""
Tests for sdkfetch.yaml parsing.
"""

from pathlib import Path

import pytest

from sdkfetch.config.parser import (
    DEFAULT_PRUNE_DIRS,
    InstallerConfig,
    load_config,
    parse_config,
)
from sdkfetch.core.exceptions import ConfigError


def write_config(path: Path, content: str) -> Path:
    config_file = path / "sdkfetch.yaml"
    config_file.write_text(content, encoding="utf-8")
    return config_file


class TestParseConfig:
    """Test parse_config."""

    def test_full_config(self, tmp_path):
        """Test every option is read and paths resolve against the root."""
        config_file = write_config(
            tmp_path,
            """
version: 1
install:
  destination: vendor/aic-sdk
  temp_dir: .cache/tmp
  prune: [examples]
  staged_extraction: true
  lock_timeout: 10
download:
  timeout: 5.5
  max_redirects: 3
  retries: 2
catalog: catalogs/aic.yaml
""",
        )

        config = parse_config(config_file)

        assert config == InstallerConfig(
            destination=tmp_path / "vendor/aic-sdk",
            temp_dir=tmp_path / ".cache/tmp",
            prune=("examples",),
            staged_extraction=True,
            lock_timeout=10,
            timeout=5.5,
            max_redirects=3,
            retries=2,
            catalog=tmp_path / "catalogs/aic.yaml",
        )

    def test_defaults(self, tmp_path):
        """Test a minimal file gets default values."""
        config = parse_config(write_config(tmp_path, "version: 1\n"))

        assert config.destination == tmp_path / "sdk"
        assert config.prune == DEFAULT_PRUNE_DIRS
        assert config.max_redirects == 5
        assert config.retries == 0
        assert config.catalog is None
        assert config.staged_extraction is False

    def test_missing_file(self, tmp_path):
        """Test missing file raises ConfigError."""
        with pytest.raises(ConfigError, match="not found"):
            parse_config(tmp_path / "sdkfetch.yaml")

    def test_empty_file(self, tmp_path):
        """Test empty file raises ConfigError."""
        with pytest.raises(ConfigError, match="empty"):
            parse_config(write_config(tmp_path, ""))

    def test_invalid_yaml(self, tmp_path):
        """Test YAML syntax errors raise ConfigError."""
        with pytest.raises(ConfigError, match="Invalid YAML syntax"):
            parse_config(write_config(tmp_path, "install: [unclosed"))

    @pytest.mark.parametrize(
        "content,message",
        [
            ("version: 2\n", "Unsupported version"),
            ("mirror: x\n", "Unknown configuration keys: mirror"),
            ("install:\n  dest: x\n", "Unknown keys in 'install': dest"),
            ("install: [a]\n", "'install' must be a mapping"),
            ("install:\n  prune: docs\n", "install.prune must be a list"),
            ("install:\n  staged_extraction: yes please\n", "must be true or false"),
            ("download:\n  timeout: fast\n", "download.timeout must be a number"),
            ("download:\n  max_redirects: 1.5\n", "must be an integer"),
            ("download:\n  retries: -1\n", "cannot be negative"),
            ("download:\n  retries: true\n", "must be a number"),
            ("install:\n  destination: ''\n", "non-empty string"),
        ],
    )
    def test_validation_errors(self, tmp_path, content, message):
        """Test invalid values are rejected with a clear message."""
        with pytest.raises(ConfigError, match=message):
            parse_config(write_config(tmp_path, content))


class TestLoadConfig:
    """Test load_config discovery."""

    def test_no_config_file(self, tmp_path):
        """Test defaults are used when no file exists."""
        config = load_config(project_root=tmp_path)
        assert config == InstallerConfig(destination=tmp_path / "sdk")

    def test_discovers_project_file(self, tmp_path):
        """Test sdkfetch.yaml in the project root is used."""
        write_config(tmp_path, "install:\n  destination: native\n")

        config = load_config(project_root=tmp_path)

        assert config.destination == tmp_path / "native"

    def test_explicit_path_must_exist(self, tmp_path):
        """Test an explicit config path that does not exist is an error."""
        with pytest.raises(ConfigError):
            load_config(tmp_path / "other.yaml", project_root=tmp_path)

    def test_explicit_path_relative_to_root(self, tmp_path):
        """Test relative paths in an explicit file resolve against the project root."""
        config_dir = tmp_path / "conf"
        config_dir.mkdir()
        config_file = write_config(config_dir, "install:\n  destination: sdk\n")

        config = load_config(config_file, project_root=tmp_path)

        assert config.destination == tmp_path / "sdk"


class TestOverride:
    """Test InstallerConfig.override."""

    def test_none_values_ignored(self):
        """Test None means 'not given on the command line'."""
        config = InstallerConfig(retries=3)

        updated = config.override(retries=None, timeout=10.0)

        assert updated.retries == 3
        assert updated.timeout == 10.0
        assert config.timeout == 30.0
