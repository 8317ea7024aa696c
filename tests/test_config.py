"""Tests for config module."""

from pathlib import Path

import pytest

from codeindex_mcp.config import Config

ENV_VARS = (
    "CODEINDEX_ROOT",
    "CODEINDEX_PATH",
    "CODEINDEX_MAX_CHUNK_LINES",
    "CODEINDEX_WORKERS",
    "CODEINDEX_SYNC_INTERVAL",
    "CODEINDEX_EXTRA_IGNORE",
    "CODEINDEX_LANGUAGES",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_config_defaults(tmp_path, monkeypatch):
    """Test config loads with defaults when no env vars set."""
    monkeypatch.chdir(tmp_path)
    config = Config.from_env()
    assert config.index_root == tmp_path.resolve()
    assert config.index_path == tmp_path.resolve() / ".codeindex" / "index.json"
    assert config.max_chunk_lines == 50
    assert config.workers == 1
    assert config.extra_ignore_dirs == frozenset()
    assert config.languages_file is None


def test_config_from_env(tmp_path, monkeypatch):
    """Test config loads from environment variables."""
    monkeypatch.setenv("CODEINDEX_ROOT", str(tmp_path))
    monkeypatch.setenv("CODEINDEX_PATH", "/custom/index.json")
    monkeypatch.setenv("CODEINDEX_MAX_CHUNK_LINES", "80")
    monkeypatch.setenv("CODEINDEX_WORKERS", "4")
    monkeypatch.setenv("CODEINDEX_LANGUAGES", "/custom/languages.yaml")

    config = Config.from_env()
    assert config.index_root == tmp_path.resolve()
    assert config.index_path == Path("/custom/index.json")
    assert config.max_chunk_lines == 80
    assert config.workers == 4
    assert config.languages_file == Path("/custom/languages.yaml")


def test_config_index_path_follows_root(tmp_path, monkeypatch):
    """Test the default index location lives under the configured root."""
    monkeypatch.setenv("CODEINDEX_ROOT", str(tmp_path / "project"))
    config = Config.from_env()
    assert config.index_path == config.index_root / ".codeindex" / "index.json"


def test_config_from_env_creates_new_instances():
    """Test Config.from_env() creates new instances each time."""
    config1 = Config.from_env()
    config2 = Config.from_env()
    assert config1 is not config2


def test_config_tilde_expansion(monkeypatch):
    """Test config expands tilde in paths."""
    monkeypatch.setenv("CODEINDEX_ROOT", "~/custom/project")
    monkeypatch.setenv("CODEINDEX_PATH", "~/custom/index.json")
    config = Config.from_env()
    assert "~" not in str(config.index_root)
    assert config.index_root.is_absolute()
    assert "~" not in str(config.index_path)


def test_config_extra_ignore_dirs(monkeypatch):
    """Test extra ignore dirs are parsed from a comma separated list."""
    monkeypatch.setenv("CODEINDEX_EXTRA_IGNORE", "generated, vendor,,coverage ")
    config = Config.from_env()
    assert config.extra_ignore_dirs == frozenset({"generated", "vendor", "coverage"})


def test_config_invalid_chunk_lines_non_numeric(monkeypatch):
    """Test config raises error for non-numeric chunk size."""
    monkeypatch.setenv("CODEINDEX_MAX_CHUNK_LINES", "lots")
    with pytest.raises(ValueError, match="Invalid CODEINDEX_MAX_CHUNK_LINES"):
        Config.from_env()


def test_config_invalid_chunk_lines_zero(monkeypatch):
    """Test config rejects a zero chunk size."""
    monkeypatch.setenv("CODEINDEX_MAX_CHUNK_LINES", "0")
    with pytest.raises(ValueError, match="must be >= 1"):
        Config.from_env()


def test_config_invalid_workers(monkeypatch):
    """Test config rejects a worker count below one."""
    monkeypatch.setenv("CODEINDEX_WORKERS", "0")
    with pytest.raises(ValueError, match="Invalid CODEINDEX_WORKERS"):
        Config.from_env()


def test_config_sync_interval_default():
    """Test sync_interval defaults to 30 seconds."""
    config = Config.from_env()
    assert config.sync_interval == 30


def test_config_sync_interval_from_env(monkeypatch):
    """Test sync_interval loads from environment."""
    monkeypatch.setenv("CODEINDEX_SYNC_INTERVAL", "60")
    config = Config.from_env()
    assert config.sync_interval == 60


def test_config_sync_interval_disabled(monkeypatch):
    """Test sync_interval can be set to 0 to disable."""
    monkeypatch.setenv("CODEINDEX_SYNC_INTERVAL", "0")
    config = Config.from_env()
    assert config.sync_interval == 0


def test_config_sync_interval_invalid_non_numeric(monkeypatch):
    """Test config raises error for non-numeric sync interval."""
    monkeypatch.setenv("CODEINDEX_SYNC_INTERVAL", "fast")
    with pytest.raises(ValueError, match="Invalid CODEINDEX_SYNC_INTERVAL"):
        Config.from_env()


def test_config_sync_interval_invalid_negative(monkeypatch):
    """Test config raises error for negative sync interval."""
    monkeypatch.setenv("CODEINDEX_SYNC_INTERVAL", "-5")
    with pytest.raises(ValueError, match="must be >= 0"):
        Config.from_env()
