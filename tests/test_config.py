"""Tests for store configuration."""

from pathlib import Path

import pytest

from filesession.config import (
    StoreConfig,
    default_storage_directory,
    get_default_config,
    load_config_from_env,
)

ENV_VARS = [
    "FILESESSION_STORAGE_DIRECTORY",
    "FILESESSION_DEFAULT_TIMEOUT_SECONDS",
    "FILESESSION_CLEAN_EXPIRED_ON_STARTUP",
    "FILESESSION_CLEAN_UNREADABLE",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
    """Remove store variables and run from a directory without a .env file."""
    for name in ENV_VARS:
        # setenv first so teardown also removes values loaded from .env files
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestStoreConfig:
    """Tests for StoreConfig model."""

    def test_defaults(self) -> None:
        """Default config should match the documented defaults."""
        config = get_default_config()

        assert config.storage_directory == default_storage_directory()
        assert config.storage_directory.name == "sess"
        assert config.default_timeout_seconds == 1800
        assert config.clean_expired_on_startup is False
        assert config.clean_unreadable is True

    def test_config_is_frozen(self) -> None:
        """StoreConfig should be immutable."""
        config = StoreConfig()

        with pytest.raises(Exception):
            config.default_timeout_seconds = 5  # type: ignore[misc]


class TestLoadConfigFromEnv:
    """Tests for load_config_from_env."""

    def test_reads_environment(self, clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Environment variables should override defaults."""
        clean_env.setenv("FILESESSION_STORAGE_DIRECTORY", str(tmp_path / "records"))
        clean_env.setenv("FILESESSION_DEFAULT_TIMEOUT_SECONDS", "600")
        clean_env.setenv("FILESESSION_CLEAN_EXPIRED_ON_STARTUP", "true")
        clean_env.setenv("FILESESSION_CLEAN_UNREADABLE", "no")

        config = load_config_from_env()

        assert config.storage_directory == tmp_path / "records"
        assert config.default_timeout_seconds == 600
        assert config.clean_expired_on_startup is True
        assert config.clean_unreadable is False

    def test_unset_values_use_defaults(self, clean_env: pytest.MonkeyPatch) -> None:
        """Missing variables should fall back to defaults."""
        config = load_config_from_env()

        assert config == get_default_config()

    def test_reads_env_file(self, clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Values should be loaded from an explicit .env file."""
        env_file = tmp_path / "store.env"
        env_file.write_text("FILESESSION_DEFAULT_TIMEOUT_SECONDS=42\n", encoding="utf-8")

        config = load_config_from_env(env_file=env_file)

        assert config.default_timeout_seconds == 42

    def test_invalid_timeout_raises(self, clean_env: pytest.MonkeyPatch) -> None:
        """A non-integer timeout should raise ValueError."""
        clean_env.setenv("FILESESSION_DEFAULT_TIMEOUT_SECONDS", "soon")

        with pytest.raises(ValueError):
            load_config_from_env()
