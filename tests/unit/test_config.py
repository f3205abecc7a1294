"""Tests for the global configuration."""

import pytest

import pymigrate
from pymigrate.cli.utils.config import load_config
from pymigrate.config import CONFIG_FILENAME, get_config, get_storage
from pymigrate.core.exceptions import ConfigurationError
from pymigrate.storage.memory import InMemoryControlStorage
from pymigrate.storage.sqlite import SQLiteControlStorage


class TestConfigure:
    """Tests for configure() and get_config()."""

    def test_defaults(self):
        config = get_config()

        assert config.log is True
        assert config.logger is None
        assert config.log_if_latest is True
        assert config.collection_name == "migrations"
        assert config.storage is None
        assert config.env_var == "MIGRATE"

    def test_configure_overrides(self):
        """Test setting options programmatically."""
        pymigrate.configure(log_if_latest=False, env_var="APP_MIGRATE")

        assert get_config().log_if_latest is False
        assert get_config().env_var == "APP_MIGRATE"

    def test_unknown_option(self):
        """Test that unknown options raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match="Unknown config option: verbose"):
            pymigrate.configure(verbose=True)

    def test_reset_config(self):
        pymigrate.configure(log=False)

        pymigrate.reset_config()

        assert get_config().log is True


class TestStorageDefault:
    """Tests for get_storage()."""

    def test_default_storage_is_shared(self):
        """Test that the fallback in-memory storage is process-wide."""
        first = get_storage()

        assert isinstance(first, InMemoryControlStorage)
        assert get_storage() is first

    def test_default_storage_uses_collection_name(self):
        pymigrate.configure(collection_name="schema_control")

        assert get_storage().collection_name == "schema_control"

    def test_configured_storage(self):
        storage = InMemoryControlStorage()
        pymigrate.configure(storage=storage)

        assert get_storage() is storage


class TestYamlConfig:
    """Tests for pymigrate.config.yaml loading."""

    def test_load_yaml(self, tmp_path, monkeypatch):
        """Test that the YAML file in the working directory is read."""
        db_path = tmp_path / "control.db"
        (tmp_path / CONFIG_FILENAME).write_text(
            "log_if_latest: false\n"
            "collection_name: app_migrations\n"
            "env_var: APP_MIGRATE\n"
            "storage:\n"
            "  type: sqlite\n"
            f"  path: {db_path}\n"
        )
        monkeypatch.chdir(tmp_path)

        config = get_config()

        assert config.log_if_latest is False
        assert config.env_var == "APP_MIGRATE"
        assert isinstance(config.storage, SQLiteControlStorage)
        assert config.storage.db_path == str(db_path)
        assert config.storage.collection_name == "app_migrations"

    def test_configure_wins_over_yaml(self, tmp_path, monkeypatch):
        (tmp_path / CONFIG_FILENAME).write_text("log_if_latest: false\n")
        monkeypatch.chdir(tmp_path)

        pymigrate.configure(log_if_latest=True)

        assert get_config().log_if_latest is True

    def test_invalid_yaml_is_ignored(self, tmp_path, monkeypatch):
        """Test that an unparsable file falls back to defaults."""
        (tmp_path / CONFIG_FILENAME).write_text("log: [unclosed\n")
        monkeypatch.chdir(tmp_path)

        assert get_config().log is True

    def test_missing_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        assert get_config().storage is None

    def test_non_mapping_yaml_is_ignored(self, tmp_path, monkeypatch):
        """Test that valid YAML whose top level is a list falls back to defaults."""
        (tmp_path / CONFIG_FILENAME).write_text("- log\n- sqlite\n")
        monkeypatch.chdir(tmp_path)

        config = get_config()

        assert config.log is True
        assert config.storage is None

    def test_runner_builds_with_non_mapping_yaml(self, tmp_path, monkeypatch):
        (tmp_path / CONFIG_FILENAME).write_text("just a string\n")
        monkeypatch.chdir(tmp_path)

        runner = pymigrate.MigrationRunner()

        assert isinstance(runner.control.storage, InMemoryControlStorage)


class TestCliConfigLoading:
    """Tests for the CLI's config file loader, which shares the library's rules."""

    def test_load_mapping(self, tmp_path):
        path = tmp_path / CONFIG_FILENAME
        path.write_text("module: app.migrations\n")

        assert load_config(path) == {"module": "app.migrations"}

    @pytest.mark.parametrize("content", ["- log\n- sqlite\n", "log: [unclosed\n", "", "42\n"])
    def test_unusable_files_give_empty_config(self, tmp_path, content):
        """Test that files the library ignores are ignored by the CLI too."""
        path = tmp_path / CONFIG_FILENAME
        path.write_text(content)

        assert load_config(path) == {}

    def test_missing_file(self, tmp_path):
        assert load_config(tmp_path / CONFIG_FILENAME) == {}


class TestCollectionNameChange:
    """Tests for changing collection_name after the fallback storage exists."""

    def test_changed_collection_replaces_fallback_storage(self):
        """Test that the fallback backend follows a new collection name."""
        before = get_storage()

        pymigrate.configure(collection_name="schema_control")
        after = get_storage()

        assert after is not before
        assert after.collection_name == "schema_control"

    def test_same_collection_keeps_fallback_storage(self):
        before = get_storage()

        pymigrate.configure(collection_name=before.collection_name)

        assert get_storage() is before

    def test_explicit_storage_is_kept(self):
        """Test that a configured backend is not replaced by a collection change."""
        storage = InMemoryControlStorage(collection_name="mine")
        pymigrate.configure(storage=storage)

        pymigrate.configure(collection_name="other")

        assert get_storage() is storage
