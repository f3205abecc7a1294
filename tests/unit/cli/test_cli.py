"""Tests for the pymigrate command line interface."""

import pytest
from click.testing import CliRunner

import pymigrate
from pymigrate.cli import main


@pytest.fixture
def cli():
    return CliRunner()


@pytest.fixture
def db_args(tmp_path):
    """Global options pointing the CLI at a throwaway SQLite file."""
    return ["--storage", "sqlite", "--storage-path", str(tmp_path / "control.db")]


@pytest.fixture
def migrations(calls):
    """Register three migrations in the global registry, as an imported module would."""
    for version in (1, 2, 3):
        pymigrate.add(
            {
                "version": version,
                "name": f"v{version}",
                "up": lambda m: calls.append(f"up:{m.version}"),
                "down": (lambda m: calls.append(f"down:{m.version}")) if version > 1 else None,
            }
        )


class TestMigrateCommand:
    """Tests for `pymigrate migrate`."""

    def test_migrate_latest(self, cli, db_args, migrations, calls):
        result = cli.invoke(main, [*db_args, "migrate", "latest"])

        assert result.exit_code == 0, result.output
        assert "Migrated from version 0 to 3" in result.output
        assert calls == ["up:1", "up:2", "up:3"]

    def test_state_persists_between_invocations(self, cli, db_args, migrations, calls):
        """Test that a second invocation sees the stored version."""
        cli.invoke(main, [*db_args, "migrate", "2"])
        calls.clear()

        result = cli.invoke(main, [*db_args, "migrate", "2"])

        assert result.exit_code == 0
        assert "Already at version 2" in result.output
        assert calls == []

    def test_migrate_json_output(self, cli, db_args, migrations):
        result = cli.invoke(main, [*db_args, "--output", "json", "migrate", "latest"])

        assert result.exit_code == 0
        assert '"status": "migrated"' in result.output
        assert '"to_version": 3' in result.output

    def test_rerun(self, cli, db_args, migrations, calls):
        cli.invoke(main, [*db_args, "migrate", "latest"])
        calls.clear()

        result = cli.invoke(main, [*db_args, "migrate", "3,rerun"])

        assert result.exit_code == 0
        assert "Re-ran version 3" in result.output
        assert calls == ["up:3"]

    def test_invalid_command_exits_nonzero(self, cli, db_args, migrations):
        result = cli.invoke(main, [*db_args, "migrate", "sideways"])

        assert result.exit_code == 1
        assert "invalid command" in result.output

    def test_missing_down_step_exits_nonzero(self, cli, db_args, migrations):
        """Test that a failed walk reports the error and leaves the store locked."""
        cli.invoke(main, [*db_args, "migrate", "latest"])

        result = cli.invoke(main, [*db_args, "migrate", "0"])

        assert result.exit_code == 1
        assert "Cannot migrate down on version 1" in result.output

        status = cli.invoke(main, [*db_args, "--output", "json", "status"])
        assert '"version": 1' in status.output
        assert '"locked": true' in status.output


class TestStatusAndUnlock:
    """Tests for `pymigrate status` and `pymigrate unlock`."""

    def test_status_fresh_store(self, cli, db_args, migrations):
        result = cli.invoke(main, [*db_args, "status"])

        assert result.exit_code == 0
        assert "Migration Control" in result.output
        assert "version: 0" in result.output
        assert "latest: 3" in result.output

    def test_status_plain(self, cli, db_args, migrations):
        cli.invoke(main, [*db_args, "migrate", "2"])

        result = cli.invoke(main, [*db_args, "--output", "plain", "status"])

        assert result.output.strip() == "2"

    def test_locked_store_is_skipped_until_unlocked(self, cli, db_args, migrations, calls):
        """Test the operator workflow after a crashed migration."""
        cli.invoke(main, [*db_args, "migrate", "latest"])
        cli.invoke(main, [*db_args, "migrate", "0"])
        calls.clear()

        locked = cli.invoke(main, [*db_args, "migrate", "latest"])
        assert "Control is locked" in locked.output
        assert calls == []

        unlocked = cli.invoke(main, [*db_args, "unlock"])
        assert unlocked.exit_code == 0
        assert "Control unlocked" in unlocked.output

        result = cli.invoke(main, [*db_args, "migrate", "latest"])
        assert "Migrated from version 1 to 3" in result.output
        assert calls == ["up:2", "up:3"]


class TestListCommand:
    """Tests for `pymigrate list`."""

    def test_list_plain(self, cli, db_args, migrations):
        result = cli.invoke(main, [*db_args, "--output", "plain", "list"])

        assert result.exit_code == 0
        assert result.output.split() == ["0", "1", "2", "3"]

    def test_list_json(self, cli, db_args, migrations):
        cli.invoke(main, [*db_args, "migrate", "1"])

        result = cli.invoke(main, [*db_args, "--output", "json", "list"])

        assert result.exit_code == 0
        assert '"name": "v2"' in result.output
        assert '"applied": "\\u2713"' in result.output or '"applied": "✓"' in result.output


class TestDiscovery:
    """Tests for the --module option."""

    def test_module_is_imported(self, cli, db_args, tmp_path, monkeypatch, calls):
        """Test that --module imports a module that registers migrations."""
        (tmp_path / "app_migrations_for_cli.py").write_text(
            "import pymigrate\n"
            "\n"
            "@pymigrate.register_migration(1, name='seed')\n"
            "def seed(migration):\n"
            "    pass\n"
        )
        monkeypatch.syspath_prepend(str(tmp_path))

        result = cli.invoke(main, [*db_args, "--module", "app_migrations_for_cli", "migrate", "latest"])

        assert result.exit_code == 0, result.output
        assert pymigrate.get_global_registry().get(1).name == "seed"

    def test_unknown_module(self, cli, db_args):
        result = cli.invoke(main, [*db_args, "--module", "no_such_module_here", "status"])

        assert result.exit_code != 0
        assert "Cannot import module 'no_such_module_here'" in result.output


class TestConfigFile:
    """Tests for pymigrate.config.yaml handling in the CLI."""

    @pytest.mark.parametrize("content", ["- log\n- sqlite\n", "log: [unclosed\n"])
    def test_unusable_config_file_is_ignored(
        self, cli, db_args, migrations, tmp_path, monkeypatch, content
    ):
        """Test that the CLI runs with a config file the library would ignore."""
        (tmp_path / "pymigrate.config.yaml").write_text(content)
        monkeypatch.chdir(tmp_path)

        result = cli.invoke(main, [*db_args, "migrate", "latest"])

        assert result.exit_code == 0, result.output
        assert "Migrated from version 0 to 3" in result.output
