"""
Integration tests for the SQLite control storage backend.

These run the full runner against a real database file, including several
backend instances (as separate processes would have) sharing that file.
"""

import asyncio

import aiosqlite
import pytest

from pymigrate import Migration, MigrationRegistry, MigrationRunner, MigrationStatus
from pymigrate.engine.control import ControlStore
from pymigrate.engine.locker import Locker
from pymigrate.storage.sqlite import SQLiteControlStorage


@pytest.fixture
async def sqlite_storage(tmp_path):
    storage = SQLiteControlStorage(db_path=tmp_path / "control.db")
    await storage.connect()
    yield storage
    await storage.disconnect()


@pytest.fixture
async def second_storage(tmp_path, sqlite_storage):
    """Another connection to the same file."""
    storage = SQLiteControlStorage(db_path=tmp_path / "control.db")
    await storage.connect()
    yield storage
    await storage.disconnect()


class TestSQLiteOperations:
    """Test the store contract against SQLite."""

    @pytest.mark.asyncio
    async def test_find_missing(self, sqlite_storage):
        assert await sqlite_storage.find_one("control") is None

    @pytest.mark.asyncio
    async def test_upsert_and_find(self, sqlite_storage):
        """Test creating a record and then updating a subset of fields."""
        await sqlite_storage.upsert("control", {"version": 0, "locked": False})
        await sqlite_storage.upsert("control", {"version": 4})

        record = await sqlite_storage.find_one("control")

        assert record == {"version": 4, "locked": False, "locked_at": None}

    @pytest.mark.asyncio
    async def test_update_where(self, sqlite_storage):
        """Test conditional updates match only the selected state."""
        await sqlite_storage.upsert("control", {"version": 0, "locked": False})

        assert await sqlite_storage.update_where("control", {"locked": False}, {"locked": True}) == 1
        assert await sqlite_storage.update_where("control", {"locked": False}, {"locked": True}) == 0
        assert await sqlite_storage.update_where("missing", {}, {"locked": False}) == 0

    @pytest.mark.asyncio
    async def test_remove_all(self, sqlite_storage):
        await sqlite_storage.upsert("control", {"version": 2})

        assert await sqlite_storage.remove_all() == 1
        assert await sqlite_storage.find_one("control") is None

    @pytest.mark.asyncio
    async def test_unknown_fields_rejected(self, sqlite_storage):
        with pytest.raises(ValueError, match="Unknown control fields: owner"):
            await sqlite_storage.upsert("control", {"owner": "me"})

    @pytest.mark.asyncio
    async def test_health_check(self, sqlite_storage):
        assert await sqlite_storage.health_check() is True

    @pytest.mark.asyncio
    async def test_concurrent_first_use_opens_one_connection(self, tmp_path, monkeypatch):
        """Test that racing calls on an unconnected backend share one connection."""
        opened = []
        real_connect = aiosqlite.connect

        def counting_connect(*args, **kwargs):
            opened.append(args[0])
            return real_connect(*args, **kwargs)

        monkeypatch.setattr(aiosqlite, "connect", counting_connect)
        storage = SQLiteControlStorage(db_path=tmp_path / "lazy.db")
        try:
            results = await asyncio.gather(
                storage.find_one("control"),
                storage.find_one("control"),
            )
        finally:
            await storage.disconnect()

        assert results == [None, None]
        assert len(opened) == 1

    def test_invalid_collection_name(self, tmp_path):
        with pytest.raises(ValueError, match="Invalid collection name"):
            SQLiteControlStorage(tmp_path / "x.db", collection_name="drop table;")

    @pytest.mark.asyncio
    async def test_collections_are_separate(self, tmp_path):
        """Test that two collection names in one file do not share a record."""
        first = SQLiteControlStorage(tmp_path / "shared.db", collection_name="app_a")
        second = SQLiteControlStorage(tmp_path / "shared.db", collection_name="app_b")
        try:
            await first.upsert("control", {"version": 5})

            assert await second.find_one("control") is None
        finally:
            await first.disconnect()
            await second.disconnect()


class TestSQLiteLocking:
    """Test the lock across connections sharing one database file."""

    @pytest.mark.asyncio
    async def test_one_acquire_wins(self, sqlite_storage, second_storage):
        """Test that two connections racing for the lock see exactly one success."""
        await ControlStore(sqlite_storage).get_control()

        results = await asyncio.gather(
            Locker(ControlStore(sqlite_storage)).acquire(),
            Locker(ControlStore(second_storage)).acquire(),
        )

        assert sorted(results) == [False, True]

    @pytest.mark.asyncio
    async def test_lock_visible_to_other_connection(self, sqlite_storage, second_storage):
        """Test that a lock taken on one connection blocks another runner."""
        registry = MigrationRegistry()
        registry.add(Migration(version=1, up=lambda m: None))
        await ControlStore(sqlite_storage).get_control()
        assert await Locker(ControlStore(sqlite_storage)).acquire()

        result = await MigrationRunner(registry, second_storage).migrate_to(1)

        assert result.status == MigrationStatus.LOCKED


class TestSQLiteRunner:
    """Run full migrations against SQLite."""

    @pytest.fixture
    def sqlite_runner(self, registry, sqlite_storage):
        return MigrationRunner(registry, sqlite_storage)

    @pytest.mark.asyncio
    async def test_up_and_down_scenario(self, sqlite_runner, sqlite_storage, calls):
        """Test migrating to 2 and back to 1."""
        await sqlite_runner.migrate_to(2)

        assert calls == ["up:1", "up:2"]
        record = await sqlite_storage.find_one("control")
        assert record["version"] == 2
        assert record["locked"] is False
        assert record["locked_at"] is not None

        calls.clear()
        await sqlite_runner.migrate_to(1)

        assert calls == ["down:2"]
        assert (await sqlite_storage.find_one("control"))["version"] == 1

    @pytest.mark.asyncio
    async def test_state_survives_reconnect(self, sqlite_runner, tmp_path, calls):
        """Test that a new backend instance on the same file resumes from the stored version."""
        await sqlite_runner.migrate_to(1)
        calls.clear()

        reopened = SQLiteControlStorage(db_path=tmp_path / "control.db")
        try:
            await MigrationRunner(sqlite_runner.registry, reopened).migrate_to("latest")
        finally:
            await reopened.disconnect()

        assert calls == ["up:2", "up:3"]

    @pytest.mark.asyncio
    async def test_failure_leaves_lock_held(self, sqlite_storage):
        """Test that a failing step keeps the lock and the last completed version."""
        registry = MigrationRegistry()
        registry.add(Migration(version=1, up=lambda m: None))

        async def fail(migration):
            raise RuntimeError("constraint violated")

        registry.add(Migration(version=2, up=fail))
        runner = MigrationRunner(registry, sqlite_storage)

        with pytest.raises(RuntimeError):
            await runner.migrate_to(2)

        record = await sqlite_storage.find_one("control")
        assert record["version"] == 1
        assert record["locked"] is True

        await runner.unlock()
        assert (await sqlite_storage.find_one("control"))["locked"] is False

    @pytest.mark.asyncio
    async def test_concurrent_runners(self, registry, sqlite_storage, second_storage, calls):
        """Test that two runners on separate connections run each step once."""
        await ControlStore(sqlite_storage).get_control()

        results = await asyncio.gather(
            MigrationRunner(registry, sqlite_storage).migrate_to("latest"),
            MigrationRunner(registry, second_storage).migrate_to("latest"),
        )

        assert calls == ["up:1", "up:2", "up:3"]
        assert sum(r.status is MigrationStatus.MIGRATED for r in results) == 1
        assert (await second_storage.find_one("control"))["version"] == 3
