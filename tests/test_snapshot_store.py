"""Tests for the snapshot store backends."""

import pytest

from apollyo.core.snapshot_store import (
    JsonFileSnapshotStore,
    MemorySnapshotStore,
    SqliteSnapshotStore,
    create_snapshot_store,
)


class TestMemorySnapshotStore:
    def test_save_copies_the_snapshot(self):
        store = MemorySnapshotStore()
        snapshot = {'words': ['wizard']}
        store.save('key', snapshot)
        snapshot['words'].append('zigzag')
        assert store.load('key') == {'words': ['wizard']}

    def test_missing_and_cleared_keys(self):
        store = MemorySnapshotStore()
        assert store.load('key') is None
        store.save('key', {'a': 1})
        store.clear('key')
        assert store.load('key') is None


class TestJsonFileSnapshotStore:
    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "session" / "session.json"
        JsonFileSnapshotStore(str(path)).save('key', {'a': 1})
        assert JsonFileSnapshotStore(str(path)).load('key') == {'a': 1}

    def test_corrupt_file_is_ignored(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("{not json")
        store = JsonFileSnapshotStore(str(path))
        assert store.load('key') is None
        store.save('key', {'a': 1})
        assert JsonFileSnapshotStore(str(path)).load('key') == {'a': 1}


class TestSqliteSnapshotStore:
    def test_save_replace_and_clear(self, tmp_path):
        store = SqliteSnapshotStore(str(tmp_path / "session.db"))
        store.save('key', {'a': 1})
        store.save('key', {'a': 2})
        assert SqliteSnapshotStore(str(tmp_path / "session.db")).load('key') == {'a': 2}
        store.clear('key')
        assert store.load('key') is None


class TestCreateSnapshotStore:
    def test_backends(self, tmp_path):
        assert isinstance(create_snapshot_store('memory'), MemorySnapshotStore)
        assert isinstance(create_snapshot_store('json', str(tmp_path / "s.json")), JsonFileSnapshotStore)
        assert isinstance(create_snapshot_store('sqlite', str(tmp_path / "s.db")), SqliteSnapshotStore)

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            create_snapshot_store('redis')
