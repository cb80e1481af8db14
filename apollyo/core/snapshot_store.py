"""Key-value snapshot stores backing the session and learning state."""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Narrow load/save/clear interface the session store depends on.

    A store that cannot read a snapshot returns None; it never raises for
    missing or corrupt data.
    """

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    def save(self, key: str, snapshot: Dict[str, Any]):
        raise NotImplementedError

    def clear(self, key: str):
        raise NotImplementedError


class MemorySnapshotStore(SnapshotStore):
    """Process-local store; snapshots are copied through JSON like the real backends."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def save(self, key: str, snapshot: Dict[str, Any]):
        self._data[key] = json.dumps(snapshot)

    def clear(self, key: str):
        self._data.pop(key, None)


class JsonFileSnapshotStore(SnapshotStore):
    """All snapshots in one JSON file, keyed at the top level."""

    def __init__(self, path: str = "data/session/session.json"):
        self.path = Path(path)
        self._snapshots: Dict[str, Any] = {}
        self._load()

    def _load(self):
        """Load snapshots from file."""
        if self.path.exists():
            try:
                with open(self.path, 'r') as f:
                    data = json.load(f)
            except (json.JSONDecodeError, IOError) as e:
                logger.info("Ignoring unreadable snapshot file %s: %s", self.path, e)
                data = {}
            self._snapshots = data if isinstance(data, dict) else {}

    def _save(self):
        """Save snapshots to file."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump(self._snapshots, f, indent=2)

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        snapshot = self._snapshots.get(key)
        return snapshot if isinstance(snapshot, dict) else None

    def save(self, key: str, snapshot: Dict[str, Any]):
        self._snapshots[key] = snapshot
        self._save()

    def clear(self, key: str):
        if self._snapshots.pop(key, None) is not None:
            self._save()


class SqliteSnapshotStore(SnapshotStore):
    """Snapshots as JSON blobs in a single SQLite table."""

    def __init__(self, db_file: str = "data/session/session.db"):
        self.db_file = Path(db_file)
        self.db_file.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Initialize database schema."""
        with sqlite3.connect(self.db_file) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS snapshots (
                    key TEXT PRIMARY KEY,
                    data TEXT NOT NULL
                )
            """)
            conn.commit()

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        with sqlite3.connect(self.db_file) as conn:
            row = conn.execute("SELECT data FROM snapshots WHERE key = ?", (key,)).fetchone()

        if not row:
            return None
        try:
            snapshot = json.loads(row[0])
        except json.JSONDecodeError as e:
            logger.info("Ignoring corrupt snapshot %r: %s", key, e)
            return None
        return snapshot if isinstance(snapshot, dict) else None

    def save(self, key: str, snapshot: Dict[str, Any]):
        with sqlite3.connect(self.db_file) as conn:
            conn.execute(
                "INSERT OR REPLACE INTO snapshots (key, data) VALUES (?, ?)",
                (key, json.dumps(snapshot)),
            )
            conn.commit()

    def clear(self, key: str):
        with sqlite3.connect(self.db_file) as conn:
            conn.execute("DELETE FROM snapshots WHERE key = ?", (key,))
            conn.commit()


def create_snapshot_store(backend: str = 'json', path: Optional[str] = None) -> SnapshotStore:
    """Build the configured backend."""
    if backend == 'memory':
        return MemorySnapshotStore()
    if backend == 'sqlite':
        return SqliteSnapshotStore(path or "data/session/session.db")
    if backend == 'json':
        return JsonFileSnapshotStore(path or "data/session/session.json")
    raise ValueError(f"Unknown session backend: {backend}")
