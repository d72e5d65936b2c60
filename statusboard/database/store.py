"""
Key-value store for the statusboard index.

The index builder is the only writer; the dashboard and the staleness
selector only read. Every put() commits before returning, so one key
write is durable before the next begins.
"""

import json
import sqlite3
from pathlib import Path
from typing import Any, Iterator, List, Optional, Tuple

from ..errors import NotFoundError
from .connection import get_connection


class KeyValueStore:
    """
    SQLite-backed key-value store with JSON values.

    Usage:
        with KeyValueStore(Path("~/.statusboard/index.db")) as store:
            store.put("expressjs:express:lastUpdated", 1700000000000)
            store.get("expressjs:express:lastUpdated")

    get() raises NotFoundError for a missing key. Any other failure
    (locked or corrupt database) surfaces as sqlite3.Error.
    """

    def __init__(self, db_path: Path, read_only: bool = False):
        self.db_path = Path(db_path).expanduser()
        self.read_only = read_only
        self._conn: Optional[sqlite3.Connection] = None

    def open(self) -> 'KeyValueStore':
        if self._conn is None:
            self._conn = get_connection(self.db_path, read_only=self.read_only)
        return self

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> 'KeyValueStore':
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Store not open. Use 'with KeyValueStore(path) as store:'")
        return self._conn

    def get(self, key: str) -> Any:
        row = self.conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        if row is None:
            raise NotFoundError(key)
        return json.loads(row['value'])

    def put(self, key: str, value: Any) -> None:
        encoded = json.dumps(value, ensure_ascii=False)
        self.conn.execute(
            """INSERT INTO kv (key, value, written_at) VALUES (?, ?, CURRENT_TIMESTAMP)
               ON CONFLICT(key) DO UPDATE SET value = excluded.value,
                                              written_at = excluded.written_at""",
            (key, encoded),
        )
        self.conn.commit()

    def delete(self, key: str) -> bool:
        cursor = self.conn.execute("DELETE FROM kv WHERE key = ?", (key,))
        self.conn.commit()
        return cursor.rowcount > 0

    def keys(self, prefix: Optional[str] = None) -> List[str]:
        return [key for key, _ in self._scan(prefix, with_values=False)]

    def items(self, prefix: Optional[str] = None) -> Iterator[Tuple[str, Any]]:
        for key, value in self._scan(prefix, with_values=True):
            yield key, json.loads(value)

    def _scan(self, prefix: Optional[str], with_values: bool) -> List[Tuple[str, Any]]:
        columns = "key, value" if with_values else "key, NULL AS value"
        if prefix:
            # Escape LIKE wildcards so project names with '_' match literally
            pattern = prefix.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_') + '%'
            rows = self.conn.execute(
                f"SELECT {columns} FROM kv WHERE key LIKE ? ESCAPE '\\' ORDER BY key",
                (pattern,),
            ).fetchall()
        else:
            rows = self.conn.execute(f"SELECT {columns} FROM kv ORDER BY key").fetchall()
        return [(row['key'], row['value']) for row in rows]

    def __len__(self) -> int:
        row = self.conn.execute("SELECT COUNT(*) FROM kv").fetchone()
        return row[0] if row else 0

    def __contains__(self, key: str) -> bool:
        row = self.conn.execute("SELECT 1 FROM kv WHERE key = ?", (key,)).fetchone()
        return row is not None
