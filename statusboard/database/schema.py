"""
Database schema for statusboard.

The index is a flat key-value table. Keys are composite strings such as
'expressjs:express:ISSUE:42'; values are JSON documents.
"""

import sqlite3

# v1: Initial key-value schema
CURRENT_VERSION = 1

SCHEMA_V1 = """
CREATE TABLE IF NOT EXISTS _schema_info (
    version INTEGER PRIMARY KEY,
    applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    description TEXT
);

CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    written_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Return the applied schema version, or 0 for a fresh database."""
    try:
        row = conn.execute("SELECT MAX(version) FROM _schema_info").fetchone()
    except sqlite3.OperationalError:
        return 0
    if not row:
        return 0
    return row[0] or 0


def ensure_schema(conn: sqlite3.Connection) -> None:
    """Create tables if they do not exist and record the schema version."""
    if get_schema_version(conn) >= CURRENT_VERSION:
        return

    conn.executescript(SCHEMA_V1)
    conn.execute(
        "INSERT OR IGNORE INTO _schema_info (version, description) VALUES (?, ?)",
        (CURRENT_VERSION, "Initial key-value schema"),
    )
    conn.commit()
