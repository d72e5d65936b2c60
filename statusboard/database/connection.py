"""
Database connection management for statusboard.

Uses SQLite with WAL mode so the dashboard can read while an index
build is writing.
"""

import os
import sqlite3
from pathlib import Path
from typing import Optional

from .schema import ensure_schema


def get_db_path(config: Optional[dict] = None) -> Path:
    """
    Get the database file path.

    Checks in order:
    1. STATUSBOARD_DB environment variable
    2. config['db'] if provided
    3. Default: ~/.statusboard/index.db
    """
    if 'STATUSBOARD_DB' in os.environ:
        return Path(os.environ['STATUSBOARD_DB'])

    if config and config.get('db'):
        return Path(config['db']).expanduser()

    return Path.home() / '.statusboard' / 'index.db'


def get_connection(db_path: Path, read_only: bool = False) -> sqlite3.Connection:
    """
    Open a connection, creating the database and schema if needed.

    Args:
        db_path: Path to the database file
        read_only: If True, open in read-only mode
    """
    if read_only:
        conn = sqlite3.connect(f"file:{db_path}?mode=ro", uri=True)
    else:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(db_path))

    conn.row_factory = sqlite3.Row

    if not read_only:
        conn.execute("PRAGMA journal_mode = WAL")
        conn.execute("PRAGMA synchronous = NORMAL")
        ensure_schema(conn)

    return conn
