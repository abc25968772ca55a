# database/__init__.py
from __future__ import annotations

from pathlib import Path
import sqlite3
import threading

from ..config import DB_PATH
from ..constants import TABLE_SCHEMA_VERSION, SCHEMA_VERSION
from . import schema as schema_module

_fallback_lock = threading.RLock()


class LedgerConnection(sqlite3.Connection):
    """sqlite3 connection carrying the lock that serialises writes made through it."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.write_lock = threading.RLock()


def write_lock(conn: sqlite3.Connection):
    """
    Lock every controller holds while it writes through `conn`. A debounced
    write runs on a timer thread over the same connection, so a multi-step
    write (rate change + re-priced records) must not interleave with it.
    Connections not opened by get_connection share one process-wide lock.
    """
    return getattr(conn, "write_lock", _fallback_lock)


def _ensure_version_table(conn: sqlite3.Connection) -> None:
    conn.execute(f"""
        CREATE TABLE IF NOT EXISTS {TABLE_SCHEMA_VERSION}(
            id INTEGER PRIMARY KEY CHECK (id=1),
            version TEXT NOT NULL
        );
    """)
    row = conn.execute(
        f"SELECT version FROM {TABLE_SCHEMA_VERSION} WHERE id=1;"
    ).fetchone()
    if row is None:
        conn.execute(
            f"INSERT INTO {TABLE_SCHEMA_VERSION}(id, version) VALUES (1, ?);",
            (SCHEMA_VERSION,),
        )


def get_connection(db_path: Path | str | None = None) -> sqlite3.Connection:
    """
    Returns a sqlite3.Connection with:
      - WAL mode
      - foreign_keys ON
      - row_factory = sqlite3.Row (so rows behave like dicts and tuples)
      - check_same_thread off, so debounced writes may land from a timer thread
    Ensures the schema is applied idempotently.
    """
    path = Path(db_path) if db_path is not None else DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)

    # Always apply the schema (idempotent: uses CREATE IF NOT EXISTS)
    schema_module.init_schema(path)

    conn = sqlite3.connect(path, check_same_thread=False, factory=LedgerConnection)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    conn.execute("PRAGMA journal_mode = WAL;")

    _ensure_version_table(conn)

    conn.commit()
    return conn


__all__ = [
    "LedgerConnection",
    "get_connection",
    "write_lock",
]
