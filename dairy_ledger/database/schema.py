from __future__ import annotations

from pathlib import Path
import logging
import sqlite3
import sys

from .maintenance import fix_duplicate_records

_log = logging.getLogger(__name__)

SQL = r"""
PRAGMA foreign_keys = ON;

/* ======================== CORE TABLES ======================== */

/* -------- contacts (customers & suppliers) -------- */
CREATE TABLE IF NOT EXISTS contacts (
    contact_id      TEXT PRIMARY KEY,
    name            TEXT NOT NULL,
    module          TEXT NOT NULL CHECK (module IN ('SALE','PURCHASE')),
    price_per_liter REAL NOT NULL DEFAULT 0 CHECK (price_per_liter >= 0),
    /* net position before any record/payment; positive = contact owes us */
    opening_balance INTEGER NOT NULL DEFAULT 0,
    created_at      INTEGER NOT NULL DEFAULT 0
);
CREATE INDEX IF NOT EXISTS idx_contacts_module ON contacts(module);

/* -------- daily milk records (one per contact per day) -------- */
CREATE TABLE IF NOT EXISTS milk_records (
    record_id        TEXT PRIMARY KEY,
    contact_id       TEXT NOT NULL,
    date             TEXT NOT NULL,
    morning_quantity REAL NOT NULL DEFAULT 0 CHECK (morning_quantity >= 0),
    evening_quantity REAL NOT NULL DEFAULT 0 CHECK (evening_quantity >= 0),
    total_price      INTEGER NOT NULL DEFAULT 0,
    /* rate snapshot; NULL on legacy rows that were never stamped */
    price_per_liter  REAL,
    image_url        TEXT,
    created_at       INTEGER NOT NULL DEFAULT 0,
    FOREIGN KEY (contact_id) REFERENCES contacts(contact_id) ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS idx_milk_records_date ON milk_records(date);

/* -------- payments -------- */
CREATE TABLE IF NOT EXISTS payments (
    payment_id  TEXT PRIMARY KEY,
    contact_id  TEXT NOT NULL,
    amount      INTEGER NOT NULL CHECK (amount > 0),
    date        TEXT NOT NULL,
    description TEXT,
    created_at  INTEGER NOT NULL DEFAULT 0,
    FOREIGN KEY (contact_id) REFERENCES contacts(contact_id) ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS idx_payments_contact_date ON payments(contact_id, date);

/* -------- own-farm production (one per day) -------- */
CREATE TABLE IF NOT EXISTS farm_records (
    record_id           TEXT PRIMARY KEY,
    date                TEXT NOT NULL UNIQUE,
    morning_quantity    REAL NOT NULL DEFAULT 0 CHECK (morning_quantity >= 0),
    evening_quantity    REAL NOT NULL DEFAULT 0 CHECK (evening_quantity >= 0),
    opening_stock       REAL,
    opening_stock_state TEXT NOT NULL DEFAULT 'unset'
                        CHECK (opening_stock_state IN ('unset','auto','manual')),
    created_at          INTEGER NOT NULL DEFAULT 0,
    /* only a manual override carries a value */
    CHECK ((opening_stock_state = 'manual') = (opening_stock IS NOT NULL))
);
"""

# Created after legacy duplicates have been cleaned up.
UNIQUE_INDEXES_SQL = r"""
CREATE UNIQUE INDEX IF NOT EXISTS idx_milk_records_contact_date
ON milk_records(contact_id, date);
"""


def _ensure_column(conn: sqlite3.Connection, table: str, column: str, ddl: str) -> None:
    """
    Safe migration for older DBs created before `column` existed.
    Adds the column if missing. No-op if already present.
    """
    cur = conn.execute(f"PRAGMA table_info({table});")
    cols = {row[1] for row in cur.fetchall()}  # row[1] = name
    if column not in cols:
        _log.info("Adding missing column %s.%s", table, column)
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {ddl};")


def apply_schema(conn: sqlite3.Connection) -> None:
    conn.executescript(SQL)
    # Backfill migrations for DBs from before opening balances / rate snapshots
    _ensure_column(conn, "contacts", "opening_balance", "INTEGER NOT NULL DEFAULT 0")
    _ensure_column(conn, "milk_records", "price_per_liter", "REAL")
    deleted = fix_duplicate_records(conn)
    if deleted:
        _log.warning("Removed %d duplicate milk records before indexing", deleted)
    conn.executescript(UNIQUE_INDEXES_SQL)


def init_schema(db_path: Path | str = "dairy_ledger.db") -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        apply_schema(conn)
        conn.commit()
    _log.info("Schema applied to %s", db_path)


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else Path(__file__).resolve().parents[1] / "data" / "dairy_ledger.db"
    init_schema(target)
