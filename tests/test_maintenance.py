import sqlite3

from dairy_ledger.database import get_connection
from dairy_ledger.database.maintenance import find_duplicate_records, fix_duplicate_records

LEGACY_SQL = """
CREATE TABLE contacts (
    contact_id      TEXT PRIMARY KEY,
    name            TEXT NOT NULL,
    module          TEXT NOT NULL,
    price_per_liter REAL NOT NULL DEFAULT 0,
    created_at      INTEGER NOT NULL DEFAULT 0
);
CREATE TABLE milk_records (
    record_id        TEXT PRIMARY KEY,
    contact_id       TEXT NOT NULL,
    date             TEXT NOT NULL,
    morning_quantity REAL NOT NULL DEFAULT 0,
    evening_quantity REAL NOT NULL DEFAULT 0,
    total_price      INTEGER NOT NULL DEFAULT 0,
    image_url        TEXT,
    created_at       INTEGER NOT NULL DEFAULT 0
);
INSERT INTO contacts VALUES ('c1', 'Aslam', 'SALE', 100, 1);
INSERT INTO contacts VALUES ('c2', 'Bilal', 'SALE', 100, 2);
-- typing "120" one keystroke at a time
INSERT INTO milk_records VALUES ('a', 'c1', '2024-03-01', 1,   0, 100,   NULL, 10);
INSERT INTO milk_records VALUES ('b', 'c1', '2024-03-01', 12,  0, 1200,  NULL, 11);
INSERT INTO milk_records VALUES ('c', 'c1', '2024-03-01', 120, 0, 12000, NULL, 12);
INSERT INTO milk_records VALUES ('d', 'c1', '2024-03-02', 5,   0, 500,   NULL, 13);
INSERT INTO milk_records VALUES ('e', 'c2', '2024-03-01', 2,   0, 200,   NULL, 14);
INSERT INTO milk_records VALUES ('f', 'c2', '2024-03-01', 3,   0, 300,   NULL, 14);
"""


def _legacy_db(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(path) as con:
        con.executescript(LEGACY_SQL)
    con.close()


def test_find_duplicates_keeps_newest(tmp_path):
    path = tmp_path / "legacy.db"
    _legacy_db(path)
    con = sqlite3.connect(path)
    try:
        groups = find_duplicate_records(con)
    finally:
        con.close()
    by_key = {(g.contact_id, g.date): g for g in groups}
    assert set(by_key) == {("c1", "2024-03-01"), ("c2", "2024-03-01")}
    assert by_key[("c1", "2024-03-01")].keep_id == "c"
    assert set(by_key[("c1", "2024-03-01")].delete_ids) == {"a", "b"}
    # equal timestamps: the later insert wins
    assert by_key[("c2", "2024-03-01")].keep_id == "f"


def test_fix_duplicates_returns_deleted_count(tmp_path):
    path = tmp_path / "legacy.db"
    _legacy_db(path)
    con = sqlite3.connect(path)
    try:
        assert fix_duplicate_records(con) == 3
        con.commit()
        assert fix_duplicate_records(con) == 0
        ids = sorted(r[0] for r in con.execute("SELECT record_id FROM milk_records"))
    finally:
        con.close()
    assert ids == ["c", "d", "f"]


def test_opening_a_legacy_db_migrates_and_dedupes(tmp_path):
    path = tmp_path / "legacy.db"
    _legacy_db(path)
    con = get_connection(path)
    try:
        cols = {r[1] for r in con.execute("PRAGMA table_info(contacts)")}
        assert "opening_balance" in cols
        cols = {r[1] for r in con.execute("PRAGMA table_info(milk_records)")}
        assert "price_per_liter" in cols

        rows = con.execute(
            "SELECT record_id, morning_quantity FROM milk_records "
            "WHERE contact_id='c1' AND date='2024-03-01'"
        ).fetchall()
        assert [tuple(r) for r in rows] == [("c", 120)]

        indexes = {r[1] for r in con.execute("PRAGMA index_list(milk_records)")}
        assert "idx_milk_records_contact_date" in indexes
    finally:
        con.close()


def test_reopening_is_idempotent(db_path):
    get_connection(db_path).close()
    con = get_connection(db_path)
    try:
        version = con.execute("SELECT version FROM schema_version").fetchone()[0]
    finally:
        con.close()
    assert version == "1.0"
