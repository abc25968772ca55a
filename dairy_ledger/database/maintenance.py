# dairy_ledger/database/maintenance.py
"""
Cleanup of duplicate milk records.

Older databases had no unique (contact_id, date) index, and rapid typing in
the entry grid could insert the same day several times (1, 12, 120 ...).
The latest insert is the one the user meant, so it is kept and the rest go.

Public API
----------
- find_duplicate_records(conn) -> list[DuplicateGroup]
- fix_duplicate_records(conn) -> int   (rows deleted)
"""
from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass

__all__ = ["DuplicateGroup", "find_duplicate_records", "fix_duplicate_records"]

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DuplicateGroup:
    contact_id: str
    date: str
    keep_id: str
    delete_ids: tuple[str, ...]


def find_duplicate_records(conn: sqlite3.Connection) -> list[DuplicateGroup]:
    """Groups of records sharing (contact_id, date), newest first within each group."""
    rows = conn.execute(
        """
        SELECT m.record_id, m.contact_id, m.date
        FROM milk_records m
        JOIN (
            SELECT contact_id, date
            FROM milk_records
            GROUP BY contact_id, date
            HAVING COUNT(*) > 1
        ) d ON d.contact_id = m.contact_id AND d.date = m.date
        ORDER BY m.contact_id, m.date, m.created_at DESC, m.rowid DESC
        """
    ).fetchall()

    groups: list[DuplicateGroup] = []
    current_key = None
    ids: list[str] = []
    for r in rows:
        key = (r[1], r[2])
        if key != current_key:
            if current_key is not None:
                groups.append(DuplicateGroup(current_key[0], current_key[1], ids[0], tuple(ids[1:])))
            current_key = key
            ids = []
        ids.append(r[0])
    if current_key is not None:
        groups.append(DuplicateGroup(current_key[0], current_key[1], ids[0], tuple(ids[1:])))
    return groups


def fix_duplicate_records(conn: sqlite3.Connection) -> int:
    """Delete all but the newest record of each duplicate group. Caller commits."""
    deleted = 0
    for g in find_duplicate_records(conn):
        _log.info(
            "Duplicate %s/%s: keeping %s, deleting %s",
            g.contact_id, g.date, g.keep_id, ", ".join(g.delete_ids),
        )
        conn.executemany(
            "DELETE FROM milk_records WHERE record_id = ?",
            [(i,) for i in g.delete_ids],
        )
        deleted += len(g.delete_ids)
    return deleted
