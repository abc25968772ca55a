from __future__ import annotations

import logging
import sqlite3
from typing import Iterable

from ...ledger.models import MilkRecord, round_currency

_log = logging.getLogger(__name__)

_COLUMNS = (
    "record_id, contact_id, date, morning_quantity, evening_quantity, "
    "total_price, price_per_liter, image_url, created_at"
)


def _row_to_record(r: sqlite3.Row) -> MilkRecord:
    return MilkRecord(
        id=r["record_id"],
        date=r["date"],
        morning_quantity=float(r["morning_quantity"] or 0),
        evening_quantity=float(r["evening_quantity"] or 0),
        total_price=round_currency(r["total_price"] or 0),
        price_per_liter=None if r["price_per_liter"] is None else float(r["price_per_liter"]),
        image_url=r["image_url"],
        timestamp=int(r["created_at"] or 0),
    )


class MilkRecordsRepo:
    """
    Daily milk records, at most one per (contact, date).

    upsert() relies on the unique (contact_id, date) index: a second entry for
    the same day updates the existing row in place and keeps its record_id.
    """

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    # ---- Queries ----------------------------------------------------------

    def list_for_contact(self, contact_id: str) -> list[MilkRecord]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM milk_records WHERE contact_id=? ORDER BY created_at, rowid",
            (contact_id,),
        ).fetchall()
        return [_row_to_record(r) for r in rows]

    def list_for_contacts(self, contact_ids: Iterable[str]) -> dict[str, list[MilkRecord]]:
        out: dict[str, list[MilkRecord]] = {cid: [] for cid in contact_ids}
        if not out:
            return out
        marks = ",".join("?" for _ in out)
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM milk_records WHERE contact_id IN ({marks}) "
            "ORDER BY created_at, rowid",
            tuple(out),
        ).fetchall()
        for r in rows:
            out[r["contact_id"]].append(_row_to_record(r))
        return out

    def get_by_date(self, contact_id: str, date: str) -> MilkRecord | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM milk_records WHERE contact_id=? AND date=?",
            (contact_id, date),
        ).fetchone()
        return _row_to_record(r) if r else None

    # ---- Mutations --------------------------------------------------------

    def _upsert_no_commit(self, contact_id: str, record: MilkRecord) -> None:
        self.conn.execute(
            """
            INSERT INTO milk_records
                (record_id, contact_id, date, morning_quantity, evening_quantity,
                 total_price, price_per_liter, image_url, created_at)
            VALUES (?,?,?,?,?,?,?,?,?)
            ON CONFLICT(contact_id, date) DO UPDATE SET
                morning_quantity = excluded.morning_quantity,
                evening_quantity = excluded.evening_quantity,
                total_price      = excluded.total_price,
                price_per_liter  = excluded.price_per_liter,
                image_url        = COALESCE(excluded.image_url, milk_records.image_url)
            """,
            (
                record.id,
                contact_id,
                record.date,
                record.morning_quantity,
                record.evening_quantity,
                record.total_price,
                record.price_per_liter,
                record.image_url,
                record.timestamp,
            ),
        )

    def upsert(self, contact_id: str, record: MilkRecord) -> None:
        self._upsert_no_commit(contact_id, record)
        self.conn.commit()
        _log.info(
            "Saved milk record %s/%s: %s L, bill %s",
            contact_id, record.date, record.total_quantity, record.total_price,
        )

    def save_many(self, contact_id: str, records: Iterable[MilkRecord]) -> int:
        """Write several re-priced records in one transaction. Returns the count."""
        n = 0
        with self.conn:
            for rec in records:
                self._upsert_no_commit(contact_id, rec)
                n += 1
        return n
