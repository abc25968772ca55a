from __future__ import annotations

import logging
import sqlite3

from ...ledger.models import FarmRecord, OverrideState, StockOverride

_log = logging.getLogger(__name__)

_COLUMNS = (
    "record_id, date, morning_quantity, evening_quantity, "
    "opening_stock, opening_stock_state, created_at"
)


def _override_from_row(r: sqlite3.Row) -> StockOverride:
    state = OverrideState(r["opening_stock_state"] or OverrideState.UNSET.value)
    if state is OverrideState.MANUAL:
        return StockOverride.manual(float(r["opening_stock"]))
    return StockOverride(state)


def _row_to_farm_record(r: sqlite3.Row) -> FarmRecord:
    return FarmRecord(
        id=r["record_id"],
        date=r["date"],
        morning_quantity=float(r["morning_quantity"] or 0),
        evening_quantity=float(r["evening_quantity"] or 0),
        opening_stock=_override_from_row(r),
        timestamp=int(r["created_at"] or 0),
    )


class FarmRecordsRepo:
    """
    Own-farm production, one row per day.

    The opening-stock override is stored as (opening_stock, opening_stock_state)
    so the three states survive a round trip:
      • 'unset'  + NULL   never overridden
      • 'auto'   + NULL   overridden once, reverted to automatic
      • 'manual' + value  fixed by hand (an anchor for later days)
    """

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    # ---- Queries ----------------------------------------------------------

    def list_all(self) -> list[FarmRecord]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM farm_records ORDER BY date DESC"
        ).fetchall()
        return [_row_to_farm_record(r) for r in rows]

    def get_by_date(self, date: str) -> FarmRecord | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM farm_records WHERE date=?", (date,)
        ).fetchone()
        return _row_to_farm_record(r) if r else None

    # ---- Mutations --------------------------------------------------------

    def upsert(self, record: FarmRecord) -> None:
        """Insert or update the day's row; an existing row keeps its record_id."""
        override = record.opening_stock
        self.conn.execute(
            """
            INSERT INTO farm_records
                (record_id, date, morning_quantity, evening_quantity,
                 opening_stock, opening_stock_state, created_at)
            VALUES (?,?,?,?,?,?,?)
            ON CONFLICT(date) DO UPDATE SET
                morning_quantity    = excluded.morning_quantity,
                evening_quantity    = excluded.evening_quantity,
                opening_stock       = excluded.opening_stock,
                opening_stock_state = excluded.opening_stock_state
            """,
            (
                record.id,
                record.date,
                record.morning_quantity,
                record.evening_quantity,
                override.value if override.is_manual else None,
                override.state.value,
                record.timestamp,
            ),
        )
        self.conn.commit()
        _log.info(
            "Saved farm record %s: %s L, opening stock %s",
            record.date, record.total_quantity, override.state.value,
        )
