from __future__ import annotations

import logging
import sqlite3
from typing import Iterable, Optional

from ...ledger.models import Payment, round_currency
from ...utils.helpers import new_id, now_ms
from ...utils.validators import is_iso_date, is_strictly_positive_number, is_whole_number
from .errors import DomainError

_log = logging.getLogger(__name__)

_COLUMNS = "payment_id, contact_id, amount, date, description, created_at"


def _row_to_payment(r: sqlite3.Row) -> Payment:
    return Payment(
        id=r["payment_id"],
        amount=round_currency(r["amount"]),
        date=r["date"],
        description=r["description"],
        timestamp=int(r["created_at"] or 0),
    )


class PaymentsRepo:
    """
    Cash received from customers / paid to suppliers.
    Many payments may share a date; each is addressed by payment_id.
    """

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    # ---- Internal helpers -------------------------------------------------

    @staticmethod
    def _validate(amount, date: str) -> int:
        if not is_strictly_positive_number(amount):
            raise DomainError("Payment amount must be a positive number.")
        if not is_whole_number(amount):
            raise DomainError(f"Payment amount must be a whole amount, got {amount!r}.")
        if not is_iso_date(date):
            raise DomainError(f"Invalid payment date: {date!r}.")
        return int(float(amount))

    @staticmethod
    def _normalize_description(description: Optional[str]) -> Optional[str]:
        if description is None:
            return None
        description = description.strip()
        return description or None

    # ---- Queries ----------------------------------------------------------

    def list_for_contact(self, contact_id: str) -> list[Payment]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM payments WHERE contact_id=? ORDER BY created_at, rowid",
            (contact_id,),
        ).fetchall()
        return [_row_to_payment(r) for r in rows]

    def list_for_contacts(self, contact_ids: Iterable[str]) -> dict[str, list[Payment]]:
        out: dict[str, list[Payment]] = {cid: [] for cid in contact_ids}
        if not out:
            return out
        marks = ",".join("?" for _ in out)
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM payments WHERE contact_id IN ({marks}) "
            "ORDER BY created_at, rowid",
            tuple(out),
        ).fetchall()
        for r in rows:
            out[r["contact_id"]].append(_row_to_payment(r))
        return out

    def get(self, payment_id: str) -> Payment | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM payments WHERE payment_id=?", (payment_id,)
        ).fetchone()
        return _row_to_payment(r) if r else None

    # ---- Mutations --------------------------------------------------------

    def add(
        self,
        contact_id: str,
        *,
        amount: int,
        date: str,
        description: Optional[str] = None,
    ) -> str:
        amount = self._validate(amount, date)
        payment_id = new_id()
        self.conn.execute(
            "INSERT INTO payments(payment_id, contact_id, amount, date, description, created_at) "
            "VALUES (?,?,?,?,?,?)",
            (payment_id, contact_id, amount, date,
             self._normalize_description(description), now_ms()),
        )
        self.conn.commit()
        _log.info("Payment %s of %s on %s for contact %s", payment_id, amount, date, contact_id)
        return payment_id

    def update(
        self,
        payment_id: str,
        *,
        amount: int,
        date: str,
        description: Optional[str] = None,
    ) -> None:
        amount = self._validate(amount, date)
        cur = self.conn.execute(
            "UPDATE payments SET amount=?, date=?, description=? WHERE payment_id=?",
            (amount, date, self._normalize_description(description), payment_id),
        )
        if cur.rowcount == 0:
            raise DomainError(f"Payment {payment_id} not found.")
        self.conn.commit()

    def delete(self, payment_id: str) -> None:
        cur = self.conn.execute("DELETE FROM payments WHERE payment_id=?", (payment_id,))
        if cur.rowcount == 0:
            raise DomainError(f"Payment {payment_id} not found.")
        self.conn.commit()
        _log.info("Deleted payment %s", payment_id)
