from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from ...constants import DEFAULT_RATE
from ...ledger.models import Contact, Module, round_currency
from ...utils.helpers import new_id, now_ms
from ...utils.validators import is_non_negative_number, is_whole_number
from .errors import DomainError
from .milk_records_repo import MilkRecordsRepo
from .payments_repo import PaymentsRepo

_log = logging.getLogger(__name__)

_COLUMNS = "contact_id, name, module, price_per_liter, opening_balance, created_at"


class ContactsRepo:
    """
    Customers (module SALE) and suppliers (module PURCHASE).

    Reads return fully loaded Contact snapshots (records + payments) ready for
    the ledger core. Deleting a contact cascades to its records and payments.
    """

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn
        self.records = MilkRecordsRepo(conn)
        self.payments = PaymentsRepo(conn)

    # ---- Internal helpers -------------------------------------------------

    @staticmethod
    def _normalize_text(s: str | None) -> str | None:
        if s is None:
            return None
        return s.strip()

    @staticmethod
    def _ensure_non_empty(value: str | None, field_label: str) -> None:
        if value is None or value.strip() == "":
            raise DomainError(f"{field_label} cannot be empty.")

    @staticmethod
    def _ensure_rate(value) -> float:
        if not is_non_negative_number(value):
            raise DomainError("Rate must be a non-negative number.")
        return float(value)

    @staticmethod
    def _ensure_balance(value) -> int:
        if not is_whole_number(value):
            raise DomainError(f"Opening balance must be a whole amount, got {value!r}.")
        return int(float(value))

    def _row_to_contact(self, r: sqlite3.Row, records=(), payments=()) -> Contact:
        return Contact(
            id=r["contact_id"],
            name=r["name"],
            module=Module(r["module"]),
            price_per_liter=float(r["price_per_liter"]),
            opening_balance=round_currency(r["opening_balance"] or 0),
            records=records,
            payments=payments,
            created_at=int(r["created_at"] or 0),
        )

    # ---- Queries ----------------------------------------------------------

    def list_contacts(self, module: Module) -> list[Contact]:
        """All contacts of a module in insertion order, records and payments loaded."""
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM contacts WHERE module=? ORDER BY created_at, rowid",
            (Module(module).value,),
        ).fetchall()
        ids = [r["contact_id"] for r in rows]
        records = self.records.list_for_contacts(ids)
        payments = self.payments.list_for_contacts(ids)
        return [
            self._row_to_contact(r, records[r["contact_id"]], payments[r["contact_id"]])
            for r in rows
        ]

    def get(self, contact_id: str) -> Contact | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM contacts WHERE contact_id=?", (contact_id,)
        ).fetchone()
        if not r:
            return None
        return self._row_to_contact(
            r,
            self.records.list_for_contact(contact_id),
            self.payments.list_for_contact(contact_id),
        )

    def require(self, contact_id: str) -> Contact:
        contact = self.get(contact_id)
        if contact is None:
            raise DomainError(f"Contact {contact_id} not found.")
        return contact

    # ---- Mutations --------------------------------------------------------

    def create(
        self,
        name: str,
        module: Module,
        *,
        price_per_liter: float = DEFAULT_RATE,
        opening_balance: int = 0,
    ) -> str:
        """Insert a new contact with no records or payments."""
        self._ensure_non_empty(name, "Name")
        rate = self._ensure_rate(price_per_liter)
        balance = self._ensure_balance(opening_balance)

        contact_id = new_id()
        self.conn.execute(
            "INSERT INTO contacts(contact_id, name, module, price_per_liter, opening_balance, created_at) "
            "VALUES (?,?,?,?,?,?)",
            (contact_id, self._normalize_text(name), Module(module).value, rate, balance, now_ms()),
        )
        self.conn.commit()
        _log.info("Created %s contact %s (%s)", Module(module).value, contact_id, name)
        return contact_id

    def update(
        self,
        contact_id: str,
        *,
        name: str,
        price_per_liter: float,
        opening_balance: int,
    ) -> None:
        self._ensure_non_empty(name, "Name")
        rate = self._ensure_rate(price_per_liter)
        balance = self._ensure_balance(opening_balance)
        cur = self.conn.execute(
            "UPDATE contacts SET name=?, price_per_liter=?, opening_balance=? WHERE contact_id=?",
            (self._normalize_text(name), rate, balance, contact_id),
        )
        if cur.rowcount == 0:
            raise DomainError(f"Contact {contact_id} not found.")
        self.conn.commit()

    def set_rate(self, contact_id: str, price_per_liter: float, *, commit: bool = True) -> None:
        rate = self._ensure_rate(price_per_liter)
        cur = self.conn.execute(
            "UPDATE contacts SET price_per_liter=? WHERE contact_id=?", (rate, contact_id)
        )
        if cur.rowcount == 0:
            raise DomainError(f"Contact {contact_id} not found.")
        if commit:
            self.conn.commit()

    def delete(self, contact_id: str) -> None:
        """Delete the contact; its records and payments go with it (FK cascade)."""
        cur = self.conn.execute("DELETE FROM contacts WHERE contact_id=?", (contact_id,))
        if cur.rowcount == 0:
            raise DomainError(f"Contact {contact_id} not found.")
        self.conn.commit()
        _log.info("Deleted contact %s", contact_id)

    def count(self, module: Optional[Module] = None) -> int:
        if module is None:
            return int(self.conn.execute("SELECT COUNT(*) FROM contacts").fetchone()[0])
        return int(
            self.conn.execute(
                "SELECT COUNT(*) FROM contacts WHERE module=?", (Module(module).value,)
            ).fetchone()[0]
        )
