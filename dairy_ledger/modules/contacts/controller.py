from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from ...constants import DEFAULT_RATE
from ...database import write_lock
from ...database.debounce import DebouncedWriter
from ...database.repositories import ContactsRepo, DomainError
from ...ledger import balances, rates, reports
from ...ledger.models import Contact, MilkRecord, Module
from ...ledger.periods import is_past_month, month_prefix
from ...utils.helpers import now_ms, today_str
from ...utils.validators import is_iso_date, is_month_prefix, parse_quantity

_log = logging.getLogger(__name__)


class ContactController:
    """
    Entry-side operations for one module (customers or suppliers).

    Key behavior:
      - Quantities typed by the user are read leniently (blank/garbage -> 0)
        before they reach the ledger core, which itself accepts numbers only.
      - A day with zero quantity and no existing record does not create a row;
        zeroing an existing day keeps the row (bill becomes 0).
      - New days are billed at the contact's current rate and stamped; edits
        to an existing day keep the rate that day was billed at.
      - Rate corrections are explicit calls and persist only the records
        they actually re-priced.
      - With lock_past_months=True, records and payments dated in a closed
        month cannot be changed.
      - Writes hold the connection's write lock (database.write_lock), which
        is shared with deferred entries running on the writer's timer thread.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        module: Module,
        *,
        today: Optional[str] = None,
        lock_past_months: bool = False,
        writer: Optional[DebouncedWriter] = None,
    ):
        self.conn = conn
        self.module = Module(module)
        self.repo = ContactsRepo(conn)
        self.lock_past_months = lock_past_months
        self.writer = writer
        self._today = today
        self._lock = write_lock(conn)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def today(self) -> str:
        return self._today or today_str()

    def _contact(self, contact_id: str) -> Contact:
        contact = self.repo.require(contact_id)
        if contact.module is not self.module:
            raise DomainError(
                f"Contact {contact_id} belongs to {contact.module.value}, not {self.module.value}."
            )
        return contact

    def _ensure_open(self, date: str) -> None:
        if not is_iso_date(date):
            raise DomainError(f"Invalid date: {date!r}.")
        if self.lock_past_months and is_past_month(month_prefix(date), self.today()):
            raise DomainError(f"{month_prefix(date)} is closed; entries can no longer change.")

    def _month(self, prefix: Optional[str]) -> str:
        if prefix is None:
            return month_prefix(self.today())
        if not is_month_prefix(prefix):
            raise DomainError(f"Invalid month: {prefix!r}.")
        return prefix

    # ------------------------------------------------------------------ #
    # Contacts
    # ------------------------------------------------------------------ #

    def list_contacts(self) -> list[Contact]:
        return self.repo.list_contacts(self.module)

    def get(self, contact_id: str) -> Contact:
        return self._contact(contact_id)

    def create_contact(
        self, name: str, *, price_per_liter: float = DEFAULT_RATE, opening_balance: int = 0
    ) -> Contact:
        with self._lock:
            contact_id = self.repo.create(
                name, self.module, price_per_liter=price_per_liter, opening_balance=opening_balance
            )
            return self._contact(contact_id)

    def update_contact(self, contact_id: str, *, name: str, opening_balance: int) -> Contact:
        """Name and opening balance only; the rate goes through the rate operations."""
        with self._lock:
            contact = self._contact(contact_id)
            self.repo.update(
                contact_id,
                name=name,
                price_per_liter=contact.price_per_liter,
                opening_balance=opening_balance,
            )
            return self._contact(contact_id)

    def delete_contact(self, contact_id: str) -> None:
        with self._lock:
            self._contact(contact_id)
            self.repo.delete(contact_id)

    # ------------------------------------------------------------------ #
    # Daily quantities
    # ------------------------------------------------------------------ #

    def enter_quantities(self, contact_id: str, date: str, morning, evening) -> Optional[MilkRecord]:
        """
        Upsert the (contact, date) record. Returns the saved record, or None
        when nothing was written (zero entry on an empty day).
        """
        self._ensure_open(date)
        m = parse_quantity(morning)
        e = parse_quantity(evening)
        if m < 0 or e < 0:
            raise DomainError("Quantities cannot be negative.")

        with self._lock:
            contact = self._contact(contact_id)
            if m == 0 and e == 0 and contact.record_for(date) is None:
                return None

            record = rates.price_record(contact, date, m, e, timestamp=now_ms())
            self.repo.records.upsert(contact_id, record)
            return record

    def enter_quantities_later(self, contact_id: str, date: str, morning, evening) -> None:
        """Same as enter_quantities, but written once typing for that cell settles."""
        if self.writer is None:
            raise DomainError("No debounced writer configured.")
        self.writer.submit(
            (contact_id, date), self.enter_quantities, contact_id, date, morning, evening
        )

    # ------------------------------------------------------------------ #
    # Payments
    # ------------------------------------------------------------------ #

    def add_payment(
        self, contact_id: str, amount: int, date: str, description: Optional[str] = None
    ) -> str:
        self._ensure_open(date)
        with self._lock:
            self._contact(contact_id)
            return self.repo.payments.add(
                contact_id, amount=amount, date=date, description=description
            )

    def update_payment(
        self, payment_id: str, amount: int, date: str, description: Optional[str] = None
    ) -> None:
        with self._lock:
            existing = self.repo.payments.get(payment_id)
            if existing is None:
                raise DomainError(f"Payment {payment_id} not found.")
            self._ensure_open(existing.date)
            self._ensure_open(date)
            self.repo.payments.update(
                payment_id, amount=amount, date=date, description=description
            )

    def delete_payment(self, payment_id: str) -> None:
        with self._lock:
            existing = self.repo.payments.get(payment_id)
            if existing is None:
                raise DomainError(f"Payment {payment_id} not found.")
            self._ensure_open(existing.date)
            self.repo.payments.delete(payment_id)

    # ------------------------------------------------------------------ #
    # Rate corrections
    # ------------------------------------------------------------------ #

    def _persist_rate_change(self, before: Contact, after: Contact) -> Contact:
        # caller holds self._lock: set_rate stays uncommitted until save_many
        old = set(before.records)
        changed = [r for r in after.records if r not in old]
        if after.price_per_liter != before.price_per_liter:
            self.repo.set_rate(after.id, after.price_per_liter, commit=False)
        n = self.repo.records.save_many(after.id, changed)
        _log.info(
            "Rate change for %s: rate %s -> %s, %d records re-priced",
            after.id, before.price_per_liter, after.price_per_liter, n,
        )
        return self._contact(after.id)

    def change_global_rate(
        self, contact_id: str, rate: float, *, rewrite_history: bool = False
    ) -> Contact:
        with self._lock:
            contact = self._contact(contact_id)
            updated = rates.change_global_rate(contact, rate, rewrite_history=rewrite_history)
            return self._persist_rate_change(contact, updated)

    def change_month_rate(self, contact_id: str, prefix: str, rate: float) -> Contact:
        with self._lock:
            contact = self._contact(contact_id)
            updated = rates.change_month_rate(contact, prefix, rate, today=self.today())
            return self._persist_rate_change(contact, updated)

    def change_day_rate(self, contact_id: str, date: str, rate: float) -> Contact:
        with self._lock:
            contact = self._contact(contact_id)
            updated = rates.change_day_rate(contact, date, rate)
            return self._persist_rate_change(contact, updated)

    # ------------------------------------------------------------------ #
    # Read side
    # ------------------------------------------------------------------ #

    def month_summary(self, contact_id: str, prefix: Optional[str] = None) -> balances.MonthSummary:
        return balances.month_summary(self._contact(contact_id), self._month(prefix))

    def month_ledger(
        self, contact_id: str, prefix: Optional[str] = None, *, all_days: bool = False
    ) -> reports.ContactMonthLedger:
        """Day-by-day deliveries of one contact for a month (the profile/PDF ledger)."""
        return reports.contact_month_ledger(
            self._contact(contact_id), self._month(prefix), all_days=all_days
        )

    def balance(self, contact_id: str, as_of: Optional[str] = None) -> int:
        return balances.cumulative_balance(self._contact(contact_id), as_of or self.today())
