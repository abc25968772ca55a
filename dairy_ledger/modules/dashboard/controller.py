from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from ...database import write_lock
from ...database.repositories import ContactsRepo, DomainError, FarmRecordsRepo
from ...ledger import reports, stock
from ...ledger.models import FarmRecord, Module
from ...ledger.periods import month_prefix
from ...utils.helpers import now_ms, today_str
from ...utils.validators import is_iso_date, parse_quantity, try_parse_float

_log = logging.getLogger(__name__)


class DashboardController:
    """
    Main-menu figures: the month's sale/purchase totals and profit, the
    receivable/payable lists, and the day's stock check with its manual
    opening-stock override.
    """

    def __init__(self, conn: sqlite3.Connection, *, today: Optional[str] = None):
        self.conn = conn
        self.contacts = ContactsRepo(conn)
        self.farm = FarmRecordsRepo(conn)
        self._today = today
        self._lock = write_lock(conn)

    def today(self) -> str:
        return self._today or today_str()

    @staticmethod
    def _check_date(date: str) -> str:
        if not is_iso_date(date):
            raise DomainError(f"Invalid date: {date!r}.")
        return date

    # ---- month figures ----------------------------------------------------

    def summary(self, prefix: Optional[str] = None) -> reports.DashboardSummary:
        prefix = prefix or month_prefix(self.today())
        return reports.dashboard_summary(
            self.contacts.list_contacts(Module.SALE),
            self.contacts.list_contacts(Module.PURCHASE),
            prefix,
        )

    # ---- daily stock ------------------------------------------------------

    def daily_stock(self, date: Optional[str] = None) -> stock.DailyStock:
        date = self._check_date(date or self.today())
        return stock.daily_stock(
            self.farm.list_all(),
            self.contacts.list_contacts(Module.PURCHASE),
            self.contacts.list_contacts(Module.SALE),
            date,
        )

    def daily_entries(
        self, module: Module, date: Optional[str] = None
    ) -> list[reports.DailyEntry]:
        """Contacts of `module` with milk on the day; len() is the dashboard count."""
        date = self._check_date(date or self.today())
        return reports.daily_entries(self.contacts.list_contacts(Module(module)), date)

    def farm_records(self) -> list[FarmRecord]:
        return self.farm.list_all()

    def record_farm_production(self, date: str, morning, evening) -> Optional[FarmRecord]:
        """Upsert the day's own production; a zero entry on an empty day writes nothing."""
        self._check_date(date)
        m = parse_quantity(morning)
        e = parse_quantity(evening)
        if m < 0 or e < 0:
            raise DomainError("Quantities cannot be negative.")
        with self._lock:
            existing = self.farm.get_by_date(date)
            if m == 0 and e == 0 and existing is None:
                return None
            record = stock.record_production(
                [existing] if existing else [], date, m, e, timestamp=now_ms()
            )
            self.farm.upsert(record)
            return record

    def set_opening_stock(self, date: str, value) -> FarmRecord:
        self._check_date(date)
        if isinstance(value, str):
            ok, parsed = try_parse_float(value)
            if not ok:
                raise DomainError(f"Opening stock must be a number, got {value!r}.")
            value = parsed
        with self._lock:
            existing = self.farm.get_by_date(date)
            record = stock.set_opening_stock(
                [existing] if existing else [], date, value, timestamp=now_ms()
            )
            self.farm.upsert(record)
        _log.info("Opening stock for %s fixed at %s", date, value)
        return record

    def revert_opening_stock(self, date: str) -> Optional[FarmRecord]:
        self._check_date(date)
        with self._lock:
            existing = self.farm.get_by_date(date)
            record = stock.revert_opening_stock([existing] if existing else [], date)
            if record is None:
                return None
            self.farm.upsert(record)
        _log.info("Opening stock for %s reverted to automatic", date)
        return record
