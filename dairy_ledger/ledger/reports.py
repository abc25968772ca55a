# dairy_ledger/ledger/reports.py
"""
Portfolio roll-ups for the dashboard and the monthly statement, plus the
per-contact month ledger and the dashboard's "who delivered today" list.

"Profit" here is the month's sales bill minus its purchase bill. No operating
expenses are modelled.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .balances import (
    closing_balance,
    month_bill,
    month_milk,
    month_summary,
    MonthSummary,
)
from .errors import LedgerValidationError
from .models import Contact, Module
from .periods import days_in_month, shift_month
from .rates import effective_rate
from .validation import require_iso_date, require_month_prefix


def _check_module(contacts: Sequence[Contact], module: Module) -> None:
    for c in contacts:
        if c.module is not module:
            raise LedgerValidationError(
                "module", f"contact {c.id} is {c.module.value}, expected {module.value}."
            )


def monthly_total(contacts: Iterable[Contact], prefix: str) -> int:
    require_month_prefix(prefix)
    return sum(month_bill(c, prefix) for c in contacts)


def monthly_milk(contacts: Iterable[Contact], prefix: str) -> float:
    require_month_prefix(prefix)
    return sum(month_milk(c, prefix) for c in contacts)


def monthly_profit(
    sales: Iterable[Contact], purchases: Iterable[Contact], prefix: str
) -> int:
    return monthly_total(sales, prefix) - monthly_total(purchases, prefix)


@dataclass(frozen=True)
class OutstandingEntry:
    contact_id: str
    name: str
    balance: int


@dataclass(frozen=True)
class OutstandingList:
    module: Module
    entries: tuple[OutstandingEntry, ...]

    @property
    def total(self) -> int:
        return sum(e.balance for e in self.entries)

    @property
    def label(self) -> str:
        return self.module.balance_label


def outstanding_list(
    contacts: Iterable[Contact], prefix: str, module: Module
) -> OutstandingList:
    """
    Contacts still owing at the end of month `prefix`, in input order.
    Settled contacts and those in advance (balance <= 0) are left out.
    `module` labels the list and every contact must belong to it.
    """
    require_month_prefix(prefix)
    contacts = list(contacts)
    _check_module(contacts, module)
    entries = []
    for c in contacts:
        bal = closing_balance(c, prefix)
        if bal > 0:
            entries.append(OutstandingEntry(c.id, c.name, bal))
    return OutstandingList(module, tuple(entries))


@dataclass(frozen=True)
class DashboardSummary:
    month: str
    sale_total: int
    purchase_total: int
    receivables: OutstandingList
    payables: OutstandingList

    @property
    def profit(self) -> int:
        return self.sale_total - self.purchase_total

    @property
    def total_receivable(self) -> int:
        return self.receivables.total

    @property
    def total_payable(self) -> int:
        return self.payables.total


def dashboard_summary(
    sales: Iterable[Contact], purchases: Iterable[Contact], prefix: str
) -> DashboardSummary:
    sales = list(sales)
    purchases = list(purchases)
    return DashboardSummary(
        month=prefix,
        sale_total=monthly_total(sales, prefix),
        purchase_total=monthly_total(purchases, prefix),
        receivables=outstanding_list(sales, prefix, Module.SALE),
        payables=outstanding_list(purchases, prefix, Module.PURCHASE),
    )


# ---------------------------------------------------------------------------
# Monthly statement (one row per contact + grand totals)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StatementTotals:
    previous_balance: int = 0
    milk: float = 0
    bill: int = 0
    paid: int = 0
    closing_balance: int = 0


@dataclass(frozen=True)
class MonthlyStatement:
    module: Module
    month: str
    rows: tuple[MonthSummary, ...]
    totals: StatementTotals


def monthly_statement(
    contacts: Iterable[Contact], prefix: str, module: Module
) -> MonthlyStatement:
    require_month_prefix(prefix)
    contacts = list(contacts)
    _check_module(contacts, module)
    rows = tuple(month_summary(c, prefix) for c in contacts)
    totals = StatementTotals(
        previous_balance=sum(r.previous_balance for r in rows),
        milk=sum(r.milk for r in rows),
        bill=sum(r.bill for r in rows),
        paid=sum(r.paid for r in rows),
        closing_balance=sum(r.closing_balance for r in rows),
    )
    return MonthlyStatement(module, prefix, rows, totals)


# ---------------------------------------------------------------------------
# Contact month ledger (day-by-day deliveries of one contact)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LedgerDay:
    date: str
    morning_quantity: float
    evening_quantity: float
    total_quantity: float
    bill: int
    rate: Optional[float]


@dataclass(frozen=True)
class ContactMonthLedger:
    contact_id: str
    name: str
    module: Module
    month: str
    rows: tuple[LedgerDay, ...]
    previous_month: str
    next_month: str

    @property
    def total_milk(self) -> float:
        return sum(r.total_quantity for r in self.rows)

    @property
    def total_bill(self) -> int:
        return sum(r.bill for r in self.rows)


def contact_month_ledger(
    contact: Contact, prefix: str, *, all_days: bool = False
) -> ContactMonthLedger:
    """
    One row per calendar day of `prefix` on which the contact delivered milk,
    in date order. With all_days=True every day of the month gets a row
    (empty days as zeros with no rate), which is what an entry grid needs.
    """
    by_date = {r.date: r for r in contact.records}
    rows = []
    for day in days_in_month(prefix):
        record = by_date.get(day)
        if record is not None and record.total_quantity > 0:
            rows.append(
                LedgerDay(
                    date=day,
                    morning_quantity=record.morning_quantity,
                    evening_quantity=record.evening_quantity,
                    total_quantity=record.total_quantity,
                    bill=record.total_price,
                    rate=effective_rate(record, contact),
                )
            )
        elif all_days:
            rows.append(LedgerDay(day, 0.0, 0.0, 0.0, 0, None))
    return ContactMonthLedger(
        contact_id=contact.id,
        name=contact.name,
        module=contact.module,
        month=prefix,
        rows=tuple(rows),
        previous_month=shift_month(prefix, -1),
        next_month=shift_month(prefix, 1),
    )


# ---------------------------------------------------------------------------
# Daily detail (who delivered / bought on one day)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DailyEntry:
    contact_id: str
    name: str
    morning_quantity: float
    evening_quantity: float
    total_quantity: float


def daily_entries(contacts: Iterable[Contact], date: str) -> list[DailyEntry]:
    """Contacts with a non-zero record on `date`, in input order."""
    require_iso_date(date)
    out = []
    for c in contacts:
        record = c.record_for(date)
        if record is not None and record.total_quantity > 0:
            out.append(
                DailyEntry(
                    contact_id=c.id,
                    name=c.name,
                    morning_quantity=record.morning_quantity,
                    evening_quantity=record.evening_quantity,
                    total_quantity=record.total_quantity,
                )
            )
    return out


__all__ = [
    "monthly_total",
    "monthly_milk",
    "monthly_profit",
    "OutstandingEntry",
    "OutstandingList",
    "outstanding_list",
    "DashboardSummary",
    "dashboard_summary",
    "StatementTotals",
    "MonthlyStatement",
    "monthly_statement",
    "LedgerDay",
    "ContactMonthLedger",
    "contact_month_ledger",
    "DailyEntry",
    "daily_entries",
]
