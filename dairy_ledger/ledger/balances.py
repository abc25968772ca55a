# dairy_ledger/ledger/balances.py
"""
Balance calculator.

Sign convention: a positive balance means the contact owes the business.
For a supplier the same number is read as "we owe them"; the arithmetic is
identical for both modules and only the label differs (balance_label).

    cumulative(as_of) = opening_balance
                      + Σ record.total_price  (record.date  <= as_of)
                      - Σ payment.amount      (payment.date <= as_of)

A monthly statement splits the month-end figure into a carry-forward part
and the month's own activity:

    previous_balance(m) + month_bill(m) - month_paid(m) == closing_balance(m)

Money is whole currency units, so every balance here is an int.
"""
from __future__ import annotations

from dataclasses import dataclass

from .models import Contact, Module
from .periods import before, in_period, month_end, month_start, on_or_before
from .validation import require_date_bound, require_month_prefix


def cumulative_balance(contact: Contact, as_of: str) -> int:
    require_date_bound(as_of, "as_of")
    billed = sum(r.total_price for r in on_or_before(contact.records, as_of))
    paid = sum(p.amount for p in on_or_before(contact.payments, as_of))
    return contact.opening_balance + billed - paid


def previous_balance(contact: Contact, prefix: str) -> int:
    """Balance carried into month `prefix` (everything strictly before its first day)."""
    start = month_start(prefix)
    billed = sum(r.total_price for r in before(contact.records, start))
    paid = sum(p.amount for p in before(contact.payments, start))
    return contact.opening_balance + billed - paid


def closing_balance(contact: Contact, prefix: str) -> int:
    return cumulative_balance(contact, month_end(prefix))


def month_bill(contact: Contact, prefix: str) -> int:
    return sum(r.total_price for r in in_period(contact.records, prefix))


def month_paid(contact: Contact, prefix: str) -> int:
    return sum(p.amount for p in in_period(contact.payments, prefix))


def month_milk(contact: Contact, prefix: str) -> float:
    return sum(r.total_quantity for r in in_period(contact.records, prefix))


def month_balance(contact: Contact, prefix: str) -> int:
    """This month's activity only (no carry-forward)."""
    return month_bill(contact, prefix) - month_paid(contact, prefix)


@dataclass(frozen=True)
class MonthSummary:
    contact_id: str
    name: str
    month: str
    previous_balance: int
    milk: float
    bill: int
    paid: int
    closing_balance: int

    @property
    def month_balance(self) -> int:
        return self.bill - self.paid


def month_summary(contact: Contact, prefix: str) -> MonthSummary:
    require_month_prefix(prefix)
    prev = previous_balance(contact, prefix)
    bill = month_bill(contact, prefix)
    paid = month_paid(contact, prefix)
    return MonthSummary(
        contact_id=contact.id,
        name=contact.name,
        month=prefix,
        previous_balance=prev,
        milk=month_milk(contact, prefix),
        bill=bill,
        paid=paid,
        closing_balance=prev + bill - paid,
    )


def balance_label(balance: int, module: Module) -> str:
    """'receivable' / 'payable' when owed, 'advance' when in credit, else 'settled'."""
    if balance > 0:
        return module.balance_label
    if balance < 0:
        return "advance"
    return "settled"


__all__ = [
    "cumulative_balance",
    "previous_balance",
    "closing_balance",
    "month_bill",
    "month_paid",
    "month_milk",
    "month_balance",
    "MonthSummary",
    "month_summary",
    "balance_label",
]
