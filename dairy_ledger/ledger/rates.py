# dairy_ledger/ledger/rates.py
"""
Rate resolution and the explicit rate-correction operations.

A record's bill is priced once, when its quantity is entered, and the rate
used is stamped onto the record. Later changes to a contact's global rate do
not touch stamped records. The only ways to re-price history are the three
named corrections below, each a deliberate user action:

  • change_global_rate(..., rewrite_history=True)  every record
  • change_month_rate(...)                         records of one month
  • change_day_rate(...)                           one record
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from ..utils.helpers import new_id
from .validation import require_iso_date, require_number
from .errors import LedgerValidationError
from .models import Contact, MilkRecord, round_currency
from .periods import in_month, is_past_month

_log = logging.getLogger(__name__)


def effective_rate(record: MilkRecord, contact: Contact) -> float:
    """
    Rate a record is billed at:
      1) its own snapshot, when stamped;
      2) else the rate implied by a legacy bill (total_price / total_quantity);
      3) else the contact's current global rate.
    """
    if record.price_per_liter is not None:
        return record.price_per_liter
    qty = record.total_quantity
    if qty > 0 and record.total_price > 0:
        return record.total_price / qty
    return contact.price_per_liter


def restamp(record: MilkRecord, rate: float) -> MilkRecord:
    """Stamp `rate` on the record and recompute its bill."""
    require_number(rate, "price_per_liter")
    return replace(
        record,
        price_per_liter=rate,
        total_price=round_currency(record.total_quantity * rate),
    )


def price_record(
    contact: Contact,
    date: str,
    morning: float,
    evening: float,
    *,
    record_id: Optional[str] = None,
    timestamp: int = 0,
) -> MilkRecord:
    """
    Build the record for (contact, date) after a quantity entry.

    An existing record keeps the rate it was billed at; a new record is
    stamped with the contact's current rate.
    """
    require_iso_date(date)
    existing = contact.record_for(date)
    if existing is not None:
        rate = effective_rate(existing, contact)
        return restamp(existing.with_quantities(morning, evening), rate)

    record = MilkRecord(
        id=record_id or new_id(),
        date=date,
        morning_quantity=morning,
        evening_quantity=evening,
        timestamp=timestamp,
    )
    return restamp(record, contact.price_per_liter)


# ---------------------------------------------------------------------------
# Rate corrections
# ---------------------------------------------------------------------------

def change_global_rate(
    contact: Contact, rate: float, *, rewrite_history: bool = False
) -> Contact:
    """
    Set the contact's rate for future entries.

    With rewrite_history=True every existing record is re-stamped with `rate`
    and re-billed. Without it, existing records are left exactly as they are.
    """
    require_number(rate, "price_per_liter")
    updated = replace(contact, price_per_liter=rate)
    if rewrite_history:
        _log.info(
            "Re-pricing all %d records of contact %s at %s",
            len(contact.records), contact.id, rate,
        )
        updated = updated.with_records(restamp(r, rate) for r in contact.records)
    return updated


def change_month_rate(
    contact: Contact, prefix: str, rate: float, *, today: str
) -> Contact:
    """
    Re-price only the records dated in month `prefix`.

    The contact's global rate follows only when the month is the current one
    or lies in the future; a closed month never moves the forward rate.
    """
    require_number(rate, "price_per_liter")
    records = tuple(
        restamp(r, rate) if in_month(r.date, prefix) else r for r in contact.records
    )
    updated = contact.with_records(records)
    if not is_past_month(prefix, today):
        updated = replace(updated, price_per_liter=rate)
    _log.info("Re-priced month %s of contact %s at %s", prefix, contact.id, rate)
    return updated


def change_day_rate(contact: Contact, date: str, rate: float) -> Contact:
    """Re-price exactly one day's record; nothing else changes."""
    require_iso_date(date)
    existing = contact.record_for(date)
    if existing is None:
        raise LedgerValidationError("date", f"no record on {date} for contact {contact.id}.")
    return contact.upsert_record(restamp(existing, rate))


__all__ = [
    "effective_rate",
    "restamp",
    "price_record",
    "change_global_rate",
    "change_month_rate",
    "change_day_rate",
]
