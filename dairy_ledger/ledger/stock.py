# dairy_ledger/ledger/stock.py
"""
Daily stock reconciliation.

Milk on hand is rebuilt from the most recent day whose opening stock a human
fixed by hand (the anchor), not from the start of history:

    previous_stock(D) = anchor.opening_stock
                      + Σ (farm + purchased - sold)  for anchor.date <= d < D

The anchor's own day is included: its manual figure is an *opening* stock,
so that day's movements still have to be added to reach its closing stock.
Without an anchor the base is 0 and the walk covers the whole history.

For the day itself:

    opening         = manual override of D, else previous_stock(D)
    total_available = opening + farm[D] + purchased[D]
    net_remaining   = total_available - sold[D]     (negative = oversold)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..utils.helpers import new_id
from .validation import require_iso_date, require_number
from .models import Contact, FarmRecord, StockOverride
from .periods import before, between, on_date

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DailyStock:
    date: str
    farm: float
    purchase: float
    sale: float
    previous_stock: float
    opening_override: StockOverride
    anchor_date: Optional[str]

    @property
    def is_manual(self) -> bool:
        return self.opening_override.is_manual

    @property
    def opening_stock(self) -> float:
        if self.opening_override.is_manual:
            return self.opening_override.value  # type: ignore[return-value]
        return self.previous_stock

    @property
    def total_available(self) -> float:
        return self.opening_stock + self.farm + self.purchase

    @property
    def net_remaining(self) -> float:
        return self.total_available - self.sale

    @property
    def is_oversold(self) -> bool:
        return self.net_remaining < 0


def farm_record_for(farm_records: Iterable[FarmRecord], date: str) -> Optional[FarmRecord]:
    for r in farm_records:
        if r.date == date:
            return r
    return None


def find_anchor(farm_records: Iterable[FarmRecord], date: str) -> Optional[FarmRecord]:
    """Latest farm day strictly before `date` carrying a manual opening stock."""
    history = sorted(before(farm_records, date), key=lambda r: r.date, reverse=True)
    for r in history:
        if r.opening_stock.is_manual:
            return r
    return None


def _contacts_quantity(contacts: Sequence[Contact], lower: str, upper: str) -> float:
    return sum(
        r.total_quantity for c in contacts for r in between(c.records, lower, upper)
    )


def _contacts_quantity_on(contacts: Sequence[Contact], date: str) -> float:
    return sum(r.total_quantity for c in contacts for r in on_date(c.records, date))


def previous_stock(
    farm_records: Iterable[FarmRecord],
    purchases: Iterable[Contact],
    sales: Iterable[Contact],
    date: str,
) -> float:
    """Closing stock of the day before `date`."""
    require_iso_date(date)
    farm_records = list(farm_records)
    purchases = list(purchases)
    sales = list(sales)

    anchor = find_anchor(farm_records, date)
    base = anchor.opening_stock.value if anchor is not None else 0
    since = anchor.date if anchor is not None else ""

    farm = sum(r.total_quantity for r in between(farm_records, since, date))
    bought = _contacts_quantity(purchases, since, date)
    sold = _contacts_quantity(sales, since, date)
    return base + farm + bought - sold


def daily_stock(
    farm_records: Iterable[FarmRecord],
    purchases: Iterable[Contact],
    sales: Iterable[Contact],
    date: str,
) -> DailyStock:
    farm_records = list(farm_records)
    purchases = list(purchases)
    sales = list(sales)

    prev = previous_stock(farm_records, purchases, sales, date)
    anchor = find_anchor(farm_records, date)
    today = farm_record_for(farm_records, date)

    result = DailyStock(
        date=date,
        farm=today.total_quantity if today is not None else 0,
        purchase=_contacts_quantity_on(purchases, date),
        sale=_contacts_quantity_on(sales, date),
        previous_stock=prev,
        opening_override=today.opening_stock if today is not None else StockOverride.unset(),
        anchor_date=anchor.date if anchor is not None else None,
    )
    _log.debug(
        "Stock %s: opening=%s available=%s remaining=%s",
        date, result.opening_stock, result.total_available, result.net_remaining,
    )
    return result


# ---------------------------------------------------------------------------
# Farm-day upserts (pure; the caller persists the returned record)
# ---------------------------------------------------------------------------

def record_production(
    farm_records: Iterable[FarmRecord],
    date: str,
    morning: float,
    evening: float,
    *,
    timestamp: int = 0,
) -> FarmRecord:
    """The day's farm record with new quantities; any override is kept."""
    existing = farm_record_for(farm_records, date)
    if existing is not None:
        return existing.with_quantities(morning, evening)
    return FarmRecord(
        id=new_id(),
        date=date,
        morning_quantity=morning,
        evening_quantity=evening,
        timestamp=timestamp,
    )


def set_opening_stock(
    farm_records: Iterable[FarmRecord], date: str, value: float, *, timestamp: int = 0
) -> FarmRecord:
    """Fix the day's opening stock by hand; the day becomes an anchor for later days."""
    require_number(value, "opening_stock", allow_negative=True)
    existing = farm_record_for(farm_records, date)
    if existing is None:
        existing = FarmRecord(id=new_id(), date=date, timestamp=timestamp)
    return existing.with_override(StockOverride.manual(value))


def revert_opening_stock(
    farm_records: Iterable[FarmRecord], date: str
) -> Optional[FarmRecord]:
    """Return the day to automatic calculation. None when there is no such day."""
    existing = farm_record_for(farm_records, date)
    if existing is None:
        return None
    return existing.with_override(StockOverride.auto())


__all__ = [
    "DailyStock",
    "farm_record_for",
    "find_anchor",
    "previous_stock",
    "daily_stock",
    "record_production",
    "set_opening_stock",
    "revert_opening_stock",
]
