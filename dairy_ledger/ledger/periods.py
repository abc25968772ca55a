# dairy_ledger/ledger/periods.py
"""
Period filter: month buckets over date-stamped items.

All ordering is plain string comparison on zero-padded ISO dates, which sorts
the same way as the calendar. A month's upper bound is written as
'{prefix}-31' even for shorter months; it is only ever used as an inclusive
"<=" bound, never as an exact match, and "as of end of month" balance queries
rely on it. Real month lengths are only needed for listing the days of a
month (days_in_month).
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date as _date
from typing import Generic, Iterable, Protocol, TypeVar

from ..constants import MONTH_END_DAY
from .validation import require_date_bound, require_iso_date, require_month_prefix


class Dated(Protocol):
    date: str


T = TypeVar("T", bound=Dated)


@dataclass(frozen=True)
class PeriodBuckets(Generic[T]):
    before: tuple[T, ...]
    in_period: tuple[T, ...]
    after: tuple[T, ...]


def month_prefix(value) -> str:
    """'YYYY-MM' of an ISO date string or a datetime.date."""
    if isinstance(value, _date):
        return f"{value.year:04d}-{value.month:02d}"
    if isinstance(value, str) and len(value) == 7:
        return require_month_prefix(value)
    return require_iso_date(value)[:7]


def month_start(prefix: str) -> str:
    return f"{require_month_prefix(prefix)}-01"


def month_end(prefix: str) -> str:
    """Inclusive string upper bound of the month (always day 31)."""
    return f"{require_month_prefix(prefix)}-{MONTH_END_DAY}"


def in_month(date: str, prefix: str) -> bool:
    return date.startswith(require_month_prefix(prefix))


def partition(items: Iterable[T], prefix: str) -> PeriodBuckets[T]:
    """Split into before / in / after the month, keeping input order in each bucket."""
    start = month_start(prefix)
    before: list[T] = []
    inside: list[T] = []
    after: list[T] = []
    for item in items:
        if item.date < start:
            before.append(item)
        elif in_month(item.date, prefix):
            inside.append(item)
        else:
            after.append(item)
    return PeriodBuckets(tuple(before), tuple(inside), tuple(after))


def in_period(items: Iterable[T], prefix: str) -> list[T]:
    require_month_prefix(prefix)
    return [i for i in items if i.date.startswith(prefix)]


def on_or_before(items: Iterable[T], date: str) -> list[T]:
    require_date_bound(date, "as_of")
    return [i for i in items if i.date <= date]


def before(items: Iterable[T], date: str) -> list[T]:
    require_date_bound(date, "date")
    return [i for i in items if i.date < date]


def between(items: Iterable[T], lower: str, upper: str) -> list[T]:
    """lower <= date < upper. An empty `lower` means the beginning of time."""
    if lower:
        require_date_bound(lower, "lower")
    require_date_bound(upper, "upper")
    return [i for i in items if (not lower or i.date >= lower) and i.date < upper]


def on_date(items: Iterable[T], date: str) -> list[T]:
    return [i for i in items if i.date == date]


# ---- calendar helpers (entry grids, month navigation) ----

def days_in_month(prefix: str) -> list[str]:
    """Every real day of the month as ISO strings."""
    year, month = (int(p) for p in require_month_prefix(prefix).split("-"))
    last = calendar.monthrange(year, month)[1]
    return [f"{prefix}-{d:02d}" for d in range(1, last + 1)]


def shift_month(prefix: str, offset: int) -> str:
    year, month = (int(p) for p in require_month_prefix(prefix).split("-"))
    index = year * 12 + (month - 1) + offset
    return f"{index // 12:04d}-{index % 12 + 1:02d}"


def is_past_month(prefix: str, today: str) -> bool:
    """True when the month closed before the month containing `today`."""
    return require_month_prefix(prefix) < month_prefix(today)


__all__ = [
    "PeriodBuckets",
    "month_prefix",
    "month_start",
    "month_end",
    "in_month",
    "partition",
    "in_period",
    "on_or_before",
    "before",
    "between",
    "on_date",
    "days_in_month",
    "shift_month",
    "is_past_month",
]
