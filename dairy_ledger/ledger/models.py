# dairy_ledger/ledger/models.py
"""
Record model for the ledger core.

Everything here is plain, immutable data. Mutations return new instances
(``dataclasses.replace``) so a caller can hand the same snapshot to several
computations.

Conventions:
  • Dates are zero-padded ISO strings 'YYYY-MM-DD' and are compared as strings.
  • Quantities are liters and may be fractional.
  • Money is whole currency units (int); see round_currency().
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Iterable, Optional

from .validation import (
    require_iso_date,
    require_number,
    require_text,
)
from .errors import LedgerValidationError


class Module(str, Enum):
    """Which side of the business a contact belongs to."""

    SALE = "SALE"
    PURCHASE = "PURCHASE"

    @property
    def balance_label(self) -> str:
        return "receivable" if self is Module.SALE else "payable"

    @property
    def party_label(self) -> str:
        return "customer" if self is Module.SALE else "supplier"


def round_currency(amount: float) -> int:
    """Round to whole currency units, halves away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Milk records & payments
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MilkRecord:
    """
    One contact's deliveries on one calendar day.

    total_quantity is derived from its parts and cannot drift from them.
    price_per_liter is the rate snapshot taken when the record was last priced;
    None means "never stamped" and rate resolution falls back (see rates.py).
    """

    id: str
    date: str
    morning_quantity: float
    evening_quantity: float
    total_price: int = 0
    price_per_liter: Optional[float] = None
    image_url: Optional[str] = None
    timestamp: int = 0

    def __post_init__(self) -> None:
        require_text(self.id, "id")
        require_iso_date(self.date, "date")
        require_number(self.morning_quantity, "morning_quantity")
        require_number(self.evening_quantity, "evening_quantity")
        object.__setattr__(
            self, "total_price", require_number(self.total_price, "total_price", integral=True)
        )
        if self.price_per_liter is not None:
            require_number(self.price_per_liter, "price_per_liter")

    @property
    def total_quantity(self) -> float:
        return self.morning_quantity + self.evening_quantity

    def with_quantities(self, morning: float, evening: float) -> "MilkRecord":
        """Copy with new quantities; price is NOT recomputed here (see rates.price_record)."""
        return replace(self, morning_quantity=morning, evening_quantity=evening)


@dataclass(frozen=True)
class Payment:
    id: str
    amount: int
    date: str
    description: Optional[str] = None
    timestamp: int = 0

    def __post_init__(self) -> None:
        require_text(self.id, "id")
        object.__setattr__(
            self,
            "amount",
            require_number(self.amount, "amount", strictly_positive=True, integral=True),
        )
        require_iso_date(self.date, "date")


# ---------------------------------------------------------------------------
# Farm production & the opening-stock override
# ---------------------------------------------------------------------------

class OverrideState(str, Enum):
    UNSET = "unset"    # never touched: automatic calculation
    AUTO = "auto"      # was manual once, explicitly reverted to automatic
    MANUAL = "manual"  # a human fixed the day's opening stock


@dataclass(frozen=True)
class StockOverride:
    """
    Three-state opening-stock override of a farm day.

    UNSET and AUTO both mean "compute it", but stay distinct so storage can
    tell "never set" from "reverted".
    """

    state: OverrideState = OverrideState.UNSET
    value: Optional[float] = None

    def __post_init__(self) -> None:
        if self.state is OverrideState.MANUAL:
            require_number(self.value, "opening_stock", allow_negative=True)
        elif self.value is not None:
            raise LedgerValidationError(
                "opening_stock", f"a {self.state.value} override carries no value."
            )

    @classmethod
    def unset(cls) -> "StockOverride":
        return cls(OverrideState.UNSET)

    @classmethod
    def auto(cls) -> "StockOverride":
        return cls(OverrideState.AUTO)

    @classmethod
    def manual(cls, value: float) -> "StockOverride":
        return cls(OverrideState.MANUAL, value)

    @property
    def is_manual(self) -> bool:
        return self.state is OverrideState.MANUAL


@dataclass(frozen=True)
class FarmRecord:
    id: str
    date: str
    morning_quantity: float = 0.0
    evening_quantity: float = 0.0
    opening_stock: StockOverride = field(default_factory=StockOverride.unset)
    timestamp: int = 0

    def __post_init__(self) -> None:
        require_text(self.id, "id")
        require_iso_date(self.date, "date")
        require_number(self.morning_quantity, "morning_quantity")
        require_number(self.evening_quantity, "evening_quantity")
        if not isinstance(self.opening_stock, StockOverride):
            raise LedgerValidationError(
                "opening_stock", f"expected StockOverride, got {self.opening_stock!r}."
            )

    @property
    def total_quantity(self) -> float:
        return self.morning_quantity + self.evening_quantity

    def with_quantities(self, morning: float, evening: float) -> "FarmRecord":
        return replace(self, morning_quantity=morning, evening_quantity=evening)

    def with_override(self, override: StockOverride) -> "FarmRecord":
        return replace(self, opening_stock=override)


# ---------------------------------------------------------------------------
# Contacts
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Contact:
    """
    A customer (SALE) or supplier (PURCHASE) together with the records and
    payments it owns.

    opening_balance is the net position on the day before any record or
    payment existed: positive means the contact owes the business.
    """

    id: str
    name: str
    module: Module
    price_per_liter: float
    opening_balance: int = 0
    records: tuple[MilkRecord, ...] = ()
    payments: tuple[Payment, ...] = ()
    created_at: int = 0

    def __post_init__(self) -> None:
        require_text(self.id, "id")
        require_text(self.name, "name")
        if not isinstance(self.module, Module):
            raise LedgerValidationError("module", f"expected SALE or PURCHASE, got {self.module!r}.")
        require_number(self.price_per_liter, "price_per_liter")
        object.__setattr__(
            self,
            "opening_balance",
            require_number(
                self.opening_balance, "opening_balance", allow_negative=True, integral=True
            ),
        )
        # Accept any iterable from callers but keep the snapshot immutable.
        object.__setattr__(self, "records", tuple(self.records))
        object.__setattr__(self, "payments", tuple(self.payments))

    def record_for(self, date: str) -> Optional[MilkRecord]:
        for r in self.records:
            if r.date == date:
                return r
        return None

    def with_records(self, records: Iterable[MilkRecord]) -> "Contact":
        return replace(self, records=tuple(records))

    def with_payments(self, payments: Iterable[Payment]) -> "Contact":
        return replace(self, payments=tuple(payments))

    def upsert_record(self, record: MilkRecord) -> "Contact":
        """Replace the record of the same day, or append; at most one per day."""
        out: list[MilkRecord] = []
        replaced = False
        for r in self.records:
            if r.date == record.date:
                if not replaced:
                    out.append(record)
                    replaced = True
                continue
            out.append(r)
        if not replaced:
            out.append(record)
        return self.with_records(out)


__all__ = [
    "Module",
    "round_currency",
    "MilkRecord",
    "Payment",
    "OverrideState",
    "StockOverride",
    "FarmRecord",
    "Contact",
]
