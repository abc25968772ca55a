# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - Every test gets its own SQLite file under tmp_path (schema applied)
# - conn.row_factory = sqlite3.Row, PRAGMA foreign_keys=ON
# - Small factories for ledger snapshots (contacts, records, payments)
# ---------------------------------------------------------------------

from __future__ import annotations

import itertools

import pytest

from dairy_ledger.database import get_connection
from dairy_ledger.ledger.models import (
    Contact,
    FarmRecord,
    MilkRecord,
    Module,
    Payment,
    StockOverride,
    round_currency,
)

_ids = itertools.count(1)


def _next_id(prefix: str) -> str:
    return f"{prefix}-{next(_ids)}"


# ---------- Storage ----------
@pytest.fixture()
def db_path(tmp_path):
    return tmp_path / "data" / "ledger.db"


@pytest.fixture()
def conn(db_path):
    """Fresh database with the schema applied; closed after the test."""
    con = get_connection(db_path)
    try:
        yield con
    finally:
        con.close()


# ---------- Snapshot factories ----------
def rec(date, morning=0.0, evening=0.0, *, price=None, rate=None, rid=None) -> MilkRecord:
    """A record; `price` defaults to the rounded bill at `rate` when a rate is given."""
    if price is None:
        price = round_currency((morning + evening) * rate) if rate is not None else 0
    return MilkRecord(
        id=rid or _next_id("r"),
        date=date,
        morning_quantity=morning,
        evening_quantity=evening,
        total_price=price,
        price_per_liter=rate,
    )


def pay(date, amount, description=None) -> Payment:
    return Payment(id=_next_id("p"), amount=amount, date=date, description=description)


def farm(date, morning=0.0, evening=0.0, opening=None) -> FarmRecord:
    override = StockOverride.manual(opening) if opening is not None else StockOverride.unset()
    return FarmRecord(
        id=_next_id("f"),
        date=date,
        morning_quantity=morning,
        evening_quantity=evening,
        opening_stock=override,
    )


def contact(
    name="Aslam",
    *,
    module=Module.SALE,
    rate=100,
    opening_balance=0,
    records=(),
    payments=(),
) -> Contact:
    return Contact(
        id=_next_id("c"),
        name=name,
        module=module,
        price_per_liter=rate,
        opening_balance=opening_balance,
        records=records,
        payments=payments,
    )


@pytest.fixture()
def make():
    """Access to the factories from tests that prefer a fixture."""
    class _Make:
        record = staticmethod(rec)
        payment = staticmethod(pay)
        farm = staticmethod(farm)
        contact = staticmethod(contact)
    return _Make
