import pytest

from dairy_ledger.ledger import LedgerValidationError
from dairy_ledger.ledger.models import (
    Contact,
    FarmRecord,
    MilkRecord,
    Module,
    OverrideState,
    Payment,
    StockOverride,
    round_currency,
)

from conftest import contact, rec


@pytest.mark.parametrize(
    "amount, expected",
    [(2.5, 3), (-2.5, -3), (2.4999, 2), (1234.5, 1235), (0.5, 1), (10, 10), (0, 0)],
)
def test_round_currency_halves_away_from_zero(amount, expected):
    assert round_currency(amount) == expected


def test_total_quantity_follows_parts_after_every_change():
    r = rec("2024-03-01", 4.5, 3.25)
    assert r.total_quantity == 7.75
    r2 = r.with_quantities(10, 0)
    assert r2.total_quantity == 10
    assert r.total_quantity == 7.75  # source record untouched


@pytest.mark.parametrize(
    "kwargs, field",
    [
        ({"morning_quantity": -1}, "morning_quantity"),
        ({"evening_quantity": "5"}, "evening_quantity"),
        ({"evening_quantity": None}, "evening_quantity"),
        ({"date": "2024-3-01"}, "date"),
        ({"date": "2024-02-30"}, "date"),
        ({"id": ""}, "id"),
    ],
)
def test_milk_record_rejects_bad_shape(kwargs, field):
    base = dict(id="r1", date="2024-03-01", morning_quantity=1, evening_quantity=1)
    base.update(kwargs)
    with pytest.raises(LedgerValidationError) as ei:
        MilkRecord(**base)
    assert ei.value.field == field


def test_payment_amount_must_be_positive():
    with pytest.raises(LedgerValidationError, match="amount"):
        Payment(id="p1", amount=0, date="2024-03-01")
    with pytest.raises(LedgerValidationError, match="amount"):
        Payment(id="p1", amount=True, date="2024-03-01")


def test_stock_override_states():
    assert StockOverride.unset().state is OverrideState.UNSET
    assert StockOverride.auto().state is OverrideState.AUTO
    assert StockOverride.unset() != StockOverride.auto()
    m = StockOverride.manual(-4)
    assert m.is_manual and m.value == -4
    with pytest.raises(LedgerValidationError):
        StockOverride(OverrideState.MANUAL)
    with pytest.raises(LedgerValidationError):
        StockOverride(OverrideState.AUTO, 5)


def test_farm_record_defaults_to_unset_override():
    f = FarmRecord(id="f1", date="2024-03-01", morning_quantity=2, evening_quantity=3)
    assert f.total_quantity == 5
    assert f.opening_stock == StockOverride.unset()


def test_contact_requires_known_module():
    with pytest.raises(LedgerValidationError, match="module"):
        Contact(id="c1", name="X", module="SALE", price_per_liter=100)


def test_contact_opening_balance_may_be_negative():
    c = contact(opening_balance=-300)
    assert c.opening_balance == -300


def test_upsert_record_keeps_one_record_per_day():
    c = contact(records=[rec("2024-03-01", 1, 1)])
    again = rec("2024-03-01", 2, 2)
    c2 = c.upsert_record(again).upsert_record(again)
    assert len(c2.records) == 1
    assert c2.record_for("2024-03-01") == again
    c3 = c2.upsert_record(rec("2024-03-02", 1, 0))
    assert [r.date for r in c3.records] == ["2024-03-01", "2024-03-02"]


def test_module_labels():
    assert Module.SALE.balance_label == "receivable"
    assert Module.PURCHASE.balance_label == "payable"
    assert Module("PURCHASE") is Module.PURCHASE
