from datetime import date

import pytest

from dairy_ledger.ledger import LedgerValidationError
from dairy_ledger.ledger.periods import (
    before,
    between,
    days_in_month,
    in_month,
    in_period,
    is_past_month,
    month_end,
    month_prefix,
    month_start,
    on_or_before,
    partition,
    shift_month,
)

from conftest import pay, rec


def test_month_bounds_use_day_31_even_for_short_months():
    assert month_start("2024-02") == "2024-02-01"
    assert month_end("2024-02") == "2024-02-31"
    assert month_end("2024-04") == "2024-04-31"


def test_month_prefix_accepts_dates_and_strings():
    assert month_prefix("2024-03-15") == "2024-03"
    assert month_prefix("2024-03") == "2024-03"
    assert month_prefix(date(2024, 3, 15)) == "2024-03"
    with pytest.raises(LedgerValidationError):
        month_prefix("2024-13")
    with pytest.raises(LedgerValidationError):
        month_prefix("15/03/2024")


def test_partition_splits_into_disjoint_buckets_in_input_order():
    items = [
        rec("2024-03-10"),
        rec("2024-02-29"),
        rec("2024-04-01"),
        rec("2024-03-01"),
        rec("2024-03-31"),
        rec("2023-12-31"),
    ]
    b = partition(items, "2024-03")
    assert [r.date for r in b.before] == ["2024-02-29", "2023-12-31"]
    assert [r.date for r in b.in_period] == ["2024-03-10", "2024-03-01", "2024-03-31"]
    assert [r.date for r in b.after] == ["2024-04-01"]
    assert len(b.before) + len(b.in_period) + len(b.after) == len(items)


def test_month_end_bound_includes_whole_short_month():
    items = [rec("2024-02-28"), rec("2024-02-29"), rec("2024-03-01")]
    assert [r.date for r in on_or_before(items, month_end("2024-02"))] == [
        "2024-02-28",
        "2024-02-29",
    ]


def test_between_is_lower_inclusive_upper_exclusive():
    items = [rec("2024-03-01"), rec("2024-03-02"), rec("2024-03-03")]
    assert [r.date for r in between(items, "2024-03-02", "2024-03-03")] == ["2024-03-02"]
    # empty lower bound means "from the beginning"
    assert len(between(items, "", "2024-03-03")) == 2


def test_in_period_works_for_payments_too():
    ps = [pay("2024-03-05", 10), pay("2024-04-05", 20)]
    assert [p.amount for p in in_period(ps, "2024-03")] == [10]


def test_days_in_month_lists_real_days():
    feb = days_in_month("2024-02")
    assert feb[0] == "2024-02-01"
    assert feb[-1] == "2024-02-29"
    assert len(days_in_month("2023-02")) == 28
    assert len(days_in_month("2024-04")) == 30


def test_shift_month_crosses_year_boundaries():
    assert shift_month("2024-01", -1) == "2023-12"
    assert shift_month("2024-12", 1) == "2025-01"
    assert shift_month("2024-05", 0) == "2024-05"
    assert shift_month("2024-05", -17) == "2022-12"


def test_is_past_month():
    assert is_past_month("2024-02", "2024-03-01")
    assert not is_past_month("2024-03", "2024-03-31")
    assert not is_past_month("2024-04", "2024-03-31")


@pytest.mark.parametrize("prefix", ["2024-1", "", "2024-00", "24-03", None])
def test_month_filters_reject_malformed_prefix(prefix):
    items = [rec("2024-10-01"), rec("2024-11-01")]
    with pytest.raises(LedgerValidationError):
        in_period(items, prefix)
    with pytest.raises(LedgerValidationError):
        partition(items, prefix)
    with pytest.raises(LedgerValidationError):
        in_month("2024-10-01", prefix)


def test_date_bounds_are_checked():
    items = [rec("2024-10-01")]
    with pytest.raises(LedgerValidationError) as ei:
        on_or_before(items, "2024-11")
    assert ei.value.field == "as_of"
    with pytest.raises(LedgerValidationError):
        before(items, "")
    with pytest.raises(LedgerValidationError):
        between(items, "2024-1", "2024-11-01")
    with pytest.raises(LedgerValidationError):
        between(items, "", "2024-11")
