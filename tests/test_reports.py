import pytest

from dairy_ledger.ledger import LedgerValidationError, Module
from dairy_ledger.ledger.reports import (
    contact_month_ledger,
    daily_entries,
    dashboard_summary,
    monthly_milk,
    monthly_profit,
    monthly_statement,
    monthly_total,
    outstanding_list,
)

from conftest import contact, pay, rec


def _customers():
    return [
        # billed 500, paid 500: settled
        contact("Aslam", records=[rec("2024-03-02", 5, 0, rate=100)],
                payments=[pay("2024-03-20", 500)]),
        # owes 300 + 240
        contact("Bilal", opening_balance=300, records=[rec("2024-03-05", 1, 1, rate=120)]),
        # in advance
        contact("Chand", opening_balance=-100),
        # owes 100 from last month only
        contact("Dawood", records=[rec("2024-02-28", 1, 0, rate=100)]),
    ]


def _suppliers():
    return [
        contact("Farm A", module=Module.PURCHASE,
                records=[rec("2024-03-02", 10, 0, rate=60)],
                payments=[pay("2024-03-03", 200)]),
        contact("Farm B", module=Module.PURCHASE,
                records=[rec("2024-04-01", 10, 0, rate=60)]),
    ]


def test_monthly_totals_and_profit():
    assert monthly_total(_customers(), "2024-03") == 740
    assert monthly_total(_suppliers(), "2024-03") == 600
    assert monthly_profit(_customers(), _suppliers(), "2024-03") == 140
    assert monthly_milk(_customers(), "2024-03") == 7


def test_outstanding_excludes_settled_and_advance_and_keeps_order():
    out = outstanding_list(_customers(), "2024-03", Module.SALE)
    assert [e.name for e in out.entries] == ["Bilal", "Dawood"]
    assert [e.balance for e in out.entries] == [540, 100]
    assert out.total == 640
    assert out.label == "receivable"


def test_outstanding_is_as_of_month_end():
    # Farm B's April delivery is not owed yet at the end of March
    out = outstanding_list(_suppliers(), "2024-03", Module.PURCHASE)
    assert [(e.name, e.balance) for e in out.entries] == [("Farm A", 400)]
    assert out.label == "payable"


def test_module_mismatch_is_rejected():
    with pytest.raises(LedgerValidationError) as ei:
        outstanding_list(_suppliers(), "2024-03", Module.SALE)
    assert ei.value.field == "module"


def test_dashboard_summary():
    s = dashboard_summary(_customers(), _suppliers(), "2024-03")
    assert s.month == "2024-03"
    assert (s.sale_total, s.purchase_total, s.profit) == (740, 600, 140)
    assert s.total_receivable == 640
    assert s.total_payable == 400


def test_dashboard_summary_with_no_contacts():
    s = dashboard_summary([], [], "2024-03")
    assert s.profit == 0
    assert s.receivables.entries == ()
    assert s.total_payable == 0


def test_monthly_statement_rows_and_totals():
    st = monthly_statement(_customers(), "2024-03", Module.SALE)
    assert [r.name for r in st.rows] == ["Aslam", "Bilal", "Chand", "Dawood"]
    t = st.totals
    assert t.bill == 740
    assert t.paid == 500
    assert t.previous_balance == 0 + 300 - 100 + 100
    assert t.closing_balance == t.previous_balance + t.bill - t.paid
    assert t.milk == 7


@pytest.mark.parametrize("prefix", ["2024-1", "", "2024-03-01"])
def test_month_aggregates_reject_malformed_month(prefix):
    customers = [contact(records=[rec("2024-10-01", 1, 0, rate=100),
                                  rec("2024-11-01", 1, 0, rate=100)])]
    for call in (
        lambda: monthly_total(customers, prefix),
        lambda: monthly_total([], prefix),
        lambda: monthly_milk(customers, prefix),
        lambda: monthly_profit(customers, [], prefix),
        lambda: outstanding_list(customers, prefix, Module.SALE),
        lambda: dashboard_summary([], [], prefix),
        lambda: monthly_statement(customers, prefix, Module.SALE),
    ):
        with pytest.raises(LedgerValidationError) as ei:
            call()
        assert ei.value.field == "month"


def test_report_money_is_integral():
    s = dashboard_summary(_customers(), _suppliers(), "2024-03")
    assert isinstance(s.profit, int)
    assert isinstance(s.total_receivable, int)
    assert isinstance(monthly_statement(_customers(), "2024-03", Module.SALE).totals.closing_balance, int)


# ---- contact month ledger -----------------------------------------------

def _bilal():
    return contact(
        "Bilal",
        rate=120,
        records=[
            rec("2024-02-15", 3, 3, rate=100),
            rec("2024-02-01", 1.5, 0.5, rate=100),
            rec("2024-02-10", 0, 0, rate=100),  # zeroed day
            rec("2024-02-29", 2, 0, price=180),  # legacy, no snapshot
            rec("2024-03-01", 5, 0, rate=120),
        ],
    )


def test_month_ledger_lists_delivery_days_in_date_order():
    led = contact_month_ledger(_bilal(), "2024-02")
    assert [r.date for r in led.rows] == ["2024-02-01", "2024-02-15", "2024-02-29"]
    first = led.rows[0]
    assert (first.morning_quantity, first.evening_quantity, first.total_quantity) == (1.5, 0.5, 2)
    assert first.bill == 200
    assert first.rate == 100
    assert led.rows[-1].rate == 90
    assert led.total_milk == 10
    assert led.total_bill == 200 + 600 + 180
    assert (led.previous_month, led.next_month) == ("2024-01", "2024-03")


def test_month_ledger_all_days_fills_the_calendar():
    led = contact_month_ledger(_bilal(), "2024-02", all_days=True)
    assert len(led.rows) == 29
    empty = led.rows[1]
    assert (empty.date, empty.total_quantity, empty.bill, empty.rate) == ("2024-02-02", 0, 0, None)
    assert led.total_bill == 980


def test_month_ledger_crosses_year_for_navigation():
    led = contact_month_ledger(contact(), "2024-12")
    assert led.rows == ()
    assert (led.previous_month, led.next_month) == ("2024-11", "2025-01")


# ---- daily detail -------------------------------------------------------

def test_daily_entries_lists_only_contacts_with_milk_that_day():
    people = [
        contact("Aslam", records=[rec("2024-03-02", 2, 1, rate=100)]),
        contact("Bilal", records=[rec("2024-03-02", 0, 0, rate=100)]),
        contact("Chand", records=[rec("2024-03-03", 4, 0, rate=100)]),
        contact("Dawood", records=[rec("2024-03-02", 0, 2.5, rate=100)]),
    ]
    entries = daily_entries(people, "2024-03-02")
    assert [e.name for e in entries] == ["Aslam", "Dawood"]
    assert [e.total_quantity for e in entries] == [3, 2.5]
    assert entries[1].evening_quantity == 2.5
    assert daily_entries(people, "2024-03-05") == []


def test_daily_entries_rejects_bad_date():
    with pytest.raises(LedgerValidationError):
        daily_entries([], "2024-03")
