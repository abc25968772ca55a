# dairy_ledger/ledger/__init__.py
"""
Ledger core public API.

Pure functions over immutable snapshots: no I/O, no locking, no shared state.

Usage:
    from dairy_ledger.ledger import (
        Contact, MilkRecord, Payment, FarmRecord, StockOverride, Module,
        cumulative_balance, month_summary, daily_stock, dashboard_summary,
    )
"""

from .errors import LedgerValidationError

# ---------------- Record model ----------------
from .models import (
    Contact,
    FarmRecord,
    MilkRecord,
    Module,
    OverrideState,
    Payment,
    StockOverride,
    round_currency,
)

# ---------------- Periods ---------------------
from .periods import (
    PeriodBuckets,
    month_end,
    month_prefix,
    month_start,
    partition,
)

# ---------------- Rates -----------------------
from .rates import (
    change_day_rate,
    change_global_rate,
    change_month_rate,
    effective_rate,
    price_record,
)

# ---------------- Balances --------------------
from .balances import (
    MonthSummary,
    balance_label,
    closing_balance,
    cumulative_balance,
    month_balance,
    month_bill,
    month_paid,
    month_summary,
    previous_balance,
)

# ---------------- Stock -----------------------
from .stock import (
    DailyStock,
    daily_stock,
    find_anchor,
    previous_stock,
)

# ---------------- Reports ---------------------
from .reports import (
    ContactMonthLedger,
    DailyEntry,
    DashboardSummary,
    MonthlyStatement,
    OutstandingList,
    contact_month_ledger,
    daily_entries,
    dashboard_summary,
    monthly_profit,
    monthly_statement,
    monthly_total,
    outstanding_list,
)

__all__ = [
    "LedgerValidationError",
    # models
    "Contact",
    "FarmRecord",
    "MilkRecord",
    "Module",
    "OverrideState",
    "Payment",
    "StockOverride",
    "round_currency",
    # periods
    "PeriodBuckets",
    "month_end",
    "month_prefix",
    "month_start",
    "partition",
    # rates
    "change_day_rate",
    "change_global_rate",
    "change_month_rate",
    "effective_rate",
    "price_record",
    # balances
    "MonthSummary",
    "balance_label",
    "closing_balance",
    "cumulative_balance",
    "month_balance",
    "month_bill",
    "month_paid",
    "month_summary",
    "previous_balance",
    # stock
    "DailyStock",
    "daily_stock",
    "find_anchor",
    "previous_stock",
    # reports
    "DashboardSummary",
    "MonthlyStatement",
    "OutstandingList",
    "dashboard_summary",
    "monthly_profit",
    "monthly_statement",
    "monthly_total",
    "outstanding_list",
    "ContactMonthLedger",
    "contact_month_ledger",
    "DailyEntry",
    "daily_entries",
]
