import sys
from pathlib import Path

from .config import LOG_PATH
from .constants import APP_NAME
from .database import get_connection
from .modules.dashboard.controller import DashboardController
from .utils.helpers import fmt_money, month_label
from .utils.loggers import get_logger


def main(argv=None) -> int:
    """
    Print the dashboard for today: month totals, outstanding balances and the
    daily stock check.

    Usage: python -m dairy_ledger.main [DB_PATH] [YYYY-MM-DD]
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    db_path = Path(argv[0]) if argv else None
    day = argv[1] if len(argv) > 1 else None

    log = get_logger("dairy_ledger", log_file=LOG_PATH)
    conn = get_connection(db_path)
    try:
        dash = DashboardController(conn, today=day)
        summary = dash.summary()
        daily = dash.daily_stock()
    finally:
        conn.close()

    log.info("%s: dashboard for %s", APP_NAME, daily.date)
    print(f"{APP_NAME}: {month_label(summary.month)}")
    print(f"  Sales:      {fmt_money(summary.sale_total)}")
    print(f"  Purchases:  {fmt_money(summary.purchase_total)}")
    print(f"  Profit:     {fmt_money(summary.profit)}")
    print(f"  Receivable: {fmt_money(summary.total_receivable)}")
    for e in summary.receivables.entries:
        print(f"    {e.name}: {fmt_money(e.balance)}")
    print(f"  Payable:    {fmt_money(summary.total_payable)}")
    for e in summary.payables.entries:
        print(f"    {e.name}: {fmt_money(e.balance)}")
    mode = "manual" if daily.is_manual else "auto"
    print(f"Stock {daily.date} (opening {mode}): {daily.opening_stock:g} L")
    print(f"  + farm {daily.farm:g} + purchased {daily.purchase:g} = {daily.total_available:g} L")
    print(f"  - sold {daily.sale:g} = {daily.net_remaining:g} L"
          + ("  (OVERSOLD)" if daily.is_oversold else ""))
    return 0


if __name__ == "__main__":
    sys.exit(main())
