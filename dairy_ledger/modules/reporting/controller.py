from __future__ import annotations

import sqlite3
from typing import Optional

from ...database.repositories import ContactsRepo
from ...ledger import reports
from ...ledger.models import Module
from ...ledger.periods import month_prefix
from ...utils.helpers import fmt_money, month_label, today_str


class ReportingController:
    """Monthly statement data for one module: one row per contact plus grand totals."""

    def __init__(self, conn: sqlite3.Connection, *, today: Optional[str] = None):
        self.conn = conn
        self.contacts = ContactsRepo(conn)
        self._today = today

    def monthly_statement(
        self, module: Module, prefix: Optional[str] = None
    ) -> reports.MonthlyStatement:
        prefix = prefix or month_prefix(self._today or today_str())
        module = Module(module)
        return reports.monthly_statement(self.contacts.list_contacts(module), prefix, module)

    def statement_rows(self, module: Module, prefix: Optional[str] = None) -> list[dict]:
        """Statement flattened to display-ready dicts (the renderer stays outside)."""
        st = self.monthly_statement(module, prefix)
        rows = [
            {
                "no": i,
                "name": r.name,
                "previous_balance": fmt_money(r.previous_balance),
                "milk": r.milk,
                "bill": fmt_money(r.bill),
                "paid": fmt_money(r.paid),
                "balance": fmt_money(r.closing_balance),
            }
            for i, r in enumerate(st.rows, start=1)
        ]
        rows.append(
            {
                "no": None,
                "name": f"Total {month_label(st.month)}",
                "previous_balance": fmt_money(st.totals.previous_balance),
                "milk": st.totals.milk,
                "bill": fmt_money(st.totals.bill),
                "paid": fmt_money(st.totals.paid),
                "balance": fmt_money(st.totals.closing_balance),
            }
        )
        return rows
