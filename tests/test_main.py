from dairy_ledger import main as main_module
from dairy_ledger.database import get_connection
from dairy_ledger.ledger.models import Module
from dairy_ledger.modules.contacts.controller import ContactController
from dairy_ledger.utils.helpers import fmt_money, month_label


def test_main_prints_dashboard(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(main_module, "LOG_PATH", tmp_path / "ledger.log")
    db = tmp_path / "ledger.db"
    conn = get_connection(db)
    try:
        sales = ContactController(conn, Module.SALE, today="2024-03-03")
        c = sales.create_contact("Bilal", price_per_liter=120)
        sales.enter_quantities(c.id, "2024-03-03", 10, 0)
    finally:
        conn.close()

    assert main_module.main([str(db), "2024-03-03"]) == 0
    out = capsys.readouterr().out
    assert "March 2024" in out
    assert "Bilal: 1,200" in out
    assert "OVERSOLD" in out


def test_helpers():
    assert month_label("2024-12") == "December 2024"
    assert fmt_money(1234567) == "1,234,567"
    assert fmt_money("n/a") == "n/a"
    assert fmt_money("n/a", sentinel="-") == "-"
