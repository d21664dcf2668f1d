from __future__ import annotations

import json
from decimal import Decimal

from juice_cashier import ledger as ledger_module
from juice_cashier.ledger import SalesLedger
from juice_cashier.models import Order, PaymentMethod
from juice_cashier.storage import StorageError

from conftest import at


def test_card_sale_charges_non_exempt_cups(ledger, mango_cup, watermelon_shell):
    order = Order(drinks=(watermelon_shell, mango_cup, mango_cup), timestamp=at(2025, 9, 10))

    sale = ledger.record(order, PaymentMethod.CARD)

    assert sale.subtotal == Decimal("35.00")
    assert sale.surcharge == Decimal("2.00")
    assert sale.total == sale.subtotal + Decimal("2.00")


def test_newest_first(ledger, mango_cup):
    first = ledger.record(Order(drinks=(mango_cup,), timestamp=at(2025, 9, 10, 10)), PaymentMethod.CASH)
    second = ledger.record(Order(drinks=(mango_cup,), timestamp=at(2025, 9, 10, 11)), PaymentMethod.CASH)

    assert ledger.sales == (second, first)


def test_sales_snapshot_is_stable(ledger, mango_cup):
    before = ledger.sales
    ledger.record(Order(drinks=(mango_cup,)), PaymentMethod.CASH)

    assert before == ()
    assert len(ledger.sales) == 1


def test_sale_links_to_week(ledger, mango_cup):
    week = ledger.create_week("  Harbour Fair ", at(2025, 9, 10))
    sale = ledger.record(Order(drinks=(mango_cup,)), PaymentMethod.CASH, week)

    assert week.location_name == "Harbour Fair"
    assert sale.festival_week_id == week.id
    assert ledger.week(sale.festival_week_id) == week
    assert ledger.week(None) is None


def test_create_week_twice_in_same_week(ledger):
    first = ledger.create_week("Riverside", at(2025, 9, 9))
    second = ledger.create_week("Riverside", at(2025, 9, 11))

    assert ledger.weeks == (second, first)
    assert first.week_start == second.week_start
    assert first.week_end == second.week_end
    assert first.id != second.id


def test_state_reloads_from_disk(data_dir, ledger, mango_pineapple_boba):
    week = ledger.create_week("Riverside", at(2025, 9, 10))
    sale = ledger.record(Order(drinks=(mango_pineapple_boba,), timestamp=at(2025, 9, 10)), PaymentMethod.CARD, week)

    reopened = SalesLedger(data_dir)

    assert reopened.weeks == (week,)
    assert reopened.sales == (sale,)


def test_missing_files_start_empty(tmp_path):
    fresh = SalesLedger(tmp_path / "nothing-here")
    assert fresh.weeks == ()
    assert fresh.sales == ()


def test_corrupt_file_starts_empty(data_dir):
    (data_dir / "sales.json").write_text("{not json", encoding="utf-8")
    (data_dir / "festival_weeks.json").write_text(json.dumps({"not": "a list"}), encoding="utf-8")

    reopened = SalesLedger(data_dir)

    assert reopened.sales == ()
    assert reopened.weeks == ()


def test_failed_write_keeps_previous_file_and_memory(monkeypatch, data_dir, ledger, mango_cup):
    kept = ledger.record(Order(drinks=(mango_cup,)), PaymentMethod.CASH)
    on_disk = (data_dir / "sales.json").read_text(encoding="utf-8")

    def broken_write(path, payload):
        raise StorageError("disk full")

    monkeypatch.setattr(ledger_module, "write_json_atomic", broken_write)
    extra = ledger.record(Order(drinks=(mango_cup,)), PaymentMethod.CARD)

    assert ledger.sales == (extra, kept)
    assert (data_dir / "sales.json").read_text(encoding="utf-8") == on_disk


def test_sale_with_inconsistent_totals_loads_empty(data_dir, ledger, mango_cup):
    ledger.record(Order(drinks=(mango_cup,)), PaymentMethod.CARD)
    path = data_dir / "sales.json"
    raw = json.loads(path.read_text(encoding="utf-8"))
    raw[0]["total"] = "5.00"
    path.write_text(json.dumps(raw), encoding="utf-8")

    assert SalesLedger(data_dir).sales == ()
