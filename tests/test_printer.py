from __future__ import annotations

from juice_cashier.ledger import make_sale
from juice_cashier.models import FestivalWeek, Order, PaymentMethod
from juice_cashier.printer import receipt_lines

from conftest import at


def test_card_receipt(mango_cup, mango_pineapple_boba, watermelon_shell):
    order = Order(
        drinks=(mango_pineapple_boba, mango_pineapple_boba, watermelon_shell, mango_cup),
        timestamp=at(2025, 9, 10, 14, 5),
    )
    week = FestivalWeek.for_date("Riverside", order.timestamp)
    sale = make_sale(order, PaymentMethod.CARD, week.id)

    lines = receipt_lines(sale, week)

    assert lines[:2] == ["2025-09-10 14:05", "Riverside"]
    assert "2x C-Mango + Pineapple  $20.00" in lines
    assert "    Boba" in lines
    assert "1x W-Watermelon  $15.00" in lines
    assert lines[-4:] == ["Subtotal  $45.00", "Card fee  $3.00", "TOTAL  $48.00", "Paid by card"]


def test_cash_receipt_has_no_fee_line(mango_cup):
    sale = make_sale(Order(drinks=(mango_cup,), timestamp=at(2025, 9, 10)), PaymentMethod.CASH)

    lines = receipt_lines(sale)

    assert not any(line.startswith("Card fee") for line in lines)
    assert lines[-2:] == ["TOTAL  $10.00", "Paid by cash"]
