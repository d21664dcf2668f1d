from __future__ import annotations

from decimal import Decimal

from juice_cashier.cart import Cart, checkout
from juice_cashier.models import CupType, Flavour, PaymentMethod
from juice_cashier.pricing import make_drink

from conftest import at


def test_same_drink_twice_totals_twenty(mango_cup):
    cart = Cart()
    cart.add(mango_cup)
    cart.add(make_drink(CupType.CUP, [Flavour.MANGO]))

    assert len(cart) == 1
    assert cart.items[0].quantity == 2
    assert cart.total == Decimal("20.00")


def test_different_add_ons_make_separate_lines(mango_cup, mango_pineapple_boba):
    cart = Cart()
    cart.add(mango_cup)
    cart.add(mango_pineapple_boba, quantity=3)

    assert [item.quantity for item in cart.items] == [1, 3]
    assert cart.total_quantity == 4
    assert cart.total == Decimal("40.00")


def test_quantity_never_drops_below_one(mango_cup):
    cart = Cart()
    item = cart.add(mango_cup, quantity=0)
    assert item.quantity == 1

    cart.decrement(item.id)
    cart.set_quantity(item.id, -4)
    assert cart.item(item.id).quantity == 1

    cart.increment(item.id)
    assert cart.item(item.id).quantity == 2


def test_remove_and_remove_at(mango_cup, mango_pineapple_boba, watermelon_shell):
    cart = Cart()
    first = cart.add(mango_cup)
    cart.add(mango_pineapple_boba)
    cart.add(watermelon_shell)

    cart.remove(first.id)
    assert len(cart) == 2

    cart.remove_at([0, 7])
    assert [item.drink for item in cart.items] == [watermelon_shell]


def test_card_total_previews_surcharge(mango_cup, watermelon_shell):
    cart = Cart()
    cart.add(mango_cup, quantity=2)
    cart.add(watermelon_shell)

    assert cart.total == Decimal("35.00")
    assert cart.card_surcharge == Decimal("2.00")
    assert cart.card_total == Decimal("37.00")


def test_snapshot_has_one_entry_per_cup(mango_cup, watermelon_shell):
    cart = Cart()
    cart.add(mango_cup, quantity=2)
    cart.add(watermelon_shell)

    order = cart.snapshot(at(2025, 9, 10))
    assert order.drinks == (mango_cup, mango_cup, watermelon_shell)
    assert order.timestamp == at(2025, 9, 10)


def test_checkout_records_and_clears(ledger, mango_cup):
    cart = Cart()
    cart.add(mango_cup, quantity=2)

    sale = checkout(cart, ledger, PaymentMethod.CASH, timestamp=at(2025, 9, 10))

    assert sale is not None
    assert sale.total == Decimal("20.00")
    assert cart.is_empty
    assert ledger.sales == (sale,)


def test_checkout_of_empty_cart_records_nothing(ledger):
    assert checkout(Cart(), ledger, PaymentMethod.CARD) is None
    assert ledger.sales == ()
