from __future__ import annotations

from decimal import Decimal

import pytest

from juice_cashier import constant
from juice_cashier.models import AddOn, CupType, Flavour, PaymentMethod
from juice_cashier.pricing import base_price, make_drink, price, surcharge_for


@pytest.mark.parametrize(
    ("cup", "expected"),
    [(CupType.CUP, "10.00"), (CupType.PSHELL, "12.00"), (CupType.WSHELL, "15.00")],
)
def test_base_price_by_cup(cup, expected):
    assert price(cup, [], [Flavour.MANGO]) == Decimal(expected)


def test_unknown_cup_prices_at_zero():
    assert base_price("bucket") == Decimal("0.00")


def test_add_ons_are_free_today():
    everything = list(AddOn)
    assert price(CupType.CUP, everything, [Flavour.TARO]) == Decimal("10.00")


def test_add_on_price_table_is_applied(monkeypatch):
    monkeypatch.setitem(constant.ADD_ON_PRICES, "boba", Decimal("0.75"))
    assert price(CupType.PSHELL, [AddOn.BOBA, AddOn.NO_ICE], [Flavour.MANGO]) == Decimal("12.75")


def test_make_drink_dedups_flavours_and_keeps_pick_order():
    drink = make_drink(CupType.CUP, [Flavour.PINEAPPLE, Flavour.MANGO, Flavour.PINEAPPLE])
    assert drink.selection == (Flavour.PINEAPPLE, Flavour.MANGO)
    assert drink.flavour_list == "Pineapple + Mango"
    assert drink.price == Decimal("10.00")


def test_make_drink_without_flavour_is_rejected():
    with pytest.raises(ValueError):
        make_drink(CupType.CUP, [])


def test_cash_never_pays_surcharge():
    assert surcharge_for(PaymentMethod.CASH, [CupType.CUP, CupType.PSHELL]) == Decimal("0.00")


def test_card_surcharge_skips_watermelon_shells():
    cups = [CupType.WSHELL, CupType.CUP, CupType.CUP, CupType.PSHELL]
    assert surcharge_for(PaymentMethod.CARD, cups) == Decimal("3.00")


def test_card_surcharge_all_exempt():
    assert surcharge_for(PaymentMethod.CARD, [CupType.WSHELL, CupType.WSHELL]) == Decimal("0.00")
