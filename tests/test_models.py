from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest

from juice_cashier.ledger import make_sale
from juice_cashier.models import AddOn, CupType, Drink, FestivalWeek, Flavour, Order, PaymentMethod, Preset, Sale, to_money

from conftest import at


def test_to_money_quantizes_to_cents():
    assert to_money("10") == Decimal("10.00")
    assert to_money(Decimal("2.005")) == Decimal("2.01")


def test_to_money_rejects_garbage():
    with pytest.raises(ValueError):
        to_money("ten dollars")


def test_drink_normalizes_raw_values():
    drink = Drink(selection=("mango", "mango", "taro"), cup_type="pshell", add_ons={"boba"}, price="12")

    assert drink.selection == (Flavour.MANGO, Flavour.TARO)
    assert drink.cup_type is CupType.PSHELL
    assert drink.add_ons == frozenset({AddOn.BOBA})
    assert drink.price == Decimal("12.00")
    assert drink.is_mix


def test_unknown_flavour_is_rejected():
    with pytest.raises(ValueError):
        Drink(selection=("durian",), cup_type="cup", add_ons=(), price="10")


def test_festival_week_spans_monday_through_sunday():
    wednesday = at(2025, 9, 10, 15, 30)
    week = FestivalWeek.for_date("Riverside", wednesday)

    assert week.week_start == at(2025, 9, 8, 0, 0)
    assert week.week_end == at(2025, 9, 14, 0, 0) + timedelta(hours=23, minutes=59, seconds=59)
    assert week.contains(wednesday)
    assert not week.contains(at(2025, 9, 15, 0, 0))


def test_same_location_same_week_gives_distinct_ids():
    first = FestivalWeek.for_date("Riverside", at(2025, 9, 9))
    second = FestivalWeek.for_date("Riverside", at(2025, 9, 12))

    assert (first.week_start, first.week_end) == (second.week_start, second.week_end)
    assert first.id != second.id


def test_sale_survives_a_json_round_trip(mango_pineapple_boba, watermelon_shell):
    order = Order(drinks=(mango_pineapple_boba, watermelon_shell), timestamp=at(2025, 9, 10, 14))
    sale = make_sale(order, PaymentMethod.CARD, festival_week_id="week-1")

    restored = Sale.from_dict(sale.to_dict())

    assert restored == sale
    assert restored.to_dict()["festivalWeekId"] == "week-1"
    assert restored.to_dict()["order"]["drinks"][0]["addOns"] == ["boba"]


def test_sale_keeps_stored_totals_when_decoded(mango_cup):
    raw = make_sale(Order(drinks=(mango_cup,)), PaymentMethod.CARD).to_dict()
    raw["surcharge"] = "0.50"
    raw["total"] = "10.50"

    sale = Sale.from_dict(raw)

    assert sale.surcharge == Decimal("0.50")
    assert sale.total == Decimal("10.50")


def test_preset_requires_a_flavour():
    with pytest.raises(ValueError):
        Preset(name="Empty", cup=CupType.CUP, flavours=())


def test_preset_from_dict_accepts_missing_id():
    preset = Preset.from_dict({"name": "Taro", "cup": "cup", "flavours": ["taro"]})
    assert preset.id
    assert preset.add_ons == frozenset()


def test_week_bounds_agree_across_dst_switch(dst_zone):
    monday = FestivalWeek.for_date("Pier", at(2025, 3, 24, 9))
    sunday = FestivalWeek.for_date("Pier", at(2025, 3, 30, 18))

    assert (monday.week_start, monday.week_end) == (sunday.week_start, sunday.week_end)
    assert monday.week_start.utcoffset() == timedelta(hours=1)
    assert monday.week_end.utcoffset() == timedelta(hours=2)
    assert monday.contains(at(2025, 3, 30, 23, 30))
    assert not monday.contains(at(2025, 3, 31, 0, 0))


def test_sale_total_must_match_parts(mango_cup):
    raw = make_sale(Order(drinks=(mango_cup,)), PaymentMethod.CASH).to_dict()
    raw["total"] = "99.00"

    with pytest.raises(ValueError):
        Sale.from_dict(raw)
    with pytest.raises(ValueError):
        Sale(
            order=Order(drinks=(mango_cup,)),
            payment=PaymentMethod.CARD,
            subtotal=Decimal("10.00"),
            surcharge=Decimal("1.00"),
            total=Decimal("10.00"),
        )
