"""Pricing rules: unit price per drink and the card surcharge."""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from juice_cashier.constant import (
    ADD_ON_PRICES,
    BASE_PRICE_BY_CUP,
    CARD_SURCHARGE_PER_DRINK,
    SURCHARGE_EXEMPT_CUPS,
)
from juice_cashier.models import AddOn, CupType, Drink, Flavour, PaymentMethod, to_money

ZERO = Decimal("0.00")


def base_price(cup: CupType) -> Decimal:
    # Unknown cups price at zero rather than failing a sale.
    return BASE_PRICE_BY_CUP.get(getattr(cup, "value", cup), ZERO)


def add_on_price(add_on: AddOn) -> Decimal:
    return ADD_ON_PRICES.get(getattr(add_on, "value", add_on), ZERO)


def price(cup: CupType, add_ons: Iterable[AddOn], flavours: Iterable[Flavour]) -> Decimal:
    """Unit price for a drink.

    Flavours are accepted so flavour-based rules (a premium fruit, say) can be
    added here without touching callers; they do not affect the price today.
    """
    extras = sum((add_on_price(add_on) for add_on in set(add_ons)), ZERO)
    return to_money(base_price(cup) + extras)


def make_drink(cup: CupType, flavours: Iterable[Flavour], add_ons: Iterable[AddOn] = ()) -> Drink:
    """Build a drink priced with the rules in effect right now."""
    flavours = list(flavours)
    add_ons = frozenset(add_ons)
    return Drink(
        selection=tuple(flavours),
        cup_type=cup,
        add_ons=add_ons,
        price=price(cup, add_ons, flavours),
    )


def is_surcharge_exempt(cup: CupType) -> bool:
    return getattr(cup, "value", cup) in SURCHARGE_EXEMPT_CUPS


def surcharge_for(payment: PaymentMethod, cups: Iterable[CupType]) -> Decimal:
    """Card payments pay a flat fee per cup, except exempt cups; cash pays nothing."""
    if PaymentMethod(payment) is not PaymentMethod.CARD:
        return ZERO
    charged = sum(1 for cup in cups if not is_surcharge_exempt(cup))
    return to_money(CARD_SURCHARGE_PER_DRINK * charged)
