"""Editable product policy: prices, surcharge rule, default presets and labels."""

from __future__ import annotations

from decimal import Decimal

BASE_PRICE_BY_CUP: dict[str, Decimal] = {
    "cup": Decimal("10.00"),
    "pshell": Decimal("12.00"),
    "wshell": Decimal("15.00"),
}

# Every add-on is free today; pricing reads this table so a non-zero entry takes effect immediately.
ADD_ON_PRICES: dict[str, Decimal] = {
    "boba": Decimal("0.00"),
    "lessSugar": Decimal("0.00"),
    "noSugar": Decimal("0.00"),
    "lessIce": Decimal("0.00"),
    "noIce": Decimal("0.00"),
}

CARD_SURCHARGE_PER_DRINK = Decimal("1.00")
SURCHARGE_EXEMPT_CUPS: frozenset[str] = frozenset({"wshell"})

# Seeded once on first run; values consumed by juice_cashier.presets.
DEFAULT_PRESETS: list[dict[str, str | list[str]]] = [
    {"name": "Mango + Pineapple • Boba", "cup": "cup", "flavours": ["mango", "pineapple"], "addOns": ["boba"]},
    {"name": "Watermelon Shell", "cup": "wshell", "flavours": ["watermelon"], "addOns": []},
]

CUP_LABELS: dict[str, str] = {
    "cup": "Cup",
    "pshell": "Pineapple Shell",
    "wshell": "Watermelon Shell",
}

CUP_BADGES: dict[str, str] = {
    "cup": "C",
    "pshell": "P",
    "wshell": "W",
}

ADD_ON_LABELS: dict[str, str] = {
    "boba": "Boba",
    "lessSugar": "Less Sugar",
    "noSugar": "No Sugar",
    "lessIce": "Less Ice",
    "noIce": "No Ice",
}

# Builder hotkeys: one letter per flavour, digits pick the cup.
FLAVOUR_KEYS: dict[str, str] = {
    "m": "mango",
    "i": "pineapple",
    "l": "watermelon",
    "r": "strawberry",
    "b": "banana",
    "o": "coconut",
    "t": "taro",
}

CUP_KEYS: dict[str, str] = {
    "1": "cup",
    "2": "pshell",
    "3": "wshell",
}
