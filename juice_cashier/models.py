"""Domain models for the juice stand cashier."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable
from uuid import uuid4

from juice_cashier.periods import as_local, end_of_week, now_local, start_of_week

CENT = Decimal("0.01")


class Flavour(str, Enum):
    MANGO = "mango"
    PINEAPPLE = "pineapple"
    WATERMELON = "watermelon"
    STRAWBERRY = "strawberry"
    BANANA = "banana"
    COCONUT = "coconut"
    TARO = "taro"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class CupType(str, Enum):
    CUP = "cup"
    PSHELL = "pshell"
    WSHELL = "wshell"


class AddOn(str, Enum):
    BOBA = "boba"
    LESS_SUGAR = "lessSugar"
    NO_SUGAR = "noSugar"
    LESS_ICE = "lessIce"
    NO_ICE = "noIce"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"


def new_id() -> str:
    return uuid4().hex


def to_money(value: Any) -> Decimal:
    """Coerce a number or numeric string to a cent-quantized Decimal."""
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"not a money amount: {value!r}") from exc


def ordered_add_ons(add_ons: Iterable[AddOn]) -> list[AddOn]:
    """Return add-ons in catalogue order so serialised output is stable."""
    chosen = set(add_ons)
    return [add_on for add_on in AddOn if add_on in chosen]


def unique_flavours(flavours: Iterable[Flavour]) -> tuple[Flavour, ...]:
    """Drop repeats, keeping first-pick order."""
    seen: list[Flavour] = []
    for flavour in flavours:
        flavour = Flavour(flavour)
        if flavour not in seen:
            seen.append(flavour)
    return tuple(seen)


def _parse_instant(raw: str) -> datetime:
    return as_local(datetime.fromisoformat(raw))


@dataclass(frozen=True)
class Drink:
    """A configured drink with its unit price frozen at creation time."""

    selection: tuple[Flavour, ...]
    cup_type: CupType
    add_ons: frozenset[AddOn]
    price: Decimal

    def __post_init__(self) -> None:
        selection = unique_flavours(self.selection)
        if not selection:
            raise ValueError("a drink needs at least one flavour")
        object.__setattr__(self, "selection", selection)
        object.__setattr__(self, "cup_type", CupType(self.cup_type))
        object.__setattr__(self, "add_ons", frozenset(AddOn(a) for a in self.add_ons))
        object.__setattr__(self, "price", to_money(self.price))

    @property
    def flavour_list(self) -> str:
        return " + ".join(flavour.label for flavour in self.selection)

    @property
    def is_mix(self) -> bool:
        return len(self.selection) > 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "selection": [flavour.value for flavour in self.selection],
            "cupType": self.cup_type.value,
            "addOns": [add_on.value for add_on in ordered_add_ons(self.add_ons)],
            "price": str(self.price),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Drink:
        return cls(
            selection=tuple(Flavour(value) for value in raw["selection"]),
            cup_type=CupType(raw["cupType"]),
            add_ons=frozenset(AddOn(value) for value in raw.get("addOns", [])),
            price=to_money(raw["price"]),
        )


@dataclass
class OrderItem:
    """A cart line: one drink configuration and how many of it."""

    drink: Drink
    quantity: int = 1
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        self.quantity = max(1, int(self.quantity))

    @property
    def unit_price(self) -> Decimal:
        return self.drink.price

    @property
    def line_total(self) -> Decimal:
        return self.drink.price * self.quantity


@dataclass(frozen=True)
class Order:
    """Checkout snapshot: one drink entry per physical cup."""

    drinks: tuple[Drink, ...]
    timestamp: datetime = field(default_factory=now_local)
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        object.__setattr__(self, "drinks", tuple(self.drinks))
        object.__setattr__(self, "timestamp", as_local(self.timestamp))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "drinks": [drink.to_dict() for drink in self.drinks],
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Order:
        return cls(
            id=str(raw["id"]),
            drinks=tuple(Drink.from_dict(item) for item in raw["drinks"]),
            timestamp=_parse_instant(raw["timestamp"]),
        )


@dataclass(frozen=True)
class FestivalWeek:
    """A location tagged to one ISO week (Monday 00:00:00 through Sunday 23:59:59)."""

    location_name: str
    week_start: datetime
    week_end: datetime
    id: str = field(default_factory=new_id)

    @classmethod
    def for_date(cls, location_name: str, reference: datetime, week_id: str | None = None) -> FestivalWeek:
        return cls(
            location_name=location_name,
            week_start=start_of_week(reference),
            week_end=end_of_week(reference),
            id=week_id or new_id(),
        )

    def contains(self, moment: datetime) -> bool:
        return self.week_start <= as_local(moment) <= self.week_end

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "locationName": self.location_name,
            "weekStart": self.week_start.isoformat(),
            "weekEnd": self.week_end.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> FestivalWeek:
        return cls(
            id=str(raw["id"]),
            location_name=str(raw["locationName"]),
            week_start=_parse_instant(raw["weekStart"]),
            week_end=_parse_instant(raw["weekEnd"]),
        )


@dataclass(frozen=True)
class Sale:
    """A committed transaction.

    Totals are stored, not derived on read: a later change to the surcharge
    rule must not rewrite history. Build new sales with ``ledger.make_sale``.
    """

    order: Order
    payment: PaymentMethod
    subtotal: Decimal
    surcharge: Decimal
    total: Decimal
    festival_week_id: str | None = None
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        object.__setattr__(self, "payment", PaymentMethod(self.payment))
        for name in ("subtotal", "surcharge", "total"):
            object.__setattr__(self, name, to_money(getattr(self, name)))
        if self.total != self.subtotal + self.surcharge:
            raise ValueError(
                f"sale {self.id}: total {self.total} != subtotal {self.subtotal} + surcharge {self.surcharge}"
            )

    @property
    def timestamp(self) -> datetime:
        return self.order.timestamp

    @property
    def drink_count(self) -> int:
        return len(self.order.drinks)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "order": self.order.to_dict(),
            "payment": self.payment.value,
            "festivalWeekId": self.festival_week_id,
            "subtotal": str(self.subtotal),
            "surcharge": str(self.surcharge),
            "total": str(self.total),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Sale:
        week_id = raw.get("festivalWeekId")
        return cls(
            id=str(raw["id"]),
            order=Order.from_dict(raw["order"]),
            payment=PaymentMethod(raw["payment"]),
            festival_week_id=str(week_id) if week_id is not None else None,
            subtotal=to_money(raw["subtotal"]),
            surcharge=to_money(raw["surcharge"]),
            total=to_money(raw["total"]),
        )


@dataclass(frozen=True)
class Preset:
    """A named shortcut; expanded through pricing so it always carries the current price."""

    name: str
    cup: CupType
    flavours: tuple[Flavour, ...]
    add_ons: frozenset[AddOn] = frozenset()
    id: str = field(default_factory=new_id)

    def __post_init__(self) -> None:
        flavours = unique_flavours(self.flavours)
        if not flavours:
            raise ValueError("a preset needs at least one flavour")
        object.__setattr__(self, "flavours", flavours)
        object.__setattr__(self, "cup", CupType(self.cup))
        object.__setattr__(self, "add_ons", frozenset(AddOn(a) for a in self.add_ons))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "cup": self.cup.value,
            "flavours": [flavour.value for flavour in self.flavours],
            "addOns": [add_on.value for add_on in ordered_add_ons(self.add_ons)],
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Preset:
        return cls(
            id=str(raw.get("id") or new_id()),
            name=str(raw["name"]),
            cup=CupType(raw["cup"]),
            flavours=tuple(Flavour(value) for value in raw["flavours"]),
            add_ons=frozenset(AddOn(value) for value in raw.get("addOns", [])),
        )
