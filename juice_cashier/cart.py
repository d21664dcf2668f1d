"""In-memory cart for the order being built."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable

from juice_cashier.app_logger import get_logger
from juice_cashier.models import Drink, FestivalWeek, Order, OrderItem, PaymentMethod, Sale
from juice_cashier.periods import now_local
from juice_cashier.pricing import ZERO, surcharge_for

if TYPE_CHECKING:
    from juice_cashier.ledger import SalesLedger

logger = get_logger(__name__)


class Cart:
    """Line items keyed by drink configuration.

    Adding a drink that is structurally equal to an existing line bumps that
    line's quantity instead of appending. Quantities never drop below one;
    removing a line is always an explicit call.
    """

    def __init__(self, items: Iterable[OrderItem] = ()) -> None:
        self._items: list[OrderItem] = []
        for item in items:
            self.add_item(item)

    @property
    def items(self) -> tuple[OrderItem, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    def item(self, item_id: str) -> OrderItem | None:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    # Mutations

    def add(self, drink: Drink, quantity: int = 1) -> OrderItem:
        quantity = max(1, quantity)
        for item in self._items:
            if item.drink == drink:
                item.quantity += quantity
                return item
        item = OrderItem(drink=drink, quantity=quantity)
        self._items.append(item)
        return item

    def add_item(self, item: OrderItem) -> OrderItem:
        return self.add(item.drink, item.quantity)

    def remove(self, item_id: str) -> None:
        self._items = [item for item in self._items if item.id != item_id]

    def remove_at(self, indexes: Iterable[int]) -> None:
        doomed = {idx for idx in indexes if 0 <= idx < len(self._items)}
        self._items = [item for idx, item in enumerate(self._items) if idx not in doomed]

    def set_quantity(self, item_id: str, quantity: int) -> None:
        item = self.item(item_id)
        if item is None:
            return
        item.quantity = max(1, quantity)

    def increment(self, item_id: str) -> None:
        item = self.item(item_id)
        if item is None:
            return
        item.quantity += 1

    def decrement(self, item_id: str) -> None:
        item = self.item(item_id)
        if item is None:
            return
        item.quantity = max(1, item.quantity - 1)

    def clear(self) -> None:
        self._items.clear()

    # Totals

    @property
    def total(self) -> Decimal:
        return sum((item.line_total for item in self._items), ZERO)

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self._items)

    @property
    def card_surcharge(self) -> Decimal:
        cups = (item.drink.cup_type for item in self._items for _ in range(item.quantity))
        return surcharge_for(PaymentMethod.CARD, cups)

    @property
    def card_total(self) -> Decimal:
        return self.total + self.card_surcharge

    def snapshot(self, timestamp: datetime | None = None) -> Order:
        """Flatten the cart into an order with one drink entry per cup, in line order."""
        drinks = [item.drink for item in self._items for _ in range(item.quantity)]
        return Order(drinks=tuple(drinks), timestamp=timestamp or now_local())


def checkout(
    cart: Cart,
    ledger: SalesLedger,
    payment: PaymentMethod,
    festival_week: FestivalWeek | None = None,
    timestamp: datetime | None = None,
) -> Sale | None:
    """Record the cart as a sale and clear it. An empty cart records nothing."""
    if cart.is_empty:
        logger.info("checkout skipped: empty cart")
        return None
    sale = ledger.record(cart.snapshot(timestamp), payment, festival_week)
    cart.clear()
    return sale
