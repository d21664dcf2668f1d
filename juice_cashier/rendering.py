"""Rendering helpers shared by the cashier screens and the receipt printer."""

from __future__ import annotations

from decimal import Decimal
from fractions import Fraction
from typing import Iterable

from rich.text import Text

from juice_cashier.constant import ADD_ON_LABELS, CUP_BADGES, CUP_LABELS
from juice_cashier.models import AddOn, CupType, Drink, OrderItem, ordered_add_ons
from juice_cashier.stats import TransactionRow


def format_money(amount: Decimal) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def format_cups(cups: Fraction) -> str:
    return f"{float(cups):.2f} cups"


def cup_label(cup: CupType) -> str:
    return CUP_LABELS.get(cup.value, cup.value.capitalize())


def add_ons_label(add_ons: Iterable[AddOn]) -> str:
    chosen = ordered_add_ons(add_ons)
    if not chosen:
        return "No add-ons"
    return ", ".join(ADD_ON_LABELS.get(add_on.value, add_on.value) for add_on in chosen)


def badge_style(cup: CupType) -> str:
    """Return a consistent badge style for cup tags."""
    if cup is CupType.PSHELL:
        return "bold #0b1f0f on #e8c547"
    if cup is CupType.WSHELL:
        return "bold #ffffff on #b23a48"
    return "bold #ffffff on #2f6db5"


def format_drink_label(drink: Drink) -> Text:
    """Render a drink as a colored cup badge followed by its flavours."""
    text = Text()
    text.append(CUP_BADGES.get(drink.cup_type.value, "?"), style=badge_style(drink.cup_type))
    text.append(f" {drink.flavour_list}")
    return text


def format_add_on_tags(add_ons: Iterable[AddOn]) -> Text:
    """Render selected add-ons as compact tags."""
    text = Text()
    for idx, add_on in enumerate(ordered_add_ons(add_ons)):
        if idx > 0:
            text.append(" ")
        text.append(f"[{ADD_ON_LABELS[add_on.value]}]", style="white")
    return text


def format_cart_line(item: OrderItem) -> Text:
    text = format_drink_label(item.drink)
    text.append(f"  x{item.quantity}", style="bold")
    text.append(f"  {format_money(item.line_total)}")
    if item.drink.add_ons:
        text.append("\n      ")
        text.append_text(format_add_on_tags(item.drink.add_ons))
    return text


def format_transaction(row: TransactionRow) -> Text:
    text = Text()
    text.append(f"{row.timestamp:%b} {row.timestamp.day} {row.timestamp:%H:%M}", style="bold")
    cups = "cup" if row.drink_count == 1 else "cups"
    text.append(f"  {row.location_name} • {row.payment.value.capitalize()} • {row.drink_count} {cups}", style="dim")
    if row.surcharge > 0:
        text.append(f"  (surcharge {format_money(row.surcharge)})", style="dim")
    text.append(f"  {format_money(row.total)}", style="bold")
    return text


def window_bounds(total: int, rows: int, selected: int | None) -> tuple[int, int]:
    """Slice of a list that fits ``rows`` lines while keeping ``selected`` near the middle."""
    if total <= 0:
        return (0, 0)

    rows = max(1, rows)
    if total <= rows:
        return (0, total)

    if selected is None:
        start = 0
    else:
        half = rows // 2
        start = selected - half
        start = max(0, start)
        start = min(start, total - rows)

    return (start, start + rows)
