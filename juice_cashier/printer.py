"""Thermal receipt printing for recorded sales."""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path

from juice_cashier.app_logger import get_logger
from juice_cashier.config import (
    PRINTER_FONT_PATH,
    PRINTER_FONT_SIZE,
    PRINTER_LEFT_INDENT_PX,
    PRINTER_USB_PRODUCT_ID,
    PRINTER_USB_VENDOR_ID,
    PRINTER_WIDTH_PX,
)
from juice_cashier.constant import CUP_BADGES
from juice_cashier.models import Drink, FestivalWeek, Sale
from juice_cashier.rendering import add_ons_label, format_money

logger = get_logger(__name__)

_FONT_OVERRIDE_ENV = "JUICE_CASHIER_PRINTER_FONT_PATH"
_LINUX_FONT_FALLBACKS = (
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/noto/NotoSans-Regular.ttf",
    "/usr/share/fonts/liberation/LiberationSans-Regular.ttf",
)
_LINE_EXTRA_PX = 12
_TAIL_SPACER_PX = 70
_RULE = "-" * 24


@dataclass
class _GroupedDrinkRow:
    drink: Drink
    count: int

    @property
    def line_total(self) -> Decimal:
        return self.drink.price * self.count


def _group_drinks(drinks: tuple[Drink, ...]) -> list[_GroupedDrinkRow]:
    """Collapse the order's one-entry-per-cup list back into counted rows, first-seen order."""
    rows: list[_GroupedDrinkRow] = []
    for drink in drinks:
        for row in rows:
            if row.drink == drink:
                row.count += 1
                break
        else:
            rows.append(_GroupedDrinkRow(drink=drink, count=1))
    return rows


def receipt_lines(sale: Sale, week: FestivalWeek | None = None) -> list[str]:
    """Plain-text receipt content, one printed line per entry."""
    stamp = sale.timestamp
    lines = [f"{stamp:%Y-%m-%d %H:%M}"]
    if week is not None:
        lines.append(week.location_name)
    lines.append(_RULE)

    for row in _group_drinks(sale.order.drinks):
        badge = CUP_BADGES.get(row.drink.cup_type.value, "?")
        lines.append(f"{row.count}x {badge}-{row.drink.flavour_list}  {format_money(row.line_total)}")
        if row.drink.add_ons:
            lines.append(f"    {add_ons_label(row.drink.add_ons)}")

    lines.append(_RULE)
    lines.append(f"Subtotal  {format_money(sale.subtotal)}")
    if sale.surcharge > 0:
        lines.append(f"Card fee  {format_money(sale.surcharge)}")
    lines.append(f"TOTAL  {format_money(sale.total)}")
    lines.append(f"Paid by {sale.payment.value}")
    return lines


def resolve_printer_font_path() -> str:
    """
    Resolve a printer font path.

    Resolution order:
    1. JUICE_CASHIER_PRINTER_FONT_PATH (if set)
    2. PRINTER_FONT_PATH
    3. Known Linux fallbacks
    """
    env_override = os.environ.get(_FONT_OVERRIDE_ENV, "").strip()
    candidates: list[str] = []
    if env_override:
        candidates.append(env_override)
    candidates.append(PRINTER_FONT_PATH)
    candidates.extend(_LINUX_FONT_FALLBACKS)

    seen: set[str] = set()
    for candidate in candidates:
        if not candidate or candidate in seen:
            continue
        seen.add(candidate)
        if Path(candidate).is_file():
            return candidate

    raise RuntimeError(
        f"No usable printer font found. Set {_FONT_OVERRIDE_ENV} to a valid .ttf/.otf file. "
        f"Tried: {', '.join(seen)}"
    )


def check_printer_dependencies() -> tuple[bool, str]:
    """Check whether printer dependencies are importable."""
    try:
        from escpos.printer import Usb  # noqa: F401
        from PIL import ImageFont

        ImageFont.truetype(resolve_printer_font_path(), PRINTER_FONT_SIZE)
    except Exception as exc:
        return (False, f"Printer unavailable: {exc}")
    return (True, "Printer ready")


def render_line(text: str, font: object) -> object:
    from PIL import Image, ImageDraw

    probe = ImageDraw.Draw(Image.new("1", (1, 1), color=1))
    bbox = probe.textbbox((0, 0), text, font=font)
    text_height = bbox[3] - bbox[1]
    canvas_height = max(12, text_height + _LINE_EXTRA_PX)

    img = Image.new("1", (PRINTER_WIDTH_PX, canvas_height), color=1)
    draw = ImageDraw.Draw(img)
    # Offset by bbox top so descenders are not clipped.
    y = (canvas_height - text_height) // 2 - bbox[1]
    draw.text((PRINTER_LEFT_INDENT_PX, y), text, font=font, fill=0)
    return img


def print_sale_receipt(sale: Sale, week: FestivalWeek | None = None) -> None:
    """Print one sale and cut the ticket."""
    try:
        from escpos.printer import Usb
        from PIL import Image, ImageFont
    except Exception as exc:
        raise RuntimeError(f"Printer dependencies unavailable: {exc}") from exc

    font = ImageFont.truetype(resolve_printer_font_path(), PRINTER_FONT_SIZE)
    printer = Usb(PRINTER_USB_VENDOR_ID, PRINTER_USB_PRODUCT_ID)
    for line in receipt_lines(sale, week):
        printer.image(render_line(line, font))
    printer.image(Image.new("1", (PRINTER_WIDTH_PX, _TAIL_SPACER_PX), color=1))
    printer.cut()
    logger.info("receipt printed sale=%s", sale.id)
