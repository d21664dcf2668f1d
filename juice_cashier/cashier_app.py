"""Main Textual app class."""

from __future__ import annotations

from typing import Callable

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.widgets import Header, Static

from juice_cashier.add_ons_modal import AddOnsModal
from juice_cashier.app_logger import get_logger
from juice_cashier.cart import Cart, checkout
from juice_cashier.constant import CUP_KEYS, FLAVOUR_KEYS
from juice_cashier.ledger import SalesLedger
from juice_cashier.models import AddOn, CupType, FestivalWeek, Flavour, PaymentMethod, Preset, Sale
from juice_cashier.periods import now_local
from juice_cashier.presets import PresetStore, expand_preset
from juice_cashier.presets_modal import PresetsModal
from juice_cashier.pricing import make_drink, price
from juice_cashier.rendering import (
    add_ons_label,
    badge_style,
    cup_label,
    format_cart_line,
    format_money,
    window_bounds,
)
from juice_cashier.stats_screen import StatsScreen
from juice_cashier.week_modal import WeekChoice, WeekModal

logger = get_logger(__name__)

ReceiptPrinter = Callable[[Sale, FestivalWeek | None], None]

_KEY_FOR_FLAVOUR = {flavour: key for key, flavour in FLAVOUR_KEYS.items()}
_KEY_FOR_CUP = {cup: key for key, cup in CUP_KEYS.items()}


def current_week(ledger: SalesLedger) -> FestivalWeek | None:
    """The most recently created week that covers today, if any."""
    today = now_local()
    for week in ledger.weeks:
        if week.contains(today):
            return week
    return None


class CashierApp(App):
    """A Textual app for building drinks, ringing up sales and reviewing stats."""

    TITLE = "Juice Cashier"
    SUB_TITLE = "Cups / Pineapple Shells / Watermelon Shells"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #build-pane {
        width: 2fr;
        border: round $secondary;
        padding: 1;
    }

    #cart-pane {
        width: 3fr;
        border: round $primary;
        padding: 1;
    }

    #build {
        height: 1fr;
    }

    #cart-list {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #totals {
        height: auto;
        margin-top: 1;
    }

    #status-bar {
        height: 3;
        border: heavy $secondary;
        padding: 0 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    BINDINGS = [
        ("enter", "add_to_cart", "Add drink"),
        ("plus", "change_quantity(1)", "Qty +1"),
        ("minus", "change_quantity(-1)", "Qty -1"),
        ("up", "move_cart_selection(-1)", "Previous line"),
        ("down", "move_cart_selection(1)", "Next line"),
        Binding("ctrl+s", "checkout('cash')", "Cash", priority=True),
        Binding("ctrl+b", "checkout('card')", "Card", priority=True),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        ledger: SalesLedger,
        presets: PresetStore,
        cart: Cart | None = None,
        receipt_printer: ReceiptPrinter | None = None,
    ) -> None:
        super().__init__()
        self.ledger = ledger
        self.presets = presets
        self.cart = cart if cart is not None else Cart()
        self.receipt_printer = receipt_printer
        self.build_cup = CupType.CUP
        self.build_flavours: list[Flavour] = []
        self.build_add_ons: set[AddOn] = set()
        self.active_week = current_week(ledger)
        self.cart_selected_index: int | None = None
        self.system_status = ""
        self.last_sale: Sale | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="build-pane"):
                yield Static("Build Drink", classes="pane-title")
                yield Static(id="build")
            with Vertical(id="cart-pane"):
                yield Static("Cart", classes="pane-title")
                yield Static("(cart is empty)", id="cart-list")
                yield Static(id="totals")
        yield Static(id="status-bar")

    def on_mount(self) -> None:
        logger.info("cashier app mounted week=%s", self.active_week.id if self.active_week else None)
        self._refresh_all()

    def _main_screen_active(self) -> bool:
        return len(self.screen_stack) == 1

    def on_key(self, event: Key) -> None:
        # While a modal or the stats screen is up, it owns the keyboard.
        if not self._main_screen_active():
            return

        if not event.is_printable or not event.character or len(event.character) != 1:
            return
        if not event.character.isalnum():
            return

        key = event.character.lower()
        handled = True
        if key in FLAVOUR_KEYS:
            self._toggle_flavour(Flavour(FLAVOUR_KEYS[key]))
        elif key in CUP_KEYS:
            self.build_cup = CupType(CUP_KEYS[key])
            self._refresh_build()
        elif key == "a":
            self.push_screen(AddOnsModal(self.build_add_ons, on_change=self._refresh_build))
        elif key == "p":
            self.push_screen(PresetsModal(self.presets, on_pick=self.add_preset, build_preset=self._build_as_preset))
        elif key == "w":
            self.push_screen(WeekModal(self.ledger, self.active_week), self._on_week_chosen)
        elif key == "s":
            self.push_screen(StatsScreen(self.ledger))
        elif key == "j":
            self.action_move_cart_selection(1)
        elif key == "k":
            self.action_move_cart_selection(-1)
        elif key == "d":
            self._delete_selected_line()
        elif key == "x":
            self._reset_build()
        else:
            handled = False
        if handled:
            event.stop()

    # Actions

    def action_add_to_cart(self) -> None:
        if not self._main_screen_active():
            return
        if not self.build_flavours:
            self._set_status("Pick at least one flavour first")
            return
        drink = make_drink(self.build_cup, self.build_flavours, self.build_add_ons)
        item = self.cart.add(drink)
        self.cart_selected_index = self.cart.items.index(item)
        self._set_status(f"Added {drink.flavour_list} ({cup_label(drink.cup_type)})")
        self._reset_build()
        self._refresh_cart()

    def add_preset(self, preset: Preset) -> None:
        drink = expand_preset(preset)
        item = self.cart.add(drink)
        self.cart_selected_index = self.cart.items.index(item)
        self._set_status(f"Added preset {preset.name}")
        self._refresh_cart()

    def action_change_quantity(self, delta: int) -> None:
        if not self._main_screen_active():
            return
        item = self._selected_line()
        if item is None:
            return
        if delta > 0:
            self.cart.increment(item.id)
        else:
            self.cart.decrement(item.id)
        self._refresh_cart()

    def action_move_cart_selection(self, delta: int) -> None:
        if not self._main_screen_active():
            return
        count = len(self.cart)
        if count == 0:
            return
        if self.cart_selected_index is None:
            self.cart_selected_index = 0 if delta > 0 else count - 1
        else:
            self.cart_selected_index = (self.cart_selected_index + delta) % count
        self._refresh_cart()

    def action_checkout(self, payment: str) -> None:
        if not self._main_screen_active():
            return
        if self.cart.is_empty:
            self._set_status("Nothing to check out")
            return

        method = PaymentMethod(payment)
        sale = checkout(self.cart, self.ledger, method, self.active_week)
        if sale is None:
            return
        self.last_sale = sale
        self.cart_selected_index = None
        self._refresh_cart()

        summary = f"{method.value.capitalize()} sale {format_money(sale.total)} ({sale.drink_count} cups)"
        if self.receipt_printer is not None:
            try:
                self.receipt_printer(sale, self.active_week)
            except Exception as exc:
                logger.exception("receipt print failed sale=%s", sale.id)
                self._set_status(f"{summary} saved but print failed: {exc}")
                return
        self._set_status(f"{summary} saved")

    # Build state

    def _toggle_flavour(self, flavour: Flavour) -> None:
        if flavour in self.build_flavours:
            self.build_flavours.remove(flavour)
        else:
            self.build_flavours.append(flavour)
        self._refresh_build()

    def _reset_build(self) -> None:
        self.build_flavours.clear()
        self.build_add_ons.clear()
        self._refresh_build()

    def _build_as_preset(self, name: str) -> Preset | None:
        if not self.build_flavours:
            return None
        return Preset(name=name, cup=self.build_cup, flavours=tuple(self.build_flavours), add_ons=frozenset(self.build_add_ons))

    def _on_week_chosen(self, choice: WeekChoice | None) -> None:
        if choice is None:
            return
        self.active_week = choice.week
        label = choice.week.location_name if choice.week else "no festival week"
        self._set_status(f"Tagging sales with {label}")
        self._refresh_build()

    # Cart state

    def _selected_line(self):
        items = self.cart.items
        if self.cart_selected_index is None or not (0 <= self.cart_selected_index < len(items)):
            return None
        return items[self.cart_selected_index]

    def _delete_selected_line(self) -> None:
        item = self._selected_line()
        if item is None:
            return
        idx = self.cart_selected_index
        self.cart.remove(item.id)
        if self.cart.is_empty:
            self.cart_selected_index = None
        else:
            self.cart_selected_index = min(idx, len(self.cart) - 1)
        self._refresh_cart()

    # Rendering

    def _set_status(self, message: str) -> None:
        self.system_status = message
        self._refresh_status()

    def _refresh_all(self) -> None:
        self._refresh_build()
        self._refresh_cart()
        self._refresh_status()

    def _refresh_build(self) -> None:
        try:
            build = self.query_one("#build", Static)
        except NoMatches:
            return

        text = Text()
        text.append("Vessel\n", style="bold")
        for cup in CupType:
            marker = "●" if cup is self.build_cup else "○"
            text.append(f" {_KEY_FOR_CUP[cup.value]} {marker} ")
            text.append(cup_label(cup), style=badge_style(cup) if cup is self.build_cup else "")
            text.append("\n")

        text.append("\nFlavours\n", style="bold")
        for flavour in Flavour:
            picked = flavour in self.build_flavours
            checked = "[x]" if picked else "[ ]"
            text.append(f" {_KEY_FOR_FLAVOUR[flavour.value]} {checked} {flavour.label}\n", style="bold" if picked else "")

        text.append("\nAdd-ons  ", style="bold")
        text.append(f"{add_ons_label(self.build_add_ons)}\n")

        unit = price(self.build_cup, self.build_add_ons, self.build_flavours)
        text.append("\nUnit price  ", style="bold")
        text.append(format_money(unit))
        if self.build_flavours:
            text.append(f"\n{' + '.join(f.label for f in self.build_flavours)}", style="italic")

        week = self.active_week
        text.append("\n\nFestival week  ", style="bold")
        text.append(week.location_name if week else "none", style="" if week else "dim")
        build.update(text)

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height // 2)

    def _refresh_cart(self) -> None:
        try:
            cart_widget = self.query_one("#cart-list", Static)
            totals_widget = self.query_one("#totals", Static)
        except NoMatches:
            return

        items = self.cart.items
        if not items:
            self.cart_selected_index = None
            cart_widget.update("(cart is empty)")
        else:
            if self.cart_selected_index is not None and self.cart_selected_index >= len(items):
                self.cart_selected_index = len(items) - 1

            start, end = window_bounds(len(items), self._visible_rows(cart_widget), self.cart_selected_index)
            lines = Text()
            if start > 0:
                lines.append("⋮\n", style="dim")
            for idx in range(start, end):
                if idx > start:
                    lines.append("\n")
                pointer = "➤ " if idx == self.cart_selected_index else "  "
                lines.append(pointer)
                lines.append(f"{idx + 1}. ")
                lines.append_text(format_cart_line(items[idx]))
            if end < len(items):
                lines.append("\n⋮", style="dim")
            cart_widget.update(lines)

        totals = Text()
        totals.append(f"Cups: {self.cart.total_quantity}\n")
        totals.append("Total (Cash)  ", style="bold")
        totals.append(f"{format_money(self.cart.total)}\n")
        totals.append("Total (Card incl. fee)  ", style="bold")
        totals.append(format_money(self.cart.card_total))
        totals_widget.update(totals)

    def _refresh_status(self) -> None:
        try:
            bar = self.query_one("#status-bar", Static)
        except NoMatches:
            return
        status = self.system_status or "Ready"
        bar.update(
            "Keys: flavours M I L R B O T • cup 1-3 • A add-ons • Enter add • P presets • W week • "
            "J/K select • +/- qty • D delete • Ctrl+S cash • Ctrl+B card • S stats\n"
            f"{status}"
        )
