"""Add-ons modal screen."""

from __future__ import annotations

from typing import Callable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from juice_cashier.constant import ADD_ON_LABELS
from juice_cashier.models import AddOn
from juice_cashier.pricing import add_on_price
from juice_cashier.rendering import format_money


class AddOnsModal(ModalScreen[None]):
    """Centered modal to toggle add-ons for the drink being built."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "toggle_current", "Toggle"),
        ("space", "toggle_current", "Toggle"),
    ]

    CSS = """
    AddOnsModal {
        align: center middle;
        background: $background 60%;
    }

    #add-ons-dialog {
        width: 48;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #add-ons-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #add-ons-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)

    def __init__(self, selected: set[AddOn], on_change: Callable[[], None]) -> None:
        super().__init__()
        # Shared with the caller; toggles show up in the build pane on close.
        self.selected = selected
        self.on_change = on_change
        self.options = list(AddOn)

    def compose(self) -> ComposeResult:
        with Container(id="add-ons-dialog"):
            yield Static("Add-ons", id="add-ons-title")
            yield Static(id="add-ons-body")
            yield Static("J/K/↑/↓ move, Enter/Space toggle, Esc/q close", id="add-ons-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def action_close(self) -> None:
        self.dismiss()
        self.on_change()

    def action_move_cursor(self, delta: int) -> None:
        self.cursor_index = (self.cursor_index + delta) % len(self.options)
        self._refresh_content()

    def action_toggle_current(self) -> None:
        add_on = self.options[self.cursor_index]
        if add_on in self.selected:
            self.selected.remove(add_on)
        else:
            self.selected.add(add_on)
        self._refresh_content()

    def _refresh_content(self) -> None:
        body = self.query_one("#add-ons-body", Static)
        content = Text(style="white")
        for idx, add_on in enumerate(self.options):
            if idx > 0:
                content.append("\n")
            pointer = "➤ " if idx == self.cursor_index else "  "
            is_checked = add_on in self.selected
            checked = "[x]" if is_checked else "[ ]"
            style = "bold white" if is_checked else "white"
            content.append(f"{pointer}{checked} {ADD_ON_LABELS[add_on.value]}", style=style)
            extra = add_on_price(add_on)
            if extra > 0:
                content.append(f"  +{format_money(extra)}", style="dim")
        body.update(content)
