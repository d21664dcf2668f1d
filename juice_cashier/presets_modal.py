"""Presets modal screen."""

from __future__ import annotations

from typing import Callable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from juice_cashier.models import Preset
from juice_cashier.presets import PresetStore, expand_preset
from juice_cashier.rendering import add_ons_label, format_drink_label, format_money

_SAVE_ROW = "Save current build as preset"
_MAX_NAME_LEN = 40


class PresetsModal(ModalScreen[None]):
    """Pick a preset to add to the cart, delete presets, or save the current build."""

    CSS = """
    PresetsModal {
        align: center middle;
        background: $background 60%;
    }

    #presets-dialog {
        width: 72;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #presets-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #presets-body {
        margin-bottom: 1;
        color: white;
    }

    #presets-error {
        color: #ffb3b3;
    }

    #presets-help {
        color: #dddddd;
    }
    """

    def __init__(
        self,
        store: PresetStore,
        on_pick: Callable[[Preset], None],
        build_preset: Callable[[str], Preset | None],
    ) -> None:
        super().__init__()
        self.store = store
        self.on_pick = on_pick
        # Returns None when the build pane has no flavour picked.
        self.build_preset = build_preset
        self.cursor_index = 0
        self.typing_name = False
        self.name_value = ""
        self.error = ""

    def compose(self) -> ComposeResult:
        with Container(id="presets-dialog"):
            yield Static("Presets", id="presets-title")
            yield Static(id="presets-body")
            yield Static(id="presets-error")
            yield Static(id="presets-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if self.typing_name:
            self._handle_typing_key(event)
            return

        if event.key in {"escape", "q", "ctrl+c"}:
            self.dismiss()
        elif event.key in {"j", "down"}:
            self._move(1)
        elif event.key in {"k", "up"}:
            self._move(-1)
        elif event.key == "enter":
            self._choose_current()
        elif event.key == "d":
            self._delete_current()
        else:
            return
        event.stop()

    def _handle_typing_key(self, event: Key) -> None:
        if event.key == "escape":
            self.typing_name = False
            self.name_value = ""
            self.error = ""
        elif event.key == "enter":
            self._confirm_name()
        elif event.key == "backspace":
            self.name_value = self.name_value[:-1]
            self.error = ""
        elif event.is_printable and event.character:
            if len(self.name_value) < _MAX_NAME_LEN:
                self.name_value += event.character
            self.error = ""
        self._refresh_content()
        event.stop()

    def _row_count(self) -> int:
        return len(self.store.presets) + 1

    def _move(self, delta: int) -> None:
        self.cursor_index = (self.cursor_index + delta) % self._row_count()
        self.error = ""
        self._refresh_content()

    def _choose_current(self) -> None:
        presets = self.store.presets
        if self.cursor_index < len(presets):
            self.dismiss()
            self.on_pick(presets[self.cursor_index])
            return
        self.typing_name = True
        self.name_value = ""
        self._refresh_content()

    def _delete_current(self) -> None:
        if self.cursor_index >= len(self.store.presets):
            return
        self.store.remove_at([self.cursor_index])
        self.cursor_index = min(self.cursor_index, self._row_count() - 1)
        self._refresh_content()

    def _confirm_name(self) -> None:
        name = self.name_value.strip()
        if not name:
            self.error = "Preset name is required."
            return
        preset = self.build_preset(name)
        self.typing_name = False
        self.name_value = ""
        if preset is None:
            self.error = "Pick at least one flavour before saving a preset."
            return
        self.store.add(preset)
        self.cursor_index = len(self.store.presets) - 1

    def _refresh_content(self) -> None:
        body = self.query_one("#presets-body", Static)
        error_widget = self.query_one("#presets-error", Static)
        help_widget = self.query_one("#presets-help", Static)

        content = Text(style="white")
        presets = self.store.presets
        for idx, preset in enumerate(presets):
            if idx > 0:
                content.append("\n")
            pointer = "➤ " if idx == self.cursor_index else "  "
            drink = expand_preset(preset)
            content.append(pointer)
            content.append(preset.name, style="bold white" if idx == self.cursor_index else "white")
            content.append("  ")
            content.append_text(format_drink_label(drink))
            content.append(f"  {format_money(drink.price)}", style="dim")
            if drink.add_ons:
                content.append(f"\n      {add_ons_label(drink.add_ons)}", style="dim")

        if presets:
            content.append("\n")
        pointer = "➤ " if self.cursor_index == len(presets) else "  "
        if self.typing_name:
            content.append(f"{pointer}Preset name: {self.name_value}|", style="bold white")
        else:
            content.append(f"{pointer}{_SAVE_ROW}")

        body.update(content)
        error_widget.update(self.error or "")
        if self.typing_name:
            help_widget.update("Type a name, Enter save, Esc cancel typing")
        else:
            help_widget.update("J/K/↑/↓ move, Enter add/save, D delete, Esc/q close")
