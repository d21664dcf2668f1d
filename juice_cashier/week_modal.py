"""Festival week picker modal screen."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from juice_cashier.ledger import SalesLedger
from juice_cashier.models import FestivalWeek
from juice_cashier.periods import now_local

_NO_WEEK = "No festival week"
_NEW_WEEK = "New week for this date..."
_MAX_LOCATION_LEN = 40


@dataclass(frozen=True)
class WeekChoice:
    """The week picked in the modal; ``week`` is None for untagged sales."""

    week: FestivalWeek | None


class WeekModal(ModalScreen[WeekChoice | None]):
    """Choose the festival week new sales are tagged with, or create one.

    Dismisses with a ``WeekChoice``, or ``None`` when cancelled.
    """

    CSS = """
    WeekModal {
        align: center middle;
        background: $background 60%;
    }

    #week-dialog {
        width: 60;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #week-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #week-body {
        color: white;
        margin-bottom: 1;
    }

    #week-error {
        color: #ffb3b3;
    }

    #week-help {
        color: #dddddd;
    }
    """

    def __init__(self, ledger: SalesLedger, active: FestivalWeek | None, today: datetime | None = None) -> None:
        super().__init__()
        self.ledger = ledger
        self.today = today or now_local()
        self.cursor_index = 0
        self.typing = False
        self.value = ""
        self.error = ""
        rows = self._rows()
        for idx, row in enumerate(rows):
            if isinstance(row, FestivalWeek) and active is not None and row.id == active.id:
                self.cursor_index = idx

    def compose(self) -> ComposeResult:
        with Container(id="week-dialog"):
            yield Static("Festival Week", id="week-title")
            yield Static(id="week-body")
            yield Static(id="week-error")
            yield Static(id="week-help")

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if self.typing:
            self._handle_typing_key(event)
            return

        if event.key in {"escape", "q", "ctrl+c"}:
            self.dismiss(None)
        elif event.key in {"j", "down"}:
            self._move(1)
        elif event.key in {"k", "up"}:
            self._move(-1)
        elif event.key == "enter":
            self._choose_current()
        else:
            return
        event.stop()

    def _handle_typing_key(self, event: Key) -> None:
        if event.key == "escape":
            self.typing = False
            self.value = ""
            self.error = ""
        elif event.key == "enter":
            if self._confirm_location():
                event.stop()
                return
        elif event.key == "backspace":
            self.value = self.value[:-1]
            self.error = ""
        elif event.is_printable and event.character:
            if len(self.value) < _MAX_LOCATION_LEN:
                self.value += event.character
            self.error = ""
        self._refresh_content()
        # Swallow everything while typing so app hotkeys stay quiet.
        event.stop()

    def _rows(self) -> list[FestivalWeek | str]:
        return [_NO_WEEK, *self.ledger.weeks, _NEW_WEEK]

    def _move(self, delta: int) -> None:
        rows = self._rows()
        self.cursor_index = (self.cursor_index + delta) % len(rows)
        self._refresh_content()

    def _choose_current(self) -> None:
        row = self._rows()[self.cursor_index]
        if row == _NEW_WEEK:
            self.typing = True
            self.value = ""
            self._refresh_content()
            return
        if row == _NO_WEEK:
            self.dismiss(WeekChoice(None))
            return
        self.dismiss(WeekChoice(row))

    def _confirm_location(self) -> bool:
        location = self.value.strip()
        if not location:
            self.error = "Location name is required."
            return False
        week = self.ledger.create_week(location, self.today)
        self.typing = False
        self.dismiss(WeekChoice(week))
        return True

    def _refresh_content(self) -> None:
        body = self.query_one("#week-body", Static)
        error_widget = self.query_one("#week-error", Static)
        help_widget = self.query_one("#week-help", Static)

        content = Text(style="white")
        for idx, row in enumerate(self._rows()):
            if idx > 0:
                content.append("\n")
            pointer = "➤ " if idx == self.cursor_index else "  "
            if isinstance(row, FestivalWeek):
                start = row.week_start
                content.append(f"{pointer}{row.location_name} • week of {start:%b} {start.day}, {start.year}")
            elif row == _NEW_WEEK and self.typing:
                content.append(f"{pointer}New location: {self.value}|", style="bold white")
            else:
                content.append(f"{pointer}{row}")
        body.update(content)
        error_widget.update(self.error or "")
        if self.typing:
            help_widget.update("Type the location, Enter create, Esc cancel typing")
        else:
            help_widget.update("J/K/↑/↓ move, Enter choose, Esc/q cancel")
