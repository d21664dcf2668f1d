"""Stats screen: recent transactions, revenue buckets and flavour counts."""

from __future__ import annotations

from decimal import Decimal

from rich.text import Text
from textual import work
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.screen import Screen
from textual.widgets import Header, Static
from textual.worker import get_current_worker

from juice_cashier.app_logger import get_logger
from juice_cashier.ledger import SalesLedger
from juice_cashier.stats import (
    FlavourReport,
    Granularity,
    RevenueReport,
    StatsAggregator,
    StatsQuery,
    TransactionRow,
    WeekFilter,
    week_filter_choices,
)
from juice_cashier.rendering import format_cups, format_money, format_transaction

logger = get_logger(__name__)

TABS = ("recent", "revenue", "drinks")
TAB_TITLES = {"recent": "Recent", "revenue": "Revenue", "drinks": "Drink Data"}
DEFAULT_SPAN_MONTHS = {"recent": 1, "revenue": 2, "drinks": 1}
MAX_SPAN_MONTHS = 36
BAR_WIDTH = 28

StatsResult = list[TransactionRow] | RevenueReport | FlavourReport


def text_bar(value: float, peak: float, width: int = BAR_WIDTH) -> str:
    if peak <= 0 or value <= 0:
        return ""
    return "█" * max(1, round(value / peak * width))


class StatsScreen(Screen[None]):
    """Reports over the ledger, recomputed off the UI thread whenever a filter changes."""

    BINDINGS = [
        ("escape", "close", "Back"),
        ("tab", "cycle_tab(1)", "Next tab"),
        ("right", "cycle_tab(1)", "Next tab"),
        ("left", "cycle_tab(-1)", "Previous tab"),
        ("g", "cycle_granularity", "Granularity"),
        ("l", "cycle_location", "Location"),
        ("w", "change_span(1)", "Widen span"),
        ("n", "change_span(-1)", "Narrow span"),
    ]

    CSS = """
    #stats-tabs {
        height: 1;
        margin: 0 1;
    }

    #stats-filters {
        height: 1;
        margin: 0 1 1 1;
        color: $text-muted;
    }

    #stats-body {
        height: 1fr;
        border: round $primary;
        padding: 0 1;
    }

    #stats-help {
        height: 1;
        margin: 0 1;
        color: $text-muted;
    }
    """

    def __init__(self, ledger: SalesLedger) -> None:
        super().__init__()
        self.ledger = ledger
        self.aggregator = StatsAggregator(ledger)
        self.tab = "recent"
        self.granularity = Granularity.WEEKLY
        self.span_months = dict(DEFAULT_SPAN_MONTHS)
        self.filter_index = 0
        self._request_seq = 0
        self._published_seq = 0

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical():
            yield Static(id="stats-tabs")
            yield Static(id="stats-filters")
            yield Static("Loading...", id="stats-body")
            yield Static(
                "Tab/←/→ tab  G granularity  L location  W/N widen/narrow span  S/Esc back",
                id="stats-help",
            )

    def on_mount(self) -> None:
        self._request_recompute()

    def on_key(self, event: Key) -> None:
        # "s" also opens this screen, so stop it before it reaches the app.
        if event.key == "s":
            event.stop()
            self.action_close()

    # Actions

    def action_close(self) -> None:
        self.app.pop_screen()

    def action_cycle_tab(self, delta: int) -> None:
        self.tab = TABS[(TABS.index(self.tab) + delta) % len(TABS)]
        self._request_recompute()

    def action_cycle_granularity(self) -> None:
        self.granularity = self.granularity.next()
        self._request_recompute()

    def action_cycle_location(self) -> None:
        self.filter_index = (self.filter_index + 1) % len(self._filters())
        self._request_recompute()

    def action_change_span(self, delta: int) -> None:
        months = self.span_months[self.tab] + delta
        self.span_months[self.tab] = min(MAX_SPAN_MONTHS, max(1, months))
        self._request_recompute()

    # Queries

    def _filters(self) -> list[WeekFilter]:
        return week_filter_choices(self.ledger.weeks)

    def current_filter(self) -> WeekFilter:
        filters = self._filters()
        if self.filter_index >= len(filters):
            self.filter_index = 0
        return filters[self.filter_index]

    def current_query(self) -> StatsQuery:
        return StatsQuery.last_months(self.span_months[self.tab], self.current_filter(), self.granularity)

    def _request_recompute(self) -> None:
        self._request_seq += 1
        query = self.current_query()
        self._refresh_header(query)
        self._recompute(self._request_seq, self.tab, query)

    @work(exclusive=True, thread=True, group="stats")
    def _recompute(self, seq: int, tab: str, query: StatsQuery) -> None:
        worker = get_current_worker()
        if tab == "recent":
            result: StatsResult = self.aggregator.recent(query)
        elif tab == "revenue":
            result = self.aggregator.revenue(query)
        else:
            result = self.aggregator.flavours(query)
        if worker.is_cancelled:
            return
        self.app.call_from_thread(self._publish, seq, tab, result)

    def _publish(self, seq: int, tab: str, result: StatsResult) -> None:
        # A newer request supersedes this one even if it finished first.
        if seq != self._request_seq or seq <= self._published_seq:
            logger.debug("dropping stale stats result seq=%d latest=%d", seq, self._request_seq)
            return
        self._published_seq = seq
        try:
            body = self.query_one("#stats-body", Static)
        except NoMatches:
            return
        if tab == "recent":
            body.update(self._render_recent(result))
        elif tab == "revenue":
            body.update(self._render_revenue(result))
        else:
            body.update(self._render_drinks(result))

    # Rendering

    def _refresh_header(self, query: StatsQuery) -> None:
        tabs = Text()
        for idx, tab in enumerate(TABS):
            if idx > 0:
                tabs.append("  ")
            style = "bold reverse" if tab == self.tab else "dim"
            tabs.append(f" {TAB_TITLES[tab]} ", style=style)
        self.query_one("#stats-tabs", Static).update(tabs)

        filters = f"{query.week_filter.label}  •  {query.span_from:%Y-%m-%d} → {query.span_to:%Y-%m-%d}"
        if self.tab != "recent":
            filters += f"  •  {self.granularity.label}"
        self.query_one("#stats-filters", Static).update(filters)

    def _render_recent(self, rows: list[TransactionRow]) -> Text | str:
        if not rows:
            return "No transactions. Try widening the date range or picking another location."
        total = sum((row.total for row in rows), Decimal("0.00"))
        lines = Text()
        lines.append(f"{len(rows)} transactions  {format_money(total)}", style="bold")
        lines.append("\n")
        for row in rows:
            lines.append("\n")
            lines.append_text(format_transaction(row))
        return lines

    def _render_revenue(self, report: RevenueReport) -> Text | str:
        if report.is_empty:
            return "No revenue data. Adjust the date range or location."
        peak = max(float(bucket.total) for bucket in report.buckets)
        label_width = max(len(bucket.label) for bucket in report.buckets)
        lines = Text()
        lines.append(f"Grand Total  {format_money(report.grand_total)}", style="bold")
        lines.append(f"  ({report.sale_count} sales)\n", style="dim")
        for bucket in report.buckets:
            lines.append("\n")
            lines.append(bucket.label.ljust(label_width))
            lines.append(f"  {format_money(bucket.total):>10}  ")
            lines.append(text_bar(float(bucket.total), peak), style="green")
        return lines

    def _render_drinks(self, report: FlavourReport) -> Text | str:
        if report.is_empty:
            return "No drink data. Change the date range or location."
        rows = report.by_cups()
        peak = float(rows[0].cups)
        lines = Text()
        lines.append(f"All Flavours  {format_cups(report.grand_total)}", style="bold")
        lines.append("\n")
        for row in rows:
            lines.append("\n")
            lines.append(row.flavour.label.ljust(11))
            lines.append(f"  {format_cups(row.cups):>11}  ")
            lines.append(text_bar(row.cups_float, peak), style="yellow")
        return lines
