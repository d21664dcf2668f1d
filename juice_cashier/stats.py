"""Read-side reports over recorded sales: recent transactions, revenue buckets, flavour counts."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import TYPE_CHECKING, Callable, Iterable, Literal

from juice_cashier.models import FestivalWeek, Flavour, PaymentMethod, Sale
from juice_cashier.periods import (
    as_local,
    end_of_day,
    end_of_month,
    end_of_week,
    end_of_year,
    iso_week_label,
    months_before,
    now_local,
    start_of_day,
    start_of_month,
    start_of_week,
    start_of_year,
)
from juice_cashier.pricing import ZERO

if TYPE_CHECKING:
    from juice_cashier.ledger import SalesLedger

NO_LOCATION = "No location"


class Granularity(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    def next(self) -> Granularity:
        members = list(Granularity)
        return members[(members.index(self) + 1) % len(members)]


WeekFilterKind = Literal["all", "week", "unassigned"]


@dataclass(frozen=True)
class WeekFilter:
    """Which festival week a report covers.

    ``all`` applies no filter, ``week`` keeps sales tagged with exactly that
    week, ``unassigned`` keeps sales recorded without a week.
    """

    kind: WeekFilterKind = "all"
    week: FestivalWeek | None = None

    def __post_init__(self) -> None:
        if (self.kind == "week") != (self.week is not None):
            raise ValueError("a week filter carries a week exactly when kind == 'week'")

    @classmethod
    def all(cls) -> WeekFilter:
        return cls()

    @classmethod
    def only(cls, week: FestivalWeek) -> WeekFilter:
        return cls(kind="week", week=week)

    @classmethod
    def unassigned(cls) -> WeekFilter:
        return cls(kind="unassigned")

    def matches(self, sale: Sale) -> bool:
        if self.kind == "all":
            return True
        if self.kind == "unassigned":
            return sale.festival_week_id is None
        return self.week is not None and sale.festival_week_id == self.week.id

    @property
    def label(self) -> str:
        if self.kind == "week" and self.week is not None:
            return self.week.location_name
        if self.kind == "unassigned":
            return NO_LOCATION
        return "All locations"


def week_filter_choices(weeks: Iterable[FestivalWeek]) -> list[WeekFilter]:
    """All locations first, then each week, then sales without a week."""
    return [WeekFilter.all(), *(WeekFilter.only(week) for week in weeks), WeekFilter.unassigned()]


@dataclass(frozen=True)
class StatsQuery:
    """Inclusive time span, week filter and bucket size for one report."""

    span_from: datetime
    span_to: datetime
    week_filter: WeekFilter = field(default_factory=WeekFilter.all)
    granularity: Granularity = Granularity.WEEKLY

    def __post_init__(self) -> None:
        object.__setattr__(self, "span_from", as_local(self.span_from))
        object.__setattr__(self, "span_to", as_local(self.span_to))

    @classmethod
    def for_dates(
        cls,
        first_day: date,
        last_day: date,
        week_filter: WeekFilter | None = None,
        granularity: Granularity = Granularity.WEEKLY,
    ) -> StatsQuery:
        """Cover whole calendar days from ``first_day`` through ``last_day``."""
        span_from = start_of_day(datetime.combine(first_day, time.min))
        span_to = end_of_day(datetime.combine(last_day, time.min)) + timedelta(microseconds=999_999)
        return cls(span_from, span_to, week_filter or WeekFilter.all(), granularity)

    @classmethod
    def last_months(
        cls,
        months: int,
        week_filter: WeekFilter | None = None,
        granularity: Granularity = Granularity.WEEKLY,
        now: datetime | None = None,
    ) -> StatsQuery:
        end = now or now_local()
        return cls.for_dates(months_before(end, months).date(), end.date(), week_filter, granularity)

    def includes(self, sale: Sale) -> bool:
        return self.span_from <= sale.timestamp <= self.span_to and self.week_filter.matches(sale)


def filter_sales(sales: Iterable[Sale], query: StatsQuery) -> list[Sale]:
    # Copy first so a concurrent append to the source never shows up mid-pass.
    return [sale for sale in list(sales) if query.includes(sale)]


# Revenue


@dataclass(frozen=True)
class RevenueBucket:
    start: datetime
    end: datetime
    label: str
    total: Decimal
    sale_count: int


@dataclass(frozen=True)
class RevenueReport:
    buckets: tuple[RevenueBucket, ...]
    grand_total: Decimal
    sale_count: int

    @property
    def is_empty(self) -> bool:
        return not self.buckets


_BOUNDS: dict[Granularity, tuple[Callable[[datetime], datetime], Callable[[datetime], datetime]]] = {
    Granularity.DAILY: (start_of_day, end_of_day),
    Granularity.WEEKLY: (start_of_week, end_of_week),
    Granularity.MONTHLY: (start_of_month, end_of_month),
    Granularity.YEARLY: (start_of_year, end_of_year),
}


def bucket_bounds(moment: datetime, granularity: Granularity) -> tuple[datetime, datetime]:
    start_fn, end_fn = _BOUNDS[granularity]
    return start_fn(moment), end_fn(moment)


def bucket_label(start: datetime, granularity: Granularity, week_filter: WeekFilter | None = None) -> str:
    if granularity is Granularity.DAILY:
        return f"{start:%b} {start.day}, {start.year}"
    if granularity is Granularity.WEEKLY:
        label = iso_week_label(start)
        if week_filter is not None and week_filter.kind == "week":
            label = f"{label} – {week_filter.label}"
        return label
    if granularity is Granularity.MONTHLY:
        return f"{start:%b %Y}"
    return str(start.year)


def revenue_report(sales: Iterable[Sale], query: StatsQuery) -> RevenueReport:
    """Sum sale totals per calendar bucket, oldest bucket first."""
    totals: dict[datetime, Decimal] = defaultdict(lambda: ZERO)
    counts: dict[datetime, int] = defaultdict(int)
    ends: dict[datetime, datetime] = {}
    for sale in filter_sales(sales, query):
        start, end = bucket_bounds(sale.timestamp, query.granularity)
        totals[start] += sale.total
        counts[start] += 1
        ends[start] = end

    buckets = tuple(
        RevenueBucket(
            start=start,
            end=ends[start],
            label=bucket_label(start, query.granularity, query.week_filter),
            total=totals[start],
            sale_count=counts[start],
        )
        for start in sorted(totals)
    )
    return RevenueReport(
        buckets=buckets,
        grand_total=sum((bucket.total for bucket in buckets), ZERO),
        sale_count=sum(bucket.sale_count for bucket in buckets),
    )


# Flavours


@dataclass(frozen=True)
class FlavourCount:
    flavour: Flavour
    cups: Fraction

    @property
    def cups_float(self) -> float:
        return float(self.cups)


@dataclass(frozen=True)
class FlavourReport:
    rows: tuple[FlavourCount, ...]
    grand_total: Fraction

    @property
    def is_empty(self) -> bool:
        return self.grand_total == 0

    def by_cups(self) -> list[FlavourCount]:
        """Rows with the most popular flavour first; ties keep menu order."""
        return sorted(self.rows, key=lambda row: row.cups, reverse=True)


def flavour_report(sales: Iterable[Sale], query: StatsQuery) -> FlavourReport:
    """Attribute each cup across its flavours in equal shares.

    A two-flavour mix counts half a cup for each, so the grand total is the
    number of cups sold. Every flavour gets a row, including zeros.
    """
    counts: dict[Flavour, Fraction] = {flavour: Fraction(0) for flavour in Flavour}
    for sale in filter_sales(sales, query):
        for drink in sale.order.drinks:
            share = Fraction(1, max(1, len(drink.selection)))
            for flavour in drink.selection:
                counts[flavour] += share

    rows = tuple(FlavourCount(flavour=flavour, cups=counts[flavour]) for flavour in Flavour)
    return FlavourReport(rows=rows, grand_total=sum((row.cups for row in rows), Fraction(0)))


# Recent transactions


@dataclass(frozen=True)
class TransactionRow:
    sale_id: str
    timestamp: datetime
    location_name: str
    payment: PaymentMethod
    drink_count: int
    surcharge: Decimal
    total: Decimal


def recent_transactions(
    sales: Iterable[Sale],
    query: StatsQuery,
    week_lookup: Callable[[str | None], FestivalWeek | None],
) -> list[TransactionRow]:
    rows = []
    for sale in sorted(filter_sales(sales, query), key=lambda s: s.timestamp, reverse=True):
        week = week_lookup(sale.festival_week_id)
        rows.append(
            TransactionRow(
                sale_id=sale.id,
                timestamp=sale.timestamp,
                location_name=week.location_name if week is not None else NO_LOCATION,
                payment=sale.payment,
                drink_count=sale.drink_count,
                surcharge=sale.surcharge,
                total=sale.total,
            )
        )
    return rows


class StatsAggregator:
    """Reports over a ledger. Each call works on a snapshot of the ledger's sales."""

    def __init__(self, ledger: SalesLedger) -> None:
        self.ledger = ledger

    def revenue(self, query: StatsQuery) -> RevenueReport:
        return revenue_report(self.ledger.sales, query)

    def flavours(self, query: StatsQuery) -> FlavourReport:
        return flavour_report(self.ledger.sales, query)

    def recent(self, query: StatsQuery) -> list[TransactionRow]:
        return recent_transactions(self.ledger.sales, query, self.ledger.week)
