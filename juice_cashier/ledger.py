"""Append-only sales ledger with festival week tags, persisted as JSON files."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Callable, TypeVar

from juice_cashier.app_logger import get_logger
from juice_cashier.config import DATA_DIR, SALES_FILENAME, WEEKS_FILENAME
from juice_cashier.models import FestivalWeek, Order, PaymentMethod, Sale
from juice_cashier.periods import now_local
from juice_cashier.pricing import ZERO, surcharge_for
from juice_cashier.storage import StorageError, read_json_file, write_json_atomic

logger = get_logger(__name__)

T = TypeVar("T")


def make_sale(order: Order, payment: PaymentMethod, festival_week_id: str | None = None) -> Sale:
    """Wrap an order in a sale, fixing subtotal, surcharge and total now."""
    payment = PaymentMethod(payment)
    subtotal = sum((drink.price for drink in order.drinks), ZERO)
    surcharge = surcharge_for(payment, (drink.cup_type for drink in order.drinks))
    return Sale(
        order=order,
        payment=payment,
        festival_week_id=festival_week_id,
        subtotal=subtotal,
        surcharge=surcharge,
        total=subtotal + surcharge,
    )


class SalesLedger:
    """Festival weeks and sales, newest first.

    There is no update or delete: a correction is a new sale. Every mutation
    rewrites its whole collection before returning. A failed write is logged
    and the in-memory state stays authoritative for the rest of the session.
    """

    def __init__(self, data_dir: Path | str = DATA_DIR) -> None:
        self.data_dir = Path(data_dir)
        self.weeks_path = self.data_dir / WEEKS_FILENAME
        self.sales_path = self.data_dir / SALES_FILENAME
        self._weeks: list[FestivalWeek] = _load_list(self.weeks_path, FestivalWeek.from_dict)
        self._sales: list[Sale] = _load_list(self.sales_path, Sale.from_dict)
        logger.info(
            "ledger loaded weeks=%d sales=%d dir=%s", len(self._weeks), len(self._sales), self.data_dir
        )

    @property
    def weeks(self) -> tuple[FestivalWeek, ...]:
        return tuple(self._weeks)

    @property
    def sales(self) -> tuple[Sale, ...]:
        """A snapshot; later records do not show up in a tuple already handed out."""
        return tuple(self._sales)

    def week(self, week_id: str | None) -> FestivalWeek | None:
        if week_id is None:
            return None
        for week in self._weeks:
            if week.id == week_id:
                return week
        return None

    def create_week(self, location_name: str, reference: datetime | None = None) -> FestivalWeek:
        week = FestivalWeek.for_date(location_name.strip(), reference or now_local())
        self._weeks.insert(0, week)
        logger.info("festival week created id=%s location=%r start=%s", week.id, week.location_name, week.week_start)
        self._save(self.weeks_path, self._weeks)
        return week

    def record(self, order: Order, payment: PaymentMethod, festival_week: FestivalWeek | None = None) -> Sale:
        sale = make_sale(order, payment, festival_week.id if festival_week is not None else None)
        self._sales.insert(0, sale)
        logger.info(
            "sale recorded id=%s drinks=%d payment=%s total=%s week=%s",
            sale.id,
            sale.drink_count,
            sale.payment.value,
            sale.total,
            sale.festival_week_id,
        )
        self._save(self.sales_path, self._sales)
        return sale

    def _save(self, path: Path, records: list[Any]) -> bool:
        try:
            write_json_atomic(path, [record.to_dict() for record in records])
        except StorageError:
            logger.exception("persist failed for %s; keeping in-memory state", path)
            return False
        return True


def _load_list(path: Path, decode: Callable[[dict[str, Any]], T]) -> list[T]:
    """Decode a stored list; anything missing or unreadable starts empty."""
    try:
        raw = read_json_file(path)
    except StorageError:
        logger.warning("could not load %s; starting empty", path, exc_info=True)
        return []
    if raw is None:
        return []
    try:
        if not isinstance(raw, list):
            raise TypeError(f"expected a list, got {type(raw).__name__}")
        return [decode(item) for item in raw]
    except (KeyError, TypeError, ValueError, AttributeError):
        logger.warning("could not decode %s; starting empty", path, exc_info=True)
        return []
