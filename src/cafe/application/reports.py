"""Application service: read-only sales reports.

Reports read already-committed orders only and use the prices stored on
each order, never current menu prices.  Date-based reports bucket orders
by their ``created_at`` day in UTC.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timezone

from cafe.domain.exceptions import ValidationError
from cafe.domain.model.order import OrderStatus
from cafe.domain.model.value_objects import Money
from cafe.domain.repository.order_store import OrderStore


@dataclass(frozen=True)
class SalesReportDTO:
    total_sales: str
    closed_orders: int


@dataclass(frozen=True)
class PopularItemDTO:
    product_id: int
    product_name: str
    quantity: int


class TotalSalesHandler:

    def __init__(self, order_store: OrderStore) -> None:
        self._order_store = order_store

    def handle(self) -> SalesReportDTO:
        """Sum the totals of CLOSED orders."""
        total = Money.zero()
        count = 0
        for order in self._order_store.list_all():
            if order.status == OrderStatus.CLOSED:
                total = total + order.total_price
                count += 1
        return SalesReportDTO(total_sales=str(total), closed_orders=count)


class PopularItemsHandler:

    def __init__(self, order_store: OrderStore) -> None:
        self._order_store = order_store

    def handle(self, limit: int = 10) -> list[PopularItemDTO]:
        """Menu items ranked by units ordered; cancelled orders don't count."""
        if limit <= 0:
            raise ValidationError("Limit must be positive")

        quantities: dict[int, int] = {}
        names: dict[int, str] = {}
        for order in self._order_store.list_all():
            if order.status == OrderStatus.CANCELLED:
                continue
            for line in order.lines:
                quantities[line.product_id] = (
                    quantities.get(line.product_id, 0) + line.quantity.value
                )
                names.setdefault(line.product_id, line.product_name)

        ranked = sorted(quantities.items(), key=lambda kv: (-kv[1], kv[0]))
        return [
            PopularItemDTO(product_id=pid, product_name=names[pid], quantity=qty)
            for pid, qty in ranked[:limit]
        ]


MONTHS = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)
PERIODS = ("day", "month")


@dataclass(frozen=True)
class PeriodBucketDTO:
    key: str
    count: int


@dataclass(frozen=True)
class ItemsByPeriodDTO:
    period: str
    year: int
    month: str | None
    buckets: list[PeriodBucketDTO]


def _counted_orders(order_store: OrderStore):
    for order in order_store.list_all():
        if order.status != OrderStatus.CANCELLED and order.created_at is not None:
            yield order, order.created_at.astimezone(timezone.utc).date()


class OrderedItemsHandler:
    """Units ordered per menu item between two dates (both inclusive)."""

    def __init__(self, order_store: OrderStore) -> None:
        self._order_store = order_store

    def handle(self, start: date | None = None, end: date | None = None) -> list[PopularItemDTO]:
        if start is not None and end is not None and start > end:
            raise ValidationError(f"Start date {start} is after end date {end}")

        quantities: dict[int, int] = {}
        names: dict[int, str] = {}
        for order, day in _counted_orders(self._order_store):
            if (start is not None and day < start) or (end is not None and day > end):
                continue
            for line in order.lines:
                quantities[line.product_id] = (
                    quantities.get(line.product_id, 0) + line.quantity.value
                )
                names.setdefault(line.product_id, line.product_name)

        return [
            PopularItemDTO(product_id=pid, product_name=names[pid], quantity=qty)
            for pid, qty in sorted(quantities.items())
        ]


class ItemsByPeriodHandler:
    """Units ordered per day of a month, or per month of a year.

    Every bucket of the period is listed, empty ones with a zero count.
    Cancelled orders don't count.
    """

    def __init__(self, order_store: OrderStore) -> None:
        self._order_store = order_store

    def handle(
        self, period: str, month: str | None = None, year: int | None = None
    ) -> ItemsByPeriodDTO:
        if period not in PERIODS:
            raise ValidationError(
                f"Invalid period '{period}'; expected one of {', '.join(PERIODS)}"
            )
        if year is None:
            year = datetime.now(timezone.utc).year
        if not 1 <= year <= 9999:
            raise ValidationError(f"Invalid year: {year}")

        if period == "day":
            if not month:
                raise ValidationError("Month is required for period 'day'")
            month_number = self._parse_month(month)
            days = calendar.monthrange(year, month_number)[1]
            counts = [0] * days
            for order, day in _counted_orders(self._order_store):
                if day.year == year and day.month == month_number:
                    counts[day.day - 1] += sum(line.quantity.value for line in order.lines)
            buckets = [PeriodBucketDTO(str(i + 1), n) for i, n in enumerate(counts)]
            return ItemsByPeriodDTO(period, year, MONTHS[month_number - 1], buckets)

        counts = [0] * 12
        for order, day in _counted_orders(self._order_store):
            if day.year == year:
                counts[day.month - 1] += sum(line.quantity.value for line in order.lines)
        buckets = [PeriodBucketDTO(name, n) for name, n in zip(MONTHS, counts)]
        return ItemsByPeriodDTO(period, year, None, buckets)

    @staticmethod
    def _parse_month(value: str) -> int:
        text = value.strip().lower()
        if text.isdigit() and 1 <= int(text) <= 12:
            return int(text)
        if text in MONTHS:
            return MONTHS.index(text) + 1
        raise ValidationError(f"Invalid month: {value!r}")
