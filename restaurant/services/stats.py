"""
Stats Aggregator

Counts and revenue sums over stored orders and menu items.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant.core.exceptions import BadRequestError
from restaurant.models import Order, OrderStatus
from restaurant.services.menu.base import BaseMenuCatalog

logger = logging.getLogger(__name__)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class StatsService:
    """Read-only aggregates for the admin dashboard."""

    def __init__(self, db: AsyncSession, catalog: BaseMenuCatalog):
        self.db = db
        self.catalog = catalog

    async def _scalar(self, query) -> int:
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def get_stats(self) -> dict[str, int]:
        """
        Overall restaurant statistics.

        Returns:
            dict with total_menu_items (available only), total_orders and
            total_revenue (0 when there are no orders)
        """
        total_menu_items = await self.catalog.count()
        total_orders = await self._scalar(select(func.count(Order.id)))
        total_revenue = await self._scalar(select(func.coalesce(func.sum(Order.total_price), 0)))

        return {
            "total_menu_items": total_menu_items,
            "total_orders": total_orders,
            "total_revenue": int(total_revenue),
        }

    async def get_order_stats_by_status(self) -> dict[str, int]:
        """Order count per status; every status is present."""
        counts = {status.value: 0 for status in OrderStatus}
        result = await self.db.execute(
            select(Order.status, func.count(Order.id)).group_by(Order.status)
        )
        for status, count in result.all():
            counts[OrderStatus(status).value] = count
        return counts

    async def get_revenue_by_period(self, start: datetime, end: datetime) -> int:
        """
        Sum of order totals with order_time in [start, end].

        Raises:
            BadRequestError: If start is after end
        """
        start, end = as_utc(start), as_utc(end)
        if start > end:
            raise BadRequestError("Start of period must not be after its end")

        revenue = await self._scalar(
            select(func.coalesce(func.sum(Order.total_price), 0)).where(
                Order.order_time >= start,
                Order.order_time <= end,
            )
        )
        logger.debug(f"Revenue {start.isoformat()} .. {end.isoformat()}: {revenue}")
        return int(revenue)
