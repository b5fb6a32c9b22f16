"""
Order Lifecycle Service

Places orders and moves them through the status workflow:

    pending -> preparing -> ready -> served

Only single forward steps are legal. Order creation writes the order row
and its item rows in one transaction; any failure rolls the whole order
back.
"""

import logging
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from restaurant.core.exceptions import BadRequestError, NotFoundError
from restaurant.models import Order, OrderItem, OrderStatus, utcnow
from restaurant.services.menu.base import BaseMenuCatalog

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    OrderStatus.PENDING: "Order is pending",
    OrderStatus.PREPARING: "Our chefs are preparing your meal...",
    OrderStatus.READY: "Your meal is ready for pickup!",
    OrderStatus.SERVED: "Order completed. Thank you for dining with us!",
}


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def parse_status(value) -> OrderStatus:
    """
    Convert user input to an OrderStatus.

    Raises:
        BadRequestError: If the value is not one of the four statuses
    """
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).lower())
    except ValueError:
        valid = ", ".join(s.value for s in OrderStatus)
        raise BadRequestError(f"Status must be one of: {valid}")


class OrderService:
    """
    Order placement, status transitions and order queries.

    Attributes:
        db: Request-scoped session
        catalog: Menu catalog used to resolve item ids
        max_items_per_order: Upper bound on item ids in one request
    """

    def __init__(
        self,
        db: AsyncSession,
        catalog: BaseMenuCatalog,
        max_items_per_order: int = 20,
    ):
        self.db = db
        self.catalog = catalog
        self.max_items_per_order = max_items_per_order

    def _query(self):
        return select(Order).options(
            selectinload(Order.order_items).selectinload(OrderItem.menu_item)
        )

    async def _load(self, order_id: int, for_update: bool = False) -> Optional[Order]:
        query = (
            self._query()
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def _list(self, *conditions) -> list[Order]:
        query = self._query().where(*conditions).order_by(Order.order_time.desc(), Order.id.desc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    # =========================================================================
    # COMMANDS
    # =========================================================================

    async def create_order(self, customer_name: str, item_ids: Sequence[int]) -> Order:
        """
        Place a new order.

        Args:
            customer_name: Name the order is placed under
            item_ids: Menu item ids; repeat an id to order it more than once

        Returns:
            Order: The persisted order with its items loaded

        Raises:
            BadRequestError: Empty name, too many ids, or no id resolves
        """
        customer_name = (customer_name or "").strip()
        if not customer_name:
            raise BadRequestError("Customer name is required")
        if len(item_ids) > self.max_items_per_order:
            raise BadRequestError(
                f"An order may contain at most {self.max_items_per_order} items"
            )

        items = await self.catalog.validate_ids(item_ids)
        if not items:
            raise BadRequestError(
                "Order creation failed. Please check if menu items are correct."
            )

        order = Order(
            customer_name=customer_name,
            total_price=sum(item.price for item in items),
            status=OrderStatus.PENDING,
            order_time=utcnow(),
            order_items=[OrderItem(menu_item_id=item.id, quantity=1) for item in items],
        )

        try:
            self.db.add(order)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.exception(f"Failed to persist order for {customer_name}")
            raise

        logger.info(
            f"Order #{order.id} created for {customer_name}: "
            f"{len(items)} item(s), total {order.total_price}"
        )
        return await self._load(order.id)

    async def update_status(self, order_id: int, new_status) -> Order:
        """
        Move an order to its next status.

        Raises:
            NotFoundError: If the order does not exist
            BadRequestError: If the status is unknown or the move is not
                the single forward step from the current status
        """
        new_status = parse_status(new_status)

        order = await self._load(order_id, for_update=True)
        if order is None:
            # Ends the transaction and releases the row lock; loaded orders stay usable
            await self.db.commit()
            raise NotFoundError(f"Order #{order_id} not found")

        current = order.status
        if not current.can_transition_to(new_status):
            await self.db.commit()
            raise BadRequestError(
                f"Cannot change order #{order_id} from '{current.value}' to '{new_status.value}'"
            )

        order.status = new_status
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            logger.exception(f"Failed to update status of order #{order_id}")
            raise

        logger.info(f"Order #{order_id} status: {current.value} -> {new_status.value}")
        return order

    # =========================================================================
    # QUERIES
    # =========================================================================

    async def get_by_id(self, order_id: int) -> Order:
        order = await self._load(order_id)
        if order is None:
            raise NotFoundError(f"Order #{order_id} not found")
        return order

    async def list_all(self) -> list[Order]:
        return await self._list()

    async def list_by_status(self, status) -> list[Order]:
        return await self._list(Order.status == parse_status(status))

    async def list_by_customer(self, name_fragment: str) -> list[Order]:
        """
        Orders whose customer name contains the fragment, ignoring case.

        Raises:
            BadRequestError: If the fragment is blank
        """
        fragment = (name_fragment or "").strip()
        if not fragment:
            raise BadRequestError("Customer filter must not be blank")
        pattern = f"%{_escape_like(fragment)}%"
        return await self._list(Order.customer_name.ilike(pattern, escape="\\"))
