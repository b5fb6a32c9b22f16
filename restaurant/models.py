"""
SQLAlchemy Database Models

Menu items, orders and the order_items join table. An order keeps one
join row per occurrence of a menu item in the request, so quantity is
expressed by repetition.
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Text, Enum, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from restaurant.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Cuisine(str, enum.Enum):
    """Menu categories."""
    JAPANESE = "japanese"
    ITALIAN = "italian"
    GENERAL = "general"


class OrderStatus(str, enum.Enum):
    """Order status workflow: pending -> preparing -> ready -> served."""
    PENDING = "pending"
    PREPARING = "preparing"
    READY = "ready"
    SERVED = "served"

    @property
    def is_terminal(self) -> bool:
        return not ORDER_STATUS_TRANSITIONS[self]

    def can_transition_to(self, new_status: "OrderStatus") -> bool:
        """Only single forward steps are allowed."""
        return new_status in ORDER_STATUS_TRANSITIONS[self]


ORDER_STATUS_TRANSITIONS: dict[OrderStatus, tuple[OrderStatus, ...]] = {
    OrderStatus.PENDING: (OrderStatus.PREPARING,),
    OrderStatus.PREPARING: (OrderStatus.READY,),
    OrderStatus.READY: (OrderStatus.SERVED,),
    OrderStatus.SERVED: (),
}


class MenuItem(Base):
    """
    Purchasable catalog entry.

    Only ``available`` changes after creation; prices are fixed so that
    historical order totals stay meaningful.
    """
    __tablename__ = "menu_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    price = Column(Integer, nullable=False)  # minor currency unit
    description = Column(Text, nullable=False, default="")
    cuisine = Column(Enum(Cuisine), nullable=False, index=True)
    available = Column(Boolean, nullable=False, default=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<MenuItem #{self.id} - {self.name} - {self.price}>"


class Order(Base):
    """
    Customer order.

    ``total_price`` is a snapshot of the item prices at creation time and
    is never recomputed. ``status`` is the only mutable column.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    customer_name = Column(String(100), nullable=False, index=True)
    total_price = Column(Integer, nullable=False)
    status = Column(
        Enum(OrderStatus),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True
    )
    order_time = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    order_items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    @property
    def items(self) -> list[MenuItem]:
        """Menu items in request order, repeated once per occurrence."""
        items = []
        for order_item in self.order_items:
            items.extend([order_item.menu_item] * order_item.quantity)
        return items

    def __repr__(self):
        return f"<Order #{self.id} - {self.customer_name} - {self.status.value}>"


class OrderItem(Base):
    """One menu item occurrence within an order."""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_item_id = Column(Integer, ForeignKey("menu_items.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)

    order = relationship("Order", back_populates="order_items")
    menu_item = relationship("MenuItem")

    def __repr__(self):
        return f"<OrderItem order={self.order_id} menu_item={self.menu_item_id} x{self.quantity}>"
