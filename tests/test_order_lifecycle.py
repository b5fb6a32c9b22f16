from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant.core.exceptions import BadRequestError, NotFoundError
from restaurant.models import ORDER_STATUS_TRANSITIONS, Order, OrderItem, OrderStatus
from restaurant.services.menu import DatabaseMenuCatalog
from restaurant.services.orders import OrderService, parse_status
from tests.fixtures_data import BURGER_ID, PIZZA_ID, RAMEN_ID, SUSHI_ID


@pytest.fixture
def orders(db):
    return OrderService(db, DatabaseMenuCatalog(db), max_items_per_order=5)


async def _count(db, model) -> int:
    result = await db.execute(select(func.count()).select_from(model))
    return result.scalar()


# =============================================================================
# STATUS WORKFLOW
# =============================================================================

@pytest.mark.parametrize(
    "current,new,allowed",
    [
        (OrderStatus.PENDING, OrderStatus.PREPARING, True),
        (OrderStatus.PREPARING, OrderStatus.READY, True),
        (OrderStatus.READY, OrderStatus.SERVED, True),
        (OrderStatus.PENDING, OrderStatus.READY, False),
        (OrderStatus.PENDING, OrderStatus.SERVED, False),
        (OrderStatus.READY, OrderStatus.PREPARING, False),
        (OrderStatus.SERVED, OrderStatus.PENDING, False),
        (OrderStatus.PREPARING, OrderStatus.PREPARING, False),
        (OrderStatus.PREPARING, OrderStatus.SERVED, False),
    ],
)
def test_only_single_forward_steps_are_allowed(current, new, allowed):
    assert current.can_transition_to(new) is allowed


def test_served_is_the_only_terminal_status():
    terminal = [status for status in ORDER_STATUS_TRANSITIONS if status.is_terminal]
    assert terminal == [OrderStatus.SERVED]


def test_parse_status_accepts_any_case():
    assert parse_status("Preparing") is OrderStatus.PREPARING
    assert parse_status(OrderStatus.READY) is OrderStatus.READY
    with pytest.raises(BadRequestError):
        parse_status("cooking")


# =============================================================================
# ORDER CREATION
# =============================================================================

async def test_create_order_happy_path(orders, seeded_menu):
    order = await orders.create_order("John Doe", [SUSHI_ID, PIZZA_ID])

    assert order.id is not None
    assert order.customer_name == "John Doe"
    assert order.total_price == 700
    assert order.status == OrderStatus.PENDING
    assert order.order_time is not None
    assert [item.name for item in order.items] == ["Sushi Platter", "Margherita Pizza"]


async def test_repeated_ids_count_once_per_occurrence(orders, seeded_menu):
    order = await orders.create_order("Jane", [BURGER_ID, BURGER_ID, SUSHI_ID])

    assert order.total_price == 250 + 250 + 380
    assert [item.id for item in order.items] == [BURGER_ID, BURGER_ID, SUSHI_ID]


async def test_unresolvable_ids_are_skipped(orders, seeded_menu):
    order = await orders.create_order("Jane", [PIZZA_ID, 999, RAMEN_ID])

    assert order.total_price == 320
    assert [item.id for item in order.items] == [PIZZA_ID]


async def test_no_resolvable_ids_persists_nothing(db, orders, seeded_menu):
    with pytest.raises(BadRequestError, match="check if menu items are correct"):
        await orders.create_order("Jane", [999, RAMEN_ID])

    assert await _count(db, Order) == 0
    assert await _count(db, OrderItem) == 0


async def test_customer_name_is_stripped_and_required(orders, seeded_menu):
    order = await orders.create_order("  Jane Roe  ", [SUSHI_ID])
    assert order.customer_name == "Jane Roe"

    with pytest.raises(BadRequestError):
        await orders.create_order("   ", [SUSHI_ID])


async def test_too_many_items_rejected(orders, seeded_menu):
    with pytest.raises(BadRequestError, match="at most 5"):
        await orders.create_order("Jane", [SUSHI_ID] * 6)


async def test_failed_commit_rolls_back_order_and_items(db, orders, seeded_menu):
    async def failing_commit(session):
        await session.flush()
        raise SQLAlchemyError("disk full")

    with patch.object(AsyncSession, "commit", failing_commit):
        with pytest.raises(SQLAlchemyError):
            await orders.create_order("Jane", [SUSHI_ID, PIZZA_ID])

    assert await _count(db, Order) == 0
    assert await _count(db, OrderItem) == 0


async def test_created_order_reads_back_identically(db, orders, seeded_menu):
    created = await orders.create_order("Jane", [PIZZA_ID, SUSHI_ID, PIZZA_ID])

    fetched = await OrderService(db, DatabaseMenuCatalog(db)).get_by_id(created.id)

    assert fetched.total_price == created.total_price == 1020
    assert fetched.total_price == sum(item.price for item in fetched.items)
    assert [item.id for item in fetched.items] == [PIZZA_ID, SUSHI_ID, PIZZA_ID]


# =============================================================================
# STATUS UPDATES
# =============================================================================

async def test_walk_through_full_lifecycle(orders, seeded_menu):
    order = await orders.create_order("Jane", [SUSHI_ID])

    for status in ("preparing", "ready", "served"):
        order = await orders.update_status(order.id, status)
        assert order.status.value == status

    assert order.status.is_terminal


async def test_skipping_a_step_is_rejected(orders, seeded_menu):
    order = await orders.create_order("Jane", [SUSHI_ID])

    with pytest.raises(BadRequestError, match="from 'pending' to 'served'"):
        await orders.update_status(order.id, OrderStatus.SERVED)

    unchanged = await orders.get_by_id(order.id)
    assert unchanged.status == OrderStatus.PENDING


async def test_served_order_cannot_move(orders, seeded_menu):
    order = await orders.create_order("Jane", [SUSHI_ID])
    for status in (OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.SERVED):
        await orders.update_status(order.id, status)

    with pytest.raises(BadRequestError):
        await orders.update_status(order.id, OrderStatus.PENDING)


async def test_update_status_of_missing_order_changes_nothing(db, orders, seeded_menu):
    first = await orders.create_order("John Doe", [SUSHI_ID])
    second = await orders.create_order("Jane Roe", [PIZZA_ID])
    await orders.update_status(second.id, OrderStatus.PREPARING)

    with pytest.raises(NotFoundError):
        await orders.update_status(404, OrderStatus.PREPARING)

    assert await _count(db, Order) == 2
    assert await _count(db, OrderItem) == 2
    statuses = {o.id: o.status for o in await orders.list_all()}
    assert statuses == {first.id: OrderStatus.PENDING, second.id: OrderStatus.PREPARING}


async def test_rejected_transition_keeps_held_order_usable(orders, seeded_menu):
    order = await orders.create_order("John Doe", [SUSHI_ID, PIZZA_ID])
    assert order.total_price == 700

    order = await orders.update_status(order.id, "preparing")
    with pytest.raises(BadRequestError):
        await orders.update_status(order.id, "served")

    # The instance from before the rejection is still loaded
    assert order.id is not None
    assert order.status == OrderStatus.PREPARING
    assert [item.id for item in order.items] == [SUSHI_ID, PIZZA_ID]

    order = await orders.update_status(order.id, "ready")
    order = await orders.update_status(order.id, "served")
    assert order.status == OrderStatus.SERVED
    assert (await orders.get_by_id(order.id)).total_price == 700


async def test_update_status_with_unknown_status(orders, seeded_menu):
    order = await orders.create_order("Jane", [SUSHI_ID])

    with pytest.raises(BadRequestError, match="Status must be one of"):
        await orders.update_status(order.id, "cooking")


# =============================================================================
# QUERIES
# =============================================================================

async def test_get_missing_order(orders):
    with pytest.raises(NotFoundError):
        await orders.get_by_id(1)


async def test_list_all_newest_first(orders, seeded_menu):
    first = await orders.create_order("First", [SUSHI_ID])
    second = await orders.create_order("Second", [PIZZA_ID])
    third = await orders.create_order("Third", [BURGER_ID])

    listed = await orders.list_all()

    assert [order.id for order in listed] == [third.id, second.id, first.id]


async def test_list_by_status(orders, seeded_menu):
    pending = await orders.create_order("Pending", [SUSHI_ID])
    preparing = await orders.create_order("Preparing", [SUSHI_ID])
    await orders.update_status(preparing.id, OrderStatus.PREPARING)

    assert [o.id for o in await orders.list_by_status("pending")] == [pending.id]
    assert [o.id for o in await orders.list_by_status(OrderStatus.PREPARING)] == [preparing.id]
    assert await orders.list_by_status("served") == []


async def test_list_by_customer_is_case_insensitive_substring(orders, seeded_menu):
    await orders.create_order("John Doe", [SUSHI_ID])
    await orders.create_order("Johnny Walker", [PIZZA_ID])
    await orders.create_order("Jane 100%", [BURGER_ID])

    assert {o.customer_name for o in await orders.list_by_customer("JOHN")} == {
        "John Doe",
        "Johnny Walker",
    }
    assert [o.customer_name for o in await orders.list_by_customer("doe")] == ["John Doe"]
    # LIKE wildcards in the fragment match literally
    assert [o.customer_name for o in await orders.list_by_customer("100%")] == ["Jane 100%"]
    assert await orders.list_by_customer("0_") == []


async def test_blank_customer_filter_is_rejected(orders, seeded_menu):
    await orders.create_order("John Doe", [SUSHI_ID])

    with pytest.raises(BadRequestError, match="must not be blank"):
        await orders.list_by_customer("   ")
