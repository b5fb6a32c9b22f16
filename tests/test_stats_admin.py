import importlib.util
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from restaurant.core.exceptions import BadRequestError, ConflictError, NotFoundError
from restaurant.models import Order, OrderStatus
from restaurant.services import DEFAULT_MENU_ITEMS, AdminService, OrderService, StatsService
from restaurant.services.menu import CachedMenuCatalog, DatabaseMenuCatalog, cache_key
from restaurant.services.stats import as_utc
from tests.fixtures_data import PIZZA_ID, RAMEN_ID, SUSHI_ID

NOON = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def stats(db):
    return StatsService(db, DatabaseMenuCatalog(db))


async def _add_orders(db, *placed):
    """Insert orders directly as (order_time, total_price) pairs."""
    db.add_all(
        [
            Order(customer_name=f"Guest {i}", total_price=total, order_time=when)
            for i, (when, total) in enumerate(placed)
        ]
    )
    await db.commit()


# =============================================================================
# STATS
# =============================================================================

async def test_stats_with_no_orders(stats, seeded_menu):
    assert await stats.get_stats() == {
        "total_menu_items": 3,
        "total_orders": 0,
        "total_revenue": 0,
    }


async def test_stats_on_empty_database(stats):
    assert await stats.get_stats() == {
        "total_menu_items": 0,
        "total_orders": 0,
        "total_revenue": 0,
    }


async def test_stats_sum_placed_orders(db, stats, seeded_menu):
    orders = OrderService(db, DatabaseMenuCatalog(db))
    await orders.create_order("John Doe", [SUSHI_ID, PIZZA_ID])
    await orders.create_order("Jane Roe", [PIZZA_ID])

    result = await stats.get_stats()

    assert result["total_orders"] == 2
    assert result["total_revenue"] == 700 + 320


async def test_order_stats_by_status_lists_every_status(db, stats, seeded_menu):
    assert await stats.get_order_stats_by_status() == {
        "pending": 0,
        "preparing": 0,
        "ready": 0,
        "served": 0,
    }

    orders = OrderService(db, DatabaseMenuCatalog(db))
    first = await orders.create_order("John", [SUSHI_ID])
    await orders.create_order("Jane", [SUSHI_ID])
    await orders.update_status(first.id, OrderStatus.PREPARING)

    assert await stats.get_order_stats_by_status() == {
        "pending": 1,
        "preparing": 1,
        "ready": 0,
        "served": 0,
    }


async def test_revenue_by_period_is_inclusive(db, stats):
    await _add_orders(
        db,
        (NOON - timedelta(hours=1), 100),
        (NOON, 200),
        (NOON + timedelta(hours=1), 300),
        (NOON + timedelta(hours=2), 400),
    )

    assert await stats.get_revenue_by_period(NOON, NOON + timedelta(hours=1)) == 500
    assert await stats.get_revenue_by_period(NOON, NOON) == 200
    assert await stats.get_revenue_by_period(
        NOON + timedelta(days=1), NOON + timedelta(days=2)
    ) == 0


async def test_revenue_by_period_treats_naive_as_utc(db, stats):
    await _add_orders(db, (NOON, 250))

    naive = NOON.replace(tzinfo=None)
    assert await stats.get_revenue_by_period(naive, naive) == 250


async def test_revenue_by_period_rejects_reversed_range(stats):
    with pytest.raises(BadRequestError):
        await stats.get_revenue_by_period(NOON, NOON - timedelta(seconds=1))


def test_as_utc_converts_offsets():
    plus_eight = timezone(timedelta(hours=8))
    assert as_utc(datetime(2024, 3, 1, 20, 0, tzinfo=plus_eight)) == NOON
    assert as_utc(datetime(2024, 3, 1, 12, 0)) == NOON


# =============================================================================
# ADMIN
# =============================================================================

async def test_initialize_default_menu(db):
    admin = AdminService(DatabaseMenuCatalog(db))

    result = await admin.initialize_default_menu()

    assert result["count"] == 5
    assert [item.name for item in result["items"]] == [item["name"] for item in DEFAULT_MENU_ITEMS]
    assert [item.price for item in result["items"]] == [380, 320, 250, 280, 290]


async def test_initialize_default_menu_twice_conflicts(db):
    admin = AdminService(DatabaseMenuCatalog(db))
    await admin.initialize_default_menu()

    with pytest.raises(ConflictError):
        await admin.initialize_default_menu()

    assert await DatabaseMenuCatalog(db).count(include_unavailable=True) == 5


async def test_initialize_conflicts_even_if_only_unavailable_items_exist(db, seeded_menu):
    catalog = DatabaseMenuCatalog(db)
    for item_id in list(seeded_menu):
        if item_id != RAMEN_ID:
            await db.delete(seeded_menu[item_id])
    await db.commit()
    assert await catalog.count() == 0

    with pytest.raises(ConflictError):
        await AdminService(catalog).initialize_default_menu()


async def test_initialize_refreshes_cached_listing(db, cache_store):
    catalog = CachedMenuCatalog(DatabaseMenuCatalog(db), cache_store)
    assert await catalog.list_all() == []

    await AdminService(catalog).initialize_default_menu()

    assert len(await catalog.list_all()) == 5


async def test_set_menu_item_availability(db, seeded_menu):
    admin = AdminService(DatabaseMenuCatalog(db))

    item = await admin.set_menu_item_availability(PIZZA_ID, False)
    assert item.available is False

    with pytest.raises(NotFoundError):
        await admin.set_menu_item_availability(999, True)


def _load_seed_script():
    path = Path(__file__).resolve().parents[1] / "scripts" / "seed.py"
    spec = importlib.util.spec_from_file_location("seed_script", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


async def test_seed_script_invalidates_cached_menu(session_maker, cache_store, monkeypatch):
    seed = _load_seed_script()
    monkeypatch.setattr(seed, "async_session_maker", session_maker)
    monkeypatch.setattr(seed, "init_db", AsyncMock())
    monkeypatch.setattr(seed, "engine", AsyncMock())
    monkeypatch.setattr(seed, "get_cache_store", lambda: cache_store)
    await cache_store.set(cache_key("list_all"), [], 300)

    assert await seed.seed() is True

    assert await cache_store.get(cache_key("list_all")) is None
    async with session_maker() as session:
        assert await DatabaseMenuCatalog(session).count() == 5
