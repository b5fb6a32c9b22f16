"""
Menu Seeding Script

Creates the tables and seeds the default menu into the configured
database. The catalog is built the same way the API builds it, so with
the menu cache enabled the seeding write also invalidates any cached
listings (in staging/production this is the shared Redis cache).

Run from project root: python scripts/seed.py
"""

import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from restaurant.core.config import get_settings, setup_logging
from restaurant.core.exceptions import ConflictError
from restaurant.database import async_session_maker, engine, init_db
from restaurant.services import AdminService
from restaurant.services.cache import get_cache_store
from restaurant.services.menu import build_menu_catalog


async def seed() -> bool:
    """Seed the default menu; returns False if the menu was not empty."""
    print("=" * 60)
    print("🌱 SEEDING DEFAULT MENU")
    print("=" * 60)

    settings = get_settings()
    store = get_cache_store() if settings.menu_cache_enabled else None

    await init_db()
    try:
        async with async_session_maker() as session:
            admin = AdminService(build_menu_catalog(session, store, settings))
            try:
                result = await admin.initialize_default_menu()
            except ConflictError as e:
                print(f"\n⚠️ {e.detail}")
                return False

        print(f"\n✅ Created {result['count']} menu items")
        for item in result["items"]:
            print(f"   #{item.id:<3} {item.name:<20} {item.price:>5}  ({item.cuisine.value})")
        return True
    finally:
        if store is not None:
            await store.close()
        await engine.dispose()


if __name__ == "__main__":
    setup_logging()
    ok = asyncio.run(seed())
    sys.exit(0 if ok else 1)
