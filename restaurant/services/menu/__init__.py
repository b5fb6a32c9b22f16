"""
Menu Catalog Factory

Builds the catalog used by a request: the database catalog, wrapped in
the caching catalog when MENU_CACHE_ENABLED is set.

Usage:
    from restaurant.services.menu import build_menu_catalog

    catalog = build_menu_catalog(db, store, settings)
    items = await catalog.list_all()
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from restaurant.core.config import Settings
from restaurant.services.cache.base import BaseCacheStore
from restaurant.services.menu.base import BaseMenuCatalog
from restaurant.services.menu.cached import CachedMenuCatalog, cache_key
from restaurant.services.menu.database import DatabaseMenuCatalog

logger = logging.getLogger(__name__)


def build_menu_catalog(
    db: AsyncSession,
    store: Optional[BaseCacheStore],
    settings: Settings,
) -> BaseMenuCatalog:
    """
    Compose the menu catalog for one request.

    Args:
        db: Request-scoped session
        store: Shared cache store (ignored when caching is disabled)
        settings: Application settings providing cache TTLs

    Returns:
        BaseMenuCatalog: DatabaseMenuCatalog or CachedMenuCatalog around it
    """
    catalog = DatabaseMenuCatalog(db)
    if not settings.menu_cache_enabled or store is None:
        return catalog
    return CachedMenuCatalog(
        catalog,
        store,
        ttl_seconds=settings.menu_cache_ttl_seconds,
        availability_ttl_seconds=settings.availability_cache_ttl_seconds,
    )


__all__ = [
    "build_menu_catalog",
    "cache_key",
    "BaseMenuCatalog",
    "DatabaseMenuCatalog",
    "CachedMenuCatalog",
]
