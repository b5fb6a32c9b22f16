"""
Database Menu Catalog

Menu queries against the relational store through an AsyncSession.
"""

import logging
from typing import Optional, Sequence

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant.core.exceptions import NotFoundError
from restaurant.models import Cuisine, MenuItem
from restaurant.schemas import MenuItemRead
from restaurant.services.menu.base import BaseMenuCatalog

logger = logging.getLogger(__name__)


class DatabaseMenuCatalog(BaseMenuCatalog):
    """Menu catalog reading straight from the database."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _available(self, *conditions) -> list[MenuItemRead]:
        query = (
            select(MenuItem)
            .where(MenuItem.available.is_(True), *conditions)
            .order_by(MenuItem.id)
        )
        result = await self.db.execute(query)
        return [MenuItemRead.model_validate(item) for item in result.scalars().all()]

    async def list_all(self) -> list[MenuItemRead]:
        logger.debug("Fetching available menu items from database")
        return await self._available()

    async def get_by_id(self, item_id: int) -> Optional[MenuItemRead]:
        items = await self._available(MenuItem.id == item_id)
        return items[0] if items else None

    async def list_by_cuisine(self, cuisine: Cuisine) -> list[MenuItemRead]:
        return await self._available(MenuItem.cuisine == cuisine)

    async def is_available(self, item_id: int) -> bool:
        return await self.get_by_id(item_id) is not None

    async def validate_ids(self, item_ids: Sequence[int]) -> list[MenuItemRead]:
        if not item_ids:
            return []
        found = {item.id: item for item in await self._available(MenuItem.id.in_(set(item_ids)))}
        resolved = [found[item_id] for item_id in item_ids if item_id in found]

        dropped = len(item_ids) - len(resolved)
        if dropped:
            logger.warning(f"Dropped {dropped} unresolvable menu item id(s) from {list(item_ids)}")
        return resolved

    async def count(self, include_unavailable: bool = False) -> int:
        query = select(func.count(MenuItem.id))
        if not include_unavailable:
            query = query.where(MenuItem.available.is_(True))
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def set_availability(self, item_id: int, available: bool) -> MenuItemRead:
        item = await self.db.get(MenuItem, item_id)
        if item is None:
            raise NotFoundError(f"Menu item #{item_id} not found")

        item.available = available
        await self.db.commit()
        await self.db.refresh(item)

        logger.info(f"Menu item #{item_id} availability set to {available}")
        return MenuItemRead.model_validate(item)

    async def create_many(self, items: Sequence[dict]) -> int:
        self.db.add_all([MenuItem(**item) for item in items])
        await self.db.commit()
        return len(items)
