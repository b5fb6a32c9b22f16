"""
Admin Service

Seeds the default menu and toggles item availability. Both go through
the menu catalog so a caching catalog sees the writes and invalidates.
"""

import logging

from restaurant.core.exceptions import ConflictError
from restaurant.models import Cuisine
from restaurant.schemas import MenuItemRead
from restaurant.services.menu.base import BaseMenuCatalog

logger = logging.getLogger(__name__)

DEFAULT_MENU_ITEMS = [
    {
        "name": "Sushi Platter",
        "price": 380,
        "description": "Fresh sashimi sushi with wasabi and ginger",
        "cuisine": Cuisine.JAPANESE,
    },
    {
        "name": "Margherita Pizza",
        "price": 320,
        "description": "Classic Italian pizza with fresh mozzarella and basil",
        "cuisine": Cuisine.ITALIAN,
    },
    {
        "name": "Burger Combo",
        "price": 250,
        "description": "Beef burger with crispy fries and coleslaw",
        "cuisine": Cuisine.GENERAL,
    },
    {
        "name": "Chicken Teriyaki",
        "price": 280,
        "description": "Grilled chicken with teriyaki sauce and steamed rice",
        "cuisine": Cuisine.JAPANESE,
    },
    {
        "name": "Pasta Carbonara",
        "price": 290,
        "description": "Creamy pasta with bacon, eggs, and parmesan cheese",
        "cuisine": Cuisine.ITALIAN,
    },
]


class AdminService:
    """Administrative menu operations."""

    def __init__(self, catalog: BaseMenuCatalog):
        self.catalog = catalog

    async def initialize_default_menu(self) -> dict:
        """
        Seed the five default menu items.

        Returns:
            dict with ``count`` created and the available ``items``

        Raises:
            ConflictError: If any menu item already exists
        """
        existing = await self.catalog.count(include_unavailable=True)
        if existing > 0:
            raise ConflictError(
                f"Menu already has {existing} items. Cannot initialize default menu."
            )

        count = await self.catalog.create_many(DEFAULT_MENU_ITEMS)
        items = await self.catalog.list_all()
        logger.info(f"Initialized default menu with {count} items")
        return {"count": count, "items": items}

    async def set_menu_item_availability(self, item_id: int, available: bool) -> MenuItemRead:
        return await self.catalog.set_availability(item_id, available)
