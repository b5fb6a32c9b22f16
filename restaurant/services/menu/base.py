"""
Menu Catalog Abstract Base Class

Defines the read-query interface shared by the database-backed catalog
and the caching catalog that wraps it. Both return MenuItemRead schemas,
never ORM rows, so results can be cached and outlive a session.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence

from restaurant.models import Cuisine
from restaurant.schemas import MenuItemRead


class BaseMenuCatalog(ABC):
    """
    Abstract base class for menu catalogs.

    Read queries only ever see available items. ``set_availability`` and
    ``count(include_unavailable=True)`` are the only operations that look
    at unavailable rows.
    """

    @abstractmethod
    async def list_all(self) -> list[MenuItemRead]:
        """Available items ordered by id ascending."""
        pass

    @abstractmethod
    async def get_by_id(self, item_id: int) -> Optional[MenuItemRead]:
        """The available item with this id, or None."""
        pass

    @abstractmethod
    async def list_by_cuisine(self, cuisine: Cuisine) -> list[MenuItemRead]:
        """Available items of one cuisine ordered by id ascending."""
        pass

    @abstractmethod
    async def is_available(self, item_id: int) -> bool:
        pass

    @abstractmethod
    async def validate_ids(self, item_ids: Sequence[int]) -> list[MenuItemRead]:
        """
        Resolve item ids to available items.

        Request order and repetition are preserved; ids that do not
        resolve are dropped.
        """
        pass

    @abstractmethod
    async def count(self, include_unavailable: bool = False) -> int:
        pass

    @abstractmethod
    async def set_availability(self, item_id: int, available: bool) -> MenuItemRead:
        """
        Toggle an item's availability flag.

        Raises:
            NotFoundError: If no item with this id exists
        """
        pass

    @abstractmethod
    async def create_many(self, items: Sequence[dict]) -> int:
        """Insert new items; returns the number created."""
        pass
