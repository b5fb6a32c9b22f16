"""
                        Services Module

Business logic on top of the ORM:
    - menu: menu catalog (database and caching implementations)
    - cache: cache stores backing the caching catalog
    - orders: order placement and status lifecycle
    - stats: counts and revenue aggregates
    - admin: default menu seeding and availability toggling
"""

from restaurant.services.admin import AdminService, DEFAULT_MENU_ITEMS
from restaurant.services.orders import OrderService, STATUS_MESSAGES
from restaurant.services.stats import StatsService

__all__ = ["AdminService", "DEFAULT_MENU_ITEMS", "OrderService", "STATUS_MESSAGES", "StatsService"]
