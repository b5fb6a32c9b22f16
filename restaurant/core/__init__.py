"""
Core module initialization.
Exports configuration, logging and error utilities.
"""

from restaurant.core.config import get_settings, Settings, EnvironmentMode
from restaurant.core.exceptions import (
    RestaurantError,
    NotFoundError,
    BadRequestError,
    ConflictError,
)

__all__ = [
    "get_settings",
    "Settings",
    "EnvironmentMode",
    "RestaurantError",
    "NotFoundError",
    "BadRequestError",
    "ConflictError",
]
