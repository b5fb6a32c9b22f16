"""
                Restaurant Ordering API

A small FastAPI backend for a restaurant: menu catalog, order
placement, order status lifecycle and basic statistics.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
