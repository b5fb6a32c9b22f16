"""
Pricing Helpers

Pure functions for tax, service charge, totals and loyalty points.
All amounts are integers in the minor currency unit.

These helpers are NOT applied to Order.total_price, which is always the
plain sum of item prices. They back the quote endpoint and the display
breakdown attached to order responses.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class PricingPolicy:
    """
    Rates used by the pricing helpers.

    Attributes:
        tax_rate: Tax rate as decimal
        service_charge_rate: Service charge rate as decimal
        loyalty_points_rate: Points per currency unit spent
        currency: Currency code for display
    """
    tax_rate: float = 0.08
    service_charge_rate: float = 0.10
    loyalty_points_rate: float = 1
    currency: str = "TWD"


@dataclass(frozen=True)
class PriceBreakdown:
    """Subtotal with tax, service charge and earned loyalty points."""
    subtotal: int
    tax: int
    service_charge: int
    total: int
    loyalty_points: int

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "subtotal": self.subtotal,
            "tax": self.tax,
            "service_charge": self.service_charge,
            "total": self.total,
            "loyalty_points": self.loyalty_points,
        }


DEFAULT_POLICY = PricingPolicy()


def tax(amount: int, policy: PricingPolicy = DEFAULT_POLICY) -> int:
    return round(amount * policy.tax_rate)


def service_charge(amount: int, policy: PricingPolicy = DEFAULT_POLICY) -> int:
    return round(amount * policy.service_charge_rate)


def total_with_tax_and_service(subtotal: int, policy: PricingPolicy = DEFAULT_POLICY) -> int:
    """Subtotal plus rounded tax plus rounded service charge."""
    return subtotal + tax(subtotal, policy) + service_charge(subtotal, policy)


def loyalty_points(amount: int, policy: PricingPolicy = DEFAULT_POLICY) -> int:
    return math.floor(amount * policy.loyalty_points_rate)


def format_price(amount: int, policy: PricingPolicy = DEFAULT_POLICY) -> str:
    """Format an amount for display, e.g. ``TWD 1,200``."""
    return f"{policy.currency} {amount:,}"


def quote(subtotal: int, policy: PricingPolicy = DEFAULT_POLICY) -> PriceBreakdown:
    """
    Compute the full price breakdown for a subtotal.

    Args:
        subtotal: Sum of item prices in minor units
        policy: Rates to apply

    Returns:
        PriceBreakdown with tax, service charge, total and loyalty points
    """
    if subtotal < 0:
        raise ValueError("subtotal must be non-negative")
    item_tax = tax(subtotal, policy)
    service = service_charge(subtotal, policy)
    total = subtotal + item_tax + service
    return PriceBreakdown(
        subtotal=subtotal,
        tax=item_tax,
        service_charge=service,
        total=total,
        loyalty_points=loyalty_points(total, policy),
    )
