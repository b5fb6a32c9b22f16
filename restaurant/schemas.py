"""
Pydantic Schemas for Request/Response Validation

Request bodies accept snake_case field names as well as the camelCase
names used by the web client (``customerName``, ``itemIds``).
"""

from datetime import datetime, timezone
from typing import Optional, List, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from restaurant.models import Cuisine, OrderStatus


# =============================================================================
# MENU SCHEMAS
# =============================================================================

class MenuItemRead(BaseModel):
    """A menu item as returned by the catalog and the API."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: int = Field(..., ge=0, examples=[380])
    description: str
    cuisine: Cuisine
    available: bool = True


class MenuListResponse(BaseModel):
    message: str
    menu: List[MenuItemRead]


class MenuItemDetailResponse(BaseModel):
    message: str
    item: MenuItemRead


class AvailabilityUpdate(BaseModel):
    """Request body for toggling a menu item."""
    available: bool


class MenuInitData(BaseModel):
    count: int
    items: List[MenuItemRead]


class MenuInitResponse(BaseModel):
    message: str
    data: MenuInitData


# =============================================================================
# ORDER SCHEMAS
# =============================================================================

class OrderCreate(BaseModel):
    """Request schema for placing a new order."""
    model_config = ConfigDict(populate_by_name=True)

    customer_name: str = Field(
        ...,
        alias="customerName",
        min_length=2,
        max_length=100,
        examples=["John Doe"],
    )
    item_ids: List[int] = Field(
        ...,
        alias="itemIds",
        min_length=1,
        examples=[[1, 2, 2]],
    )

    @field_validator("customer_name")
    @classmethod
    def validate_customer_name(cls, v: str) -> str:
        cleaned = v.strip()
        if len(cleaned) < 2:
            raise ValueError("Customer name must be at least 2 characters long")
        return cleaned

    @field_validator("item_ids")
    @classmethod
    def validate_item_ids(cls, v: List[int]) -> List[int]:
        if any(item_id < 1 for item_id in v):
            raise ValueError("Item IDs must be positive numbers")
        return v


class OrderStatusUpdate(BaseModel):
    """Request schema for moving an order to its next status."""
    status: OrderStatus = Field(..., examples=["preparing"])


class PriceBreakdownRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    subtotal: int
    tax: int
    service_charge: int
    total: int
    loyalty_points: int


class OrderRead(BaseModel):
    """A single order with its resolved items."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_name: str
    total_price: int
    status: OrderStatus
    order_time: datetime
    items: List[MenuItemRead]
    price_breakdown: Optional[PriceBreakdownRead] = None

    @field_validator("order_time")
    @classmethod
    def validate_order_time(cls, v: datetime) -> datetime:
        # SQLite returns naive values; stored times are always UTC
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class OrderDetailResponse(BaseModel):
    message: str
    order: OrderRead


class OrderListResponse(BaseModel):
    message: str
    total: int
    orders: List[OrderRead]


class PriceQuoteResponse(BaseModel):
    message: str
    formatted_total: str
    breakdown: PriceBreakdownRead


# =============================================================================
# STATS SCHEMAS
# =============================================================================

class StatsRead(BaseModel):
    total_menu_items: int
    total_orders: int
    total_revenue: int


class StatsResponse(BaseModel):
    message: str
    stats: StatsRead


class StatusStatsResponse(BaseModel):
    message: str
    stats: Dict[str, int]


class RevenueResponse(BaseModel):
    message: str
    start: datetime
    end: datetime
    revenue: int
    formatted_revenue: str


# =============================================================================
# CACHE / HEALTH / ERROR SCHEMAS
# =============================================================================

class CacheEntryRead(BaseModel):
    key: str
    age_seconds: Optional[float] = None
    ttl_seconds: Optional[float] = None
    expired: bool = False


class CacheStatsResponse(BaseModel):
    backend: str
    enabled: bool
    total_entries: int
    entries: List[CacheEntryRead]


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    cache: str
    cache_backend: str
    timestamp: datetime
