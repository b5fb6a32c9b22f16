"""
FastAPI Application Entry Point

Restaurant Ordering API.

Endpoints:
    - GET /api/menu: Menu listing (optionally by cuisine)
    - GET /api/menu/{id}: Single menu item
    - POST /api/orders: Place an order
    - GET /api/orders: List orders (filter by status / customer)
    - GET /api/orders/{id}: Single order
    - PATCH /api/orders/{id}/status: Advance order status
    - GET /api/pricing/quote: Tax / service charge breakdown
    - /api/admin/...: Stats, menu seeding, availability, cache
    - GET /health: System health check
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import FastAPI, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant.core.config import get_settings, setup_logging
from restaurant.core.exceptions import NotFoundError, RestaurantError
from restaurant.database import get_db, init_db, engine
from restaurant.models import Cuisine, Order, OrderStatus
from restaurant.pricing import format_price, quote
from restaurant.schemas import (
    AvailabilityUpdate,
    CacheEntryRead,
    CacheStatsResponse,
    ErrorResponse,
    HealthResponse,
    MenuInitData,
    MenuInitResponse,
    MenuItemDetailResponse,
    MenuListResponse,
    OrderCreate,
    OrderDetailResponse,
    OrderListResponse,
    OrderRead,
    OrderStatusUpdate,
    PriceBreakdownRead,
    PriceQuoteResponse,
    RevenueResponse,
    StatsRead,
    StatsResponse,
    StatusStatsResponse,
)
from restaurant.services import AdminService, OrderService, StatsService, STATUS_MESSAGES
from restaurant.services.cache import BaseCacheStore, get_cache_store
from restaurant.services.menu import BaseMenuCatalog, CachedMenuCatalog, build_menu_catalog

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
}


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    await init_db()
    logger.info("Database initialized")

    store = get_cache_store() if settings.menu_cache_enabled else None
    logger.info(f"Menu cache: {store.provider_name if store else 'disabled'}")

    yield  # Application runs

    logger.info("Shutting down...")
    if store is not None:
        await store.close()
    await engine.dispose()
    logger.info("Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Menu catalog, order placement and order status lifecycle for a restaurant.",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_menu_cache() -> Optional[BaseCacheStore]:
    """Shared cache store, or None when caching is disabled."""
    if not settings.menu_cache_enabled:
        return None
    return get_cache_store()


def get_menu_catalog(
    db: AsyncSession = Depends(get_db),
    store: Optional[BaseCacheStore] = Depends(get_menu_cache),
) -> BaseMenuCatalog:
    return build_menu_catalog(db, store, settings)


def get_order_service(
    db: AsyncSession = Depends(get_db),
    catalog: BaseMenuCatalog = Depends(get_menu_catalog),
) -> OrderService:
    return OrderService(db, catalog, max_items_per_order=settings.max_items_per_order)


def get_stats_service(
    db: AsyncSession = Depends(get_db),
    catalog: BaseMenuCatalog = Depends(get_menu_catalog),
) -> StatsService:
    return StatsService(db, catalog)


def get_admin_service(
    catalog: BaseMenuCatalog = Depends(get_menu_catalog),
) -> AdminService:
    return AdminService(catalog)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def to_order_read(order: Order) -> OrderRead:
    """Serialize an order with its display-only price breakdown."""
    breakdown = quote(order.total_price, settings.pricing_policy())
    result = OrderRead.model_validate(order)
    result.price_breakdown = PriceBreakdownRead.model_validate(breakdown)
    return result


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, Any]:
    """API root with navigation links."""
    return {
        "message": f"Welcome to {settings.restaurant_name}!",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "available_routes": {
            "menu": "GET /api/menu",
            "menu_item": "GET /api/menu/{id}",
            "create_order": "POST /api/orders",
            "all_orders": "GET /api/orders",
            "specific_order": "GET /api/orders/{id}",
            "update_order_status": "PATCH /api/orders/{id}/status",
            "price_quote": "GET /api/pricing/quote",
            "statistics": "GET /api/admin/stats",
        },
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    db: AsyncSession = Depends(get_db),
    store: Optional[BaseCacheStore] = Depends(get_menu_cache),
) -> HealthResponse:
    """Verify the database and the menu cache are operational."""
    db_status = "healthy"
    try:
        await db.execute(select(1))
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    if store is None:
        cache_status, cache_backend = "disabled", "none"
    else:
        cache_backend = store.provider_name
        cache_status = "healthy" if await store.health_check() else "unhealthy"

    overall = "operational" if db_status == "healthy" and cache_status != "unhealthy" else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        cache=cache_status,
        cache_backend=cache_backend,
        timestamp=datetime.now(timezone.utc),
    )


# =============================================================================
# MENU ENDPOINTS
# =============================================================================

@app.get(
    "/api/menu",
    response_model=MenuListResponse,
    responses=ERROR_RESPONSES,
    tags=["Menu"],
    summary="Get restaurant menu items",
)
async def get_menu(
    cuisine: Optional[Cuisine] = Query(None),
    catalog: BaseMenuCatalog = Depends(get_menu_catalog),
) -> MenuListResponse:
    """Available menu items, optionally filtered by cuisine."""
    if cuisine:
        return MenuListResponse(
            message=f"{cuisine.value.capitalize()} cuisine menu items",
            menu=await catalog.list_by_cuisine(cuisine),
        )

    return MenuListResponse(
        message="Welcome to our international restaurant! Here is our full menu:",
        menu=await catalog.list_all(),
    )


@app.get(
    "/api/menu/{item_id}",
    response_model=MenuItemDetailResponse,
    responses=ERROR_RESPONSES,
    tags=["Menu"],
    summary="Get specific menu item by ID",
)
async def get_menu_item(
    item_id: int,
    catalog: BaseMenuCatalog = Depends(get_menu_catalog),
) -> MenuItemDetailResponse:
    item = await catalog.get_by_id(item_id)
    if item is None:
        raise NotFoundError("Menu item not found")

    return MenuItemDetailResponse(message=f"Details for {item.name}", item=item)


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@app.post(
    "/api/orders",
    response_model=OrderDetailResponse,
    status_code=201,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="Create a new order",
)
async def create_order(
    order_data: OrderCreate,
    orders: OrderService = Depends(get_order_service),
) -> OrderDetailResponse:
    """
    Place an order.

    Repeat an item id to order it more than once. Ids that do not match
    an available menu item are skipped; the order fails only when none
    of them match.
    """
    logger.info(f"Creating order for: {order_data.customer_name}")
    order = await orders.create_order(order_data.customer_name, order_data.item_ids)

    return OrderDetailResponse(
        message="Order created successfully! Our chefs are preparing your meal...",
        order=to_order_read(order),
    )


@app.get(
    "/api/orders",
    response_model=OrderListResponse,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="List orders",
)
async def list_orders(
    status: Optional[OrderStatus] = Query(None),
    customer: Optional[str] = Query(None, min_length=1, max_length=100),
    orders: OrderService = Depends(get_order_service),
) -> OrderListResponse:
    """Orders, newest first, optionally filtered by status and customer name."""
    if customer:
        results = await orders.list_by_customer(customer)
        if status:
            results = [order for order in results if order.status == status]
    elif status:
        results = await orders.list_by_status(status)
    else:
        results = await orders.list_all()

    return OrderListResponse(
        message="Restaurant orders list",
        total=len(results),
        orders=[to_order_read(order) for order in results],
    )


@app.get(
    "/api/orders/{order_id}",
    response_model=OrderDetailResponse,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="Get specific order by ID",
)
async def get_order(
    order_id: int,
    orders: OrderService = Depends(get_order_service),
) -> OrderDetailResponse:
    order = await orders.get_by_id(order_id)
    return OrderDetailResponse(message=f"Order #{order_id} details", order=to_order_read(order))


@app.patch(
    "/api/orders/{order_id}/status",
    response_model=OrderDetailResponse,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="Update order status",
)
async def update_order_status(
    order_id: int,
    body: OrderStatusUpdate,
    orders: OrderService = Depends(get_order_service),
) -> OrderDetailResponse:
    """Advance an order one step: pending → preparing → ready → served."""
    order = await orders.update_status(order_id, body.status)
    return OrderDetailResponse(message=STATUS_MESSAGES[order.status], order=to_order_read(order))


# =============================================================================
# PRICING ENDPOINTS
# =============================================================================

@app.get(
    "/api/pricing/quote",
    response_model=PriceQuoteResponse,
    responses=ERROR_RESPONSES,
    tags=["Pricing"],
    summary="Tax and service charge for a subtotal",
)
async def price_quote(subtotal: int = Query(..., ge=0)) -> PriceQuoteResponse:
    policy = settings.pricing_policy()
    breakdown = quote(subtotal, policy)
    return PriceQuoteResponse(
        message="Price breakdown",
        formatted_total=format_price(breakdown.total, policy),
        breakdown=PriceBreakdownRead.model_validate(breakdown),
    )


# =============================================================================
# ADMIN ENDPOINTS
# =============================================================================

@app.get(
    "/api/admin/stats",
    response_model=StatsResponse,
    tags=["Admin"],
    summary="Get restaurant operation statistics",
)
async def get_stats(stats: StatsService = Depends(get_stats_service)) -> StatsResponse:
    return StatsResponse(
        message="Restaurant operation statistics",
        stats=StatsRead(**await stats.get_stats()),
    )


@app.get(
    "/api/admin/stats/orders-by-status",
    response_model=StatusStatsResponse,
    tags=["Admin"],
)
async def get_order_stats_by_status(
    stats: StatsService = Depends(get_stats_service),
) -> StatusStatsResponse:
    return StatusStatsResponse(
        message="Order count by status",
        stats=await stats.get_order_stats_by_status(),
    )


@app.get(
    "/api/admin/stats/revenue",
    response_model=RevenueResponse,
    responses=ERROR_RESPONSES,
    tags=["Admin"],
)
async def get_revenue_by_period(
    start: datetime = Query(...),
    end: datetime = Query(...),
    stats: StatsService = Depends(get_stats_service),
) -> RevenueResponse:
    """Revenue of orders placed between start and end, inclusive."""
    revenue = await stats.get_revenue_by_period(start, end)
    return RevenueResponse(
        message="Revenue for period",
        start=start,
        end=end,
        revenue=revenue,
        formatted_revenue=format_price(revenue, settings.pricing_policy()),
    )


@app.post(
    "/api/admin/menu/init",
    response_model=MenuInitResponse,
    status_code=201,
    responses=ERROR_RESPONSES,
    tags=["Admin"],
    summary="Initialize default menu items",
)
async def initialize_menu(admin: AdminService = Depends(get_admin_service)) -> MenuInitResponse:
    result = await admin.initialize_default_menu()
    return MenuInitResponse(
        message=f"Successfully initialized {result['count']} default menu items!",
        data=MenuInitData(**result),
    )


@app.patch(
    "/api/admin/menu/{item_id}/availability",
    response_model=MenuItemDetailResponse,
    responses=ERROR_RESPONSES,
    tags=["Admin"],
)
async def set_menu_item_availability(
    item_id: int,
    body: AvailabilityUpdate,
    admin: AdminService = Depends(get_admin_service),
) -> MenuItemDetailResponse:
    item = await admin.set_menu_item_availability(item_id, body.available)
    state = "available" if item.available else "unavailable"
    return MenuItemDetailResponse(message=f"{item.name} is now {state}", item=item)


@app.get(
    "/api/admin/cache",
    response_model=CacheStatsResponse,
    tags=["Admin"],
)
async def get_cache_stats(
    catalog: BaseMenuCatalog = Depends(get_menu_catalog),
) -> CacheStatsResponse:
    if not isinstance(catalog, CachedMenuCatalog):
        return CacheStatsResponse(backend="none", enabled=False, total_entries=0, entries=[])

    entries = await catalog.entries()
    return CacheStatsResponse(
        backend=catalog.store.provider_name,
        enabled=True,
        total_entries=len(entries),
        entries=[CacheEntryRead(**entry.to_dict()) for entry in entries],
    )


@app.delete("/api/admin/cache", tags=["Admin"])
async def clear_cache(catalog: BaseMenuCatalog = Depends(get_menu_catalog)) -> dict[str, Any]:
    removed = await catalog.clear() if isinstance(catalog, CachedMenuCatalog) else 0
    return {"message": "Menu cache cleared", "removed": removed}


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(RestaurantError)
async def restaurant_error_handler(request: Request, exc: RestaurantError) -> JSONResponse:
    """Map typed service failures to the error envelope."""
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed requests as 400 with the same envelope."""
    detail = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error="Bad Request", detail=detail).model_dump(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )


# =============================================================================
# ENTRY POINT
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "restaurant.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
