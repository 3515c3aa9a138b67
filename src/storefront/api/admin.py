"""FastAPI endpoints for the back-office: orders, inventory and reporting.

Every route requires the ``admin`` role.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from storefront.api.auth import require_admin
from storefront.api.schemas import (
    ChangeOrderStatusRequest,
    CreatedProductResponse,
    CreateProductRequest,
    DashboardResponse,
    ErrorResponse,
    OrderPageResponse,
    OrderResponse,
    OrderStatsResponse,
    ProductPageResponse,
    ProductResponse,
    SetStockRequest,
    SuccessResponse,
    UpdateProductRequest,
)
from storefront.order.order import Order
from storefront.order.status import ChangeOrderStatus
from storefront.product.creation import AddProduct
from storefront.product.details import RemoveProduct, UpdateProduct
from storefront.product.product import Product
from storefront.product.stock import SetStock
from storefront.reporting.dashboard import MAX_STATS_DAYS, dashboard_summary, order_stats

admin_router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
    responses={code: {"model": ErrorResponse} for code in (400, 401, 403, 404)},
)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
@admin_router.get("/orders", response_model=OrderPageResponse)
async def list_orders(
    page: int = 1,
    limit: int = 10,
    status: str | None = None,
    search_term: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> OrderPageResponse:
    results = current_domain.repository_for(Order).list_page(
        status=status,
        search_term=search_term,
        date_from=date_from,
        date_to=date_to,
        page=page,
        page_size=limit,
    )
    return OrderPageResponse(
        orders=[OrderResponse.from_order(o) for o in results.items],
        current_page=page,
        total_pages=results.total_pages,
        total_orders=results.total,
    )


@admin_router.patch("/orders/{order_id}", response_model=SuccessResponse)
async def change_order_status(order_id: str, body: ChangeOrderStatusRequest) -> SuccessResponse:
    current_domain.process(ChangeOrderStatus(order_id=order_id, status=body.status), asynchronous=False)
    return SuccessResponse()


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------
@admin_router.get("/inventory", response_model=ProductPageResponse)
async def list_inventory(page: int = 1, limit: int = 10, category: str | None = None) -> ProductPageResponse:
    results = current_domain.repository_for(Product).list_page(category=category, page=page, page_size=limit)
    return ProductPageResponse(
        products=[ProductResponse.from_product(p) for p in results.items],
        current_page=page,
        total_pages=results.total_pages,
        total_products=results.total,
    )


@admin_router.post("/inventory", status_code=201, response_model=CreatedProductResponse)
async def add_inventory(body: CreateProductRequest) -> CreatedProductResponse:
    result = current_domain.process(AddProduct(**body.model_dump(exclude_none=True)), asynchronous=False)
    return CreatedProductResponse(product_id=result)


@admin_router.patch("/inventory/{product_id}", response_model=SuccessResponse)
async def update_inventory(product_id: str, body: UpdateProductRequest) -> SuccessResponse:
    command = UpdateProduct(product_id=product_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return SuccessResponse()


@admin_router.patch("/inventory/{product_id}/stock", response_model=SuccessResponse)
async def set_stock(product_id: str, body: SetStockRequest) -> SuccessResponse:
    command = SetStock(product_id=product_id, quantity=body.quantity, in_stock=body.in_stock)
    current_domain.process(command, asynchronous=False)
    return SuccessResponse()


@admin_router.delete("/inventory/{product_id}", response_model=SuccessResponse)
async def remove_inventory(product_id: str) -> SuccessResponse:
    current_domain.process(RemoveProduct(product_id=product_id), asynchronous=False)
    return SuccessResponse()


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------
@admin_router.get("/dashboard", response_model=DashboardResponse)
async def dashboard() -> DashboardResponse:
    return DashboardResponse(**dashboard_summary())


@admin_router.get("/order-stats", response_model=OrderStatsResponse)
async def get_order_stats(days: int = Query(30, ge=1, le=MAX_STATS_DAYS)) -> OrderStatsResponse:
    return OrderStatsResponse(**order_stats(days=days))
