"""FastAPI endpoints for shoppers: catalog, cart and orders.

Thin adapters that translate HTTP requests into domain commands and
repository reads. No business logic lives here.
"""

import json

from fastapi import APIRouter, Depends, HTTPException, Query
from protean.utils.globals import current_domain

from storefront.api.auth import current_user_id, require_admin
from storefront.api.schemas import (
    AddCartItemRequest,
    CartIdResponse,
    CartResponse,
    CheckoutRequest,
    CreateCartRequest,
    CreateProductRequest,
    ErrorResponse,
    OrderIdResponse,
    OrderPageResponse,
    OrderResponse,
    PlaceOrderRequest,
    ProductIdResponse,
    ProductPageResponse,
    ProductResponse,
    ProductSearchResponse,
    StatusResponse,
    UpdateCartItemRequest,
)
from storefront.cart.cart import Cart
from storefront.cart.checkout import CheckoutCart
from storefront.cart.items import AddCartItem, RemoveCartItem, UpdateCartItem
from storefront.cart.management import ClearCart, CreateCart, DiscardCart
from storefront.order.order import Order
from storefront.order.placement import PlaceOrder
from storefront.product.creation import AddProduct
from storefront.product.product import Product

_ERRORS = {400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}

product_router = APIRouter(prefix="/products", tags=["products"], responses=_ERRORS)
cart_router = APIRouter(prefix="/cart", tags=["cart"], responses=_ERRORS)
order_router = APIRouter(
    prefix="/orders",
    tags=["orders"],
    responses={**_ERRORS, 401: {"model": ErrorResponse}},
)


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
@product_router.get("", response_model=ProductPageResponse)
async def list_products(
    page: int = 1,
    limit: int = 10,
    category: str | None = None,
    featured: bool | None = None,
) -> ProductPageResponse:
    """Paginated catalog, newest first."""
    results = current_domain.repository_for(Product).list_page(
        category=category, featured=featured, page=page, page_size=limit
    )
    return ProductPageResponse(
        products=[ProductResponse.from_product(p) for p in results.items],
        current_page=page,
        total_pages=results.total_pages,
        total_products=results.total,
    )


@product_router.get("/search", response_model=ProductSearchResponse)
async def search_products(q: str = "") -> ProductSearchResponse:
    """Case-insensitive substring search over name, description and category."""
    products = current_domain.repository_for(Product).search(q)
    return ProductSearchResponse(products=[ProductResponse.from_product(p) for p in products])


@product_router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str) -> ProductResponse:
    product = current_domain.repository_for(Product).get(product_id)
    return ProductResponse.from_product(product)


@product_router.post(
    "",
    status_code=201,
    response_model=ProductIdResponse,
    dependencies=[Depends(require_admin)],
)
async def create_product(body: CreateProductRequest) -> ProductIdResponse:
    command = AddProduct(**body.model_dump(exclude_none=True))
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
def _cart_response(cart_id: str) -> CartResponse:
    return CartResponse.from_cart(current_domain.repository_for(Cart).get(cart_id))


@cart_router.post("", status_code=201, response_model=CartIdResponse)
async def create_cart(body: CreateCartRequest | None = None) -> CartIdResponse:
    command = CreateCart(cart_id=body.cart_id if body else None)
    result = current_domain.process(command, asynchronous=False)
    return CartIdResponse(cart_id=result)


@cart_router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(cart_id: str) -> CartResponse:
    return _cart_response(cart_id)


@cart_router.post("/{cart_id}/items", response_model=CartResponse)
async def add_cart_item(cart_id: str, body: AddCartItemRequest) -> CartResponse:
    command = AddCartItem(cart_id=cart_id, product_id=body.product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _cart_response(cart_id)


@cart_router.patch("/{cart_id}/items/{product_id}", response_model=CartResponse)
async def update_cart_item(cart_id: str, product_id: str, body: UpdateCartItemRequest) -> CartResponse:
    command = UpdateCartItem(cart_id=cart_id, product_id=product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _cart_response(cart_id)


@cart_router.delete("/{cart_id}/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(cart_id: str, product_id: str) -> CartResponse:
    current_domain.process(RemoveCartItem(cart_id=cart_id, product_id=product_id), asynchronous=False)
    return _cart_response(cart_id)


@cart_router.delete("/{cart_id}/items", response_model=CartResponse)
async def clear_cart(cart_id: str) -> CartResponse:
    current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)
    return _cart_response(cart_id)


@cart_router.delete("/{cart_id}", response_model=StatusResponse)
async def discard_cart(cart_id: str) -> StatusResponse:
    current_domain.process(DiscardCart(cart_id=cart_id), asynchronous=False)
    return StatusResponse()


@cart_router.post("/{cart_id}/checkout", status_code=201, response_model=OrderIdResponse)
async def checkout_cart(
    cart_id: str,
    body: CheckoutRequest,
    user_id: str = Depends(current_user_id),
) -> OrderIdResponse:
    command = CheckoutCart(
        cart_id=cart_id,
        user_id=user_id,
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        billing_address=json.dumps(body.billing_address.model_dump()) if body.billing_address else None,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
@order_router.get("", response_model=OrderResponse | OrderPageResponse)
async def list_orders(
    order_id: str | None = Query(None, alias="orderId"),
    page: int = 1,
    limit: int = 10,
    user_id: str = Depends(current_user_id),
) -> OrderResponse | OrderPageResponse:
    """The caller's orders, newest first, or a single one of them with ``?orderId=``."""
    repo = current_domain.repository_for(Order)

    if order_id:
        order = repo.get_or_none(order_id)
        # Someone else's order is reported as missing so ids do not leak
        if order is None or str(order.user_id) != user_id:
            raise HTTPException(status_code=404, detail="Order not found")
        return OrderResponse.from_order(order)

    results = repo.list_page(user_id=user_id, page=page, page_size=limit)
    return OrderPageResponse(
        orders=[OrderResponse.from_order(o) for o in results.items],
        current_page=page,
        total_pages=results.total_pages,
        total_orders=results.total,
    )


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: PlaceOrderRequest, user_id: str = Depends(current_user_id)) -> OrderIdResponse:
    command = PlaceOrder(
        user_id=user_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        billing_address=json.dumps(body.billing_address.model_dump()) if body.billing_address else None,
        total=body.total,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)
