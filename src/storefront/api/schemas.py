"""Pydantic request/response schemas for the Storefront API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

# --- Shared ---


class StatusResponse(BaseModel):
    status: str = "ok"


class SuccessResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    error: str | dict | list


# --- Product Schemas ---


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Single Malt",
                    "description": "12 year old Speyside single malt whisky.",
                    "price": 2500,
                    "category": "Whiskey",
                    "image_url": "https://cdn.example.com/products/single-malt.jpg",
                    "quantity": 5,
                    "featured": True,
                }
            ]
        }
    }

    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    category: str = Field(..., min_length=1, max_length=100)
    image_url: str = Field(..., min_length=1, max_length=1024)
    quantity: int = Field(0, ge=0)
    in_stock: bool | None = None
    featured: bool = False


class UpdateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "price": 2300,
                    "quantity": 12,
                    "featured": False,
                }
            ]
        }
    }

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    price: float | None = Field(None, ge=0)
    category: str | None = Field(None, min_length=1, max_length=100)
    image_url: str | None = Field(None, max_length=1024)
    featured: bool | None = None
    quantity: int | None = Field(None, ge=0)
    in_stock: bool | None = None


class SetStockRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"quantity": 0, "in_stock": False}]}}

    quantity: int = Field(..., ge=0)
    in_stock: bool | None = None


class ProductIdResponse(BaseModel):
    product_id: str


class CreatedProductResponse(BaseModel):
    success: bool = True
    product_id: str


class ProductResponse(BaseModel):
    product_id: str
    name: str
    description: str
    price: float
    category: str
    image_url: str
    quantity: int
    in_stock: bool
    featured: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_product(cls, product) -> ProductResponse:
        return cls(
            product_id=str(product.id),
            name=product.name,
            description=product.description,
            price=product.price,
            category=product.category,
            image_url=product.image_url,
            quantity=product.quantity or 0,
            in_stock=bool(product.in_stock),
            featured=bool(product.featured),
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class ProductPageResponse(BaseModel):
    products: list[ProductResponse]
    current_page: int
    total_pages: int
    total_products: int


class ProductSearchResponse(BaseModel):
    products: list[ProductResponse]


# --- Cart Schemas ---


class CreateCartRequest(BaseModel):
    cart_id: str | None = Field(None, max_length=64)


class CartIdResponse(BaseModel):
    cart_id: str


class AddCartItemRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [{"product_id": "b1946ac9-2f3e-4c8e-9a11-0d1f5f0e7a10", "quantity": 2}],
        }
    }

    product_id: str
    quantity: int = Field(1, ge=1)


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(..., ge=0)


class CartItemResponse(BaseModel):
    product_id: str
    name: str
    price: float
    quantity: int
    image_url: str | None = None
    line_total: float


class CartResponse(BaseModel):
    cart_id: str
    items: list[CartItemResponse]
    total: float
    item_count: int

    @classmethod
    def from_cart(cls, cart) -> CartResponse:
        return cls(
            cart_id=str(cart.id),
            items=[
                CartItemResponse(
                    product_id=str(item.product_id),
                    name=item.name,
                    price=item.price,
                    quantity=item.quantity,
                    image_url=item.image_url,
                    line_total=item.line_total,
                )
                for item in cart.items
            ],
            total=cart.total,
            item_count=cart.item_count,
        )


# --- Order Schemas ---


class ShippingAddressSchema(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str | None = Field(None, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=1, max_length=100)

    @classmethod
    def from_address(cls, address) -> ShippingAddressSchema | None:
        if address is None:
            return None
        return cls(
            name=address.name,
            address=address.address,
            city=address.city,
            state=address.state,
            postal_code=address.postal_code,
            country=address.country,
        )


class OrderLineSchema(BaseModel):
    product_id: str
    name: str = Field(..., max_length=255)
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    image_url: str | None = Field(None, max_length=1024)


class CheckoutRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": {
                        "name": "Wanjiku Kamau",
                        "address": "12 Moi Avenue",
                        "city": "Nairobi",
                        "postal_code": "00100",
                        "country": "Kenya",
                    }
                }
            ]
        }
    }

    shipping_address: ShippingAddressSchema
    billing_address: ShippingAddressSchema | None = None


class PlaceOrderRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [
                        {"product_id": "prod-001", "name": "Single Malt", "price": 1000, "quantity": 2},
                        {"product_id": "prod-002", "name": "Dry Gin", "price": 500, "quantity": 1},
                    ],
                    "total": 2500,
                    "shipping_address": {
                        "name": "Wanjiku Kamau",
                        "address": "12 Moi Avenue",
                        "city": "Nairobi",
                        "postal_code": "00100",
                        "country": "Kenya",
                    },
                }
            ]
        }
    }

    items: list[OrderLineSchema] = Field(..., min_length=1)
    total: float | None = Field(None, ge=0)
    shipping_address: ShippingAddressSchema
    billing_address: ShippingAddressSchema | None = None


class OrderIdResponse(BaseModel):
    order_id: str


class OrderItemResponse(BaseModel):
    product_id: str
    name: str
    price: float
    quantity: int
    image_url: str | None = None


class OrderResponse(BaseModel):
    order_id: str
    user_id: str | None = None
    items: list[OrderItemResponse]
    total: float
    shipping_address: ShippingAddressSchema
    billing_address: ShippingAddressSchema | None = None
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> OrderResponse:
        return cls(
            order_id=str(order.id),
            user_id=str(order.user_id) if order.user_id else None,
            items=[
                OrderItemResponse(
                    product_id=str(item.product_id),
                    name=item.name,
                    price=item.price,
                    quantity=item.quantity,
                    image_url=item.image_url,
                )
                for item in order.items
            ],
            total=order.total,
            shipping_address=ShippingAddressSchema.from_address(order.shipping_address),
            billing_address=ShippingAddressSchema.from_address(order.billing_address),
            status=order.status,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderPageResponse(BaseModel):
    orders: list[OrderResponse]
    current_page: int
    total_pages: int
    total_orders: int


class ChangeOrderStatusRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"status": "processing"}]}}

    status: str


# --- Reporting Schemas ---


class OrderSummary(BaseModel):
    order_id: str
    customer_name: str | None = None
    total: float
    status: str
    created_at: datetime | None = None


class MonthlySales(BaseModel):
    month: str
    orders: int
    revenue: float


class TopProduct(BaseModel):
    product_id: str
    name: str
    units_sold: int
    revenue: float


class DashboardResponse(BaseModel):
    total_orders: int
    total_products: int
    total_revenue: float
    total_customers: int
    recent_orders: list[OrderSummary]
    monthly_sales: list[MonthlySales]
    top_products: list[TopProduct]


class DailyOrders(BaseModel):
    date: str
    orders: int
    cancelled: int
    revenue: float


class OrderStatsResponse(BaseModel):
    by_status: dict[str, int]
    daily: list[DailyOrders]
