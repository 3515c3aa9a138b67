import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean import current_domain
from protean.integrations.fastapi import DomainContextMiddleware
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


@pytest.fixture()
def client(storefront_bed):
    from storefront.api import ROUTERS, register_error_handlers

    app = FastAPI()
    app.add_middleware(
        DomainContextMiddleware,
        route_domain_map={prefix: storefront_bed.domain for prefix in ("/products", "/cart", "/orders", "/admin")},
    )
    for router in ROUTERS:
        app.include_router(router)
    register_error_handlers(app)
    return TestClient(app)


@pytest.fixture()
def shipping_address():
    return {
        "name": "Wanjiku Kamau",
        "address": "12 Moi Avenue",
        "city": "Nairobi",
        "postal_code": "00100",
        "country": "Kenya",
    }


@pytest.fixture()
def add_product():
    """Factory: add a product through the command pipeline and return it."""
    from storefront.product.creation import AddProduct
    from storefront.product.product import Product

    def _add(**overrides):
        fields = {
            "name": "Single Malt",
            "description": "12 year old Speyside single malt whisky",
            "price": 1000.0,
            "category": "Whiskey",
            "image_url": "https://cdn.example.com/products/single-malt.jpg",
            "quantity": 5,
        }
        fields.update(overrides)
        product_id = current_domain.process(AddProduct(**fields), asynchronous=False)
        return current_domain.repository_for(Product).get(product_id)

    return _add


@pytest.fixture()
def new_cart():
    """Factory: create an empty cart and return its id."""
    from storefront.cart.management import CreateCart

    def _create(cart_id=None):
        return current_domain.process(CreateCart(cart_id=cart_id), asynchronous=False)

    return _create
