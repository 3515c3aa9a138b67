"""Storefront FastAPI application.

Processes commands synchronously per request; projections and the restock
handler run in-process as soon as each unit of work commits.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# Initialized at module level so uvicorn workers share it.
# PROTEAN_ENV picks the config overlay:
#   - "test"       → in-memory everything
#   - "production" → PostgreSQL for the durable stores, carts stay in memory
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import DomainContextMiddleware

from storefront.domain import storefront
from storefront.utils.logging import add_context, clear_context

storefront.init()

# ---------------------------------------------------------------------------
# Route-to-domain mapping
# ---------------------------------------------------------------------------
ROUTE_DOMAIN_MAP = {
    "/products": storefront,
    "/cart": storefront,
    "/orders": storefront,
    "/admin": storefront,
}

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Storefront API",
    description="Catalog, cart, orders and back-office",
)

app.add_middleware(DomainContextMiddleware, route_domain_map=ROUTE_DOMAIN_MAP)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_log_context(request: Request, call_next):
    """Bind the caller and path to every log line emitted while serving the request."""
    clear_context()
    add_context(path=request.url.path, method=request.method, user_id=request.headers.get("x-user-id") or None)
    try:
        return await call_next(request)
    finally:
        clear_context()


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from storefront.api import ROUTERS, register_error_handlers  # noqa: E402

for router in ROUTERS:
    app.include_router(router)

register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": storefront.name})
