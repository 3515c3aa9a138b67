"""Maps failures to the API's ``{"error": ...}`` response bodies.

Protean's handlers cover validation (400), missing objects (404) and
invalid state (409). On top of those: HTTP errors raised by the API itself,
request schema failures (400), optimistic-concurrency conflicts (409), and a
catch-all 500 that logs the detail and returns a generic message.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError
from protean.integrations.fastapi import register_exception_handlers
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = structlog.get_logger(__name__)


def _field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "header")]
        errors.setdefault(".".join(location) or "request", []).append(error.get("msg", "Invalid value"))
    return errors


def register_error_handlers(app: FastAPI) -> None:
    """Register every exception handler the storefront API relies on."""
    register_exception_handlers(app)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": _field_errors(exc)})

    @app.exception_handler(ExpectedVersionError)
    async def conflict_handler(request: Request, exc: ExpectedVersionError) -> JSONResponse:
        logger.warning("Concurrent update rejected", path=request.url.path, detail=str(exc))
        return JSONResponse(
            status_code=409,
            content={"error": "The resource was changed by another request; please retry"},
        )

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error", path=request.url.path, method=request.method, exc_info=exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})
