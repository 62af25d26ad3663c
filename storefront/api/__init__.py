# storefront/api/__init__.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.api.routers import carts, health, orders, quotations
from storefront.domain.errors import CommerceError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _fail(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "fail" if status_code < 500 else "error", "message": message, **extra},
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(CommerceError)
    async def commerce_error_handler(request: Request, exc: CommerceError):
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.message}")
        return _fail(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _fail(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        return _fail(400, "Validation failed", errors=errors)

    @app.exception_handler(PoolTimeoutError)
    async def pool_timeout_handler(request: Request, exc: PoolTimeoutError):
        # pula wyczerpana - klient moze ponowic
        logger.warning(f"{request.method} {request.url.path}: connection pool exhausted")
        return _fail(503, "Service temporarily unavailable")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
        return _fail(500, "Internal server error")


def create_app(**kwargs) -> FastAPI:
    app = FastAPI(title="Storefront Service", version="1.0.0", **kwargs)

    app.include_router(health.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(quotations.router)

    register_exception_handlers(app)
    return app
