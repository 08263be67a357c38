import logging
from contextlib import asynccontextmanager
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cart_service.api.cart.cart_routes import cart_router, carts_router
from cart_service.api.health.health_routes import health_router
from cart_service.config import settings
from cart_service.errors import CartServiceError
from cart_service.products.product_client import ProductClient
from cart_service.store.cart_orm import init_db

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    app.state.product_client = ProductClient(
        settings.product_service_url,
        timeout=settings.product_service_timeout,
    )
    logger.info("Cart service ready, product service at %s", settings.product_service_url)
    try:
        yield
    finally:
        await app.state.product_client.aclose()


app = FastAPI(title="Cart API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CartServiceError)
async def cart_service_error_handler(request: Request, exc: CartServiceError) -> JSONResponse:
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        {"error": "Internal Server Error"},
        status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
    )


app.include_router(cart_router)
app.include_router(carts_router)
app.include_router(health_router)


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting cart service on port %d", settings.port)
    uvicorn.run("cart_service.main:app", host=settings.host, port=settings.port)
