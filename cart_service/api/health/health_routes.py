import logging
from http import HTTPStatus

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from cart_service.errors import PersistenceError
from cart_service.store import cart_queries as store

logger = logging.getLogger(__name__)

health_router = APIRouter(tags=["health"])


@health_router.get(
    "/health",
    responses={
        HTTPStatus.OK: {
            "description": "Service is up and its store is reachable",
        },
        HTTPStatus.INTERNAL_SERVER_ERROR: {
            "description": "Store is unreachable",
        },
    },
)
async def health() -> JSONResponse:
    try:
        store.ping()
    except PersistenceError:
        logger.error("Health check failed: store unreachable")
        return JSONResponse({"status": "unavailable"}, status_code=HTTPStatus.INTERNAL_SERVER_ERROR)
    return JSONResponse({"status": "ok"})
