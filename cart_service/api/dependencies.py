from typing import Annotated

from fastapi import Header, Request

from cart_service.config import settings
from cart_service.products.product_client import ProductClient


def get_user_id(x_user_id: Annotated[str | None, Header()] = None) -> str:
    """Identity of the caller.

    Token verification happens in front of this service; until it forwards a
    verified `X-User-Id`, requests without one act on the default user.
    """
    if x_user_id is not None and x_user_id.strip():
        return x_user_id.strip()
    return settings.default_user_id


def get_product_client(request: Request) -> ProductClient:
    return request.app.state.product_client
