from http import HTTPStatus
from typing import Annotated

from fastapi import APIRouter, Depends

from cart_service.api.dependencies import get_product_client, get_user_id
from cart_service.errors import CartNotFoundError
from cart_service.products.product_client import ProductClient
from cart_service.services import cart_commands as commands

from .cart_contracts import (
    CartResponse,
    ErrorResponse,
    MessageResponse,
    UpdateQuantityRequest,
)

UserId = Annotated[str, Depends(get_user_id)]
Products = Annotated[ProductClient, Depends(get_product_client)]

ERROR_BODY = {"model": ErrorResponse}
SERVER_ERROR = {"model": ErrorResponse, "description": "Store or product service failure"}

cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get(
    "",
    responses={
        HTTPStatus.OK: {
            "description": "Cart of the caller, empty when nothing was added yet",
        },
        HTTPStatus.INTERNAL_SERVER_ERROR: SERVER_ERROR,
    },
)
async def get_cart(user_id: UserId) -> CartResponse:
    try:
        cart = commands.get_cart(user_id)
    except CartNotFoundError:
        return CartResponse.empty(user_id)
    return CartResponse.from_cart(cart)


@cart_router.post(
    "/add/{product_id}",
    responses={
        HTTPStatus.OK: {
            "description": "Product added, or its quantity increased by one",
        },
        HTTPStatus.NOT_FOUND: {**ERROR_BODY, "description": "Product not found"},
        HTTPStatus.INTERNAL_SERVER_ERROR: SERVER_ERROR,
    },
)
async def add_item(product_id: str, user_id: UserId, products: Products) -> CartResponse:
    cart = await commands.add_item(user_id, product_id, products)
    return CartResponse.from_cart(cart)


@cart_router.put(
    "/update/{product_id}",
    responses={
        HTTPStatus.OK: {
            "description": "Quantity of the product set",
        },
        HTTPStatus.BAD_REQUEST: {**ERROR_BODY, "description": "Quantity is not a positive integer"},
        HTTPStatus.NOT_FOUND: {**ERROR_BODY, "description": "Cart, product or cart item not found"},
        HTTPStatus.INTERNAL_SERVER_ERROR: SERVER_ERROR,
    },
)
async def update_quantity(
    product_id: str,
    info: UpdateQuantityRequest,
    user_id: UserId,
    products: Products,
) -> CartResponse:
    cart = await commands.update_quantity(user_id, product_id, info.quantity, products)
    return CartResponse.from_cart(cart)


@cart_router.delete(
    "/delete/{product_id}",
    responses={
        HTTPStatus.OK: {
            "description": "Product removed from the cart whatever its quantity",
        },
        HTTPStatus.NOT_FOUND: {**ERROR_BODY, "description": "Cart, product or cart item not found"},
        HTTPStatus.INTERNAL_SERVER_ERROR: SERVER_ERROR,
    },
)
async def remove_item(product_id: str, user_id: UserId, products: Products) -> CartResponse:
    cart = await commands.remove_item(user_id, product_id, products)
    return CartResponse.from_cart(cart)


@cart_router.delete(
    "/remove/{product_id}",
    responses={
        HTTPStatus.OK: {
            "description": "Quantity decreased by one, item dropped when it reaches zero",
        },
        HTTPStatus.NOT_FOUND: {**ERROR_BODY, "description": "Cart, product or cart item not found"},
        HTTPStatus.INTERNAL_SERVER_ERROR: SERVER_ERROR,
    },
)
async def decrement_item(product_id: str, user_id: UserId, products: Products) -> CartResponse:
    cart = await commands.decrement_item(user_id, product_id, products)
    return CartResponse.from_cart(cart)


@cart_router.delete(
    "/clear",
    responses={
        HTTPStatus.OK: {
            "description": "All items removed, the cart itself is kept",
        },
        HTTPStatus.NOT_FOUND: {**ERROR_BODY, "description": "Cart not found"},
        HTTPStatus.INTERNAL_SERVER_ERROR: SERVER_ERROR,
    },
)
async def clear_cart(user_id: UserId) -> CartResponse:
    cart = await commands.clear_cart(user_id)
    return CartResponse.from_cart(cart)


@cart_router.delete(
    "/delete",
    responses={
        HTTPStatus.OK: {
            "description": "Cart deleted",
        },
        HTTPStatus.NOT_FOUND: {**ERROR_BODY, "description": "Cart not found"},
        HTTPStatus.INTERNAL_SERVER_ERROR: SERVER_ERROR,
    },
)
async def delete_cart(user_id: UserId) -> MessageResponse:
    commands.delete_cart(user_id)
    return MessageResponse(message="Cart deleted")


# same operations addressed by user id, for callers acting on another user's cart
carts_router = APIRouter(prefix="/carts", tags=["carts"])


@carts_router.get(
    "/{user_id}",
    responses={
        HTTPStatus.OK: {
            "description": "Successfully returned requested cart",
        },
        HTTPStatus.NOT_FOUND: {**ERROR_BODY, "description": "Cart not found"},
    },
)
async def get_cart_by_user(user_id: str) -> CartResponse:
    return CartResponse.from_cart(commands.get_cart(user_id))


@carts_router.put(
    "/{user_id}/products/{product_id}",
    responses={
        HTTPStatus.OK: {
            "description": "Quantity of the product set",
        },
        HTTPStatus.BAD_REQUEST: {**ERROR_BODY, "description": "Quantity is not a positive integer"},
        HTTPStatus.NOT_FOUND: {**ERROR_BODY, "description": "Cart, product or cart item not found"},
    },
)
async def update_quantity_by_user(
    user_id: str,
    product_id: str,
    info: UpdateQuantityRequest,
    products: Products,
) -> CartResponse:
    cart = await commands.update_quantity(user_id, product_id, info.quantity, products)
    return CartResponse.from_cart(cart)


@carts_router.put(
    "/{user_id}/clear",
    responses={
        HTTPStatus.OK: {
            "description": "All items removed, the cart itself is kept",
        },
        HTTPStatus.NOT_FOUND: {**ERROR_BODY, "description": "Cart not found"},
    },
)
async def clear_cart_by_user(user_id: str) -> CartResponse:
    return CartResponse.from_cart(await commands.clear_cart(user_id))


@carts_router.delete(
    "/{user_id}",
    responses={
        HTTPStatus.OK: {
            "description": "Cart deleted",
        },
        HTTPStatus.NOT_FOUND: {**ERROR_BODY, "description": "Cart not found"},
    },
)
async def delete_cart_by_user(user_id: str) -> MessageResponse:
    commands.delete_cart(user_id)
    return MessageResponse(message="Cart deleted")
