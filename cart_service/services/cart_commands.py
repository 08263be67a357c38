"""Read-modify-write sequences around the cart engine.

Nothing holds a lock between loading a cart and saving it. Instead each save
is checked against the version that was loaded, and when another request won
the race the whole sequence runs again from a fresh read. Product lookups are
repeated along with it but a failed lookup is never retried on its own.

Store calls are synchronous and run on the event loop like the routes that
call them; a deployment under load should scale with uvicorn workers.
"""
from __future__ import annotations

import logging
from typing import Awaitable, Callable, Protocol

from cart_service.config import settings
from cart_service.engine import cart_engine as engine
from cart_service.errors import CartConflictError, CartNotFoundError, ProductNotFoundError
from cart_service.products.product_models import Product, ProductLookup
from cart_service.store import cart_queries as store
from cart_service.store.cart_models import Cart

logger = logging.getLogger(__name__)


class ProductLookupClient(Protocol):
    async def get_product(self, product_id: str) -> ProductLookup: ...


async def _lookup(products: ProductLookupClient, product_id: str) -> Product | None:
    result = await products.get_product(product_id)
    return result.product if result.found else None


async def _with_retries(user_id: str, attempt_once: Callable[[], Awaitable[Cart]]) -> Cart:
    attempts = settings.save_retries
    for attempt in range(1, attempts):
        try:
            return await attempt_once()
        except CartConflictError:
            logger.warning(
                "Concurrent update of cart for user %s (attempt %d/%d)", user_id, attempt, attempts
            )
    # last attempt, a conflict here reaches the caller
    return await attempt_once()


def _commit(mutation: engine.CartMutation) -> Cart:
    if not mutation.changed:
        return mutation.cart
    return store.save(mutation.cart)


def get_cart(user_id: str) -> Cart:
    cart = store.find_by_user(user_id)
    if cart is None:
        raise CartNotFoundError()
    return cart


async def add_item(user_id: str, product_id: str, products: ProductLookupClient) -> Cart:
    async def attempt() -> Cart:
        product = await _lookup(products, product_id)
        if product is None:
            raise ProductNotFoundError()
        cart = store.find_by_user(user_id) or store.create(user_id)
        return _commit(engine.add_item(cart, product, user_id))

    return await _with_retries(user_id, attempt)


async def update_quantity(
    user_id: str,
    product_id: str,
    quantity: int,
    products: ProductLookupClient,
) -> Cart:
    engine.validate_quantity(quantity)

    async def attempt() -> Cart:
        cart = get_cart(user_id)
        product = await _lookup(products, product_id)
        return _commit(engine.update_quantity(cart, product_id, product, quantity))

    return await _with_retries(user_id, attempt)


async def remove_item(user_id: str, product_id: str, products: ProductLookupClient) -> Cart:
    async def attempt() -> Cart:
        cart = get_cart(user_id)
        product = await _lookup(products, product_id)
        return _commit(engine.remove_item(cart, product_id, product))

    return await _with_retries(user_id, attempt)


async def decrement_item(user_id: str, product_id: str, products: ProductLookupClient) -> Cart:
    async def attempt() -> Cart:
        cart = get_cart(user_id)
        product = await _lookup(products, product_id)
        return _commit(engine.decrement_item(cart, product_id, product))

    return await _with_retries(user_id, attempt)


async def clear_cart(user_id: str) -> Cart:
    async def attempt() -> Cart:
        return _commit(engine.clear_cart(store.find_by_user(user_id)))

    return await _with_retries(user_id, attempt)


def delete_cart(user_id: str) -> None:
    if not store.delete_by_user(user_id):
        raise CartNotFoundError()
