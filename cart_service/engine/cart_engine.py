"""Cart mutation and pricing rules.

Every function here is pure: it receives the caller's copy of a cart, never
touches it, and returns a fresh `CartMutation` holding the new state plus a
flag telling the caller whether the result has to be saved.

After every write the total is derived again from the item lines and rounded
to cents, so it cannot drift however many small operations a cart sees.
Item prices are snapshots taken when the product was first added and are
never rounded.
"""
from __future__ import annotations

import copy
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from cart_service.errors import (
    CartItemNotFoundError,
    CartNotFoundError,
    InvalidQuantityError,
    ProductNotFoundError,
)
from cart_service.products.product_models import NO_DISCOUNT, Product
from cart_service.store.cart_models import Cart, CartItem

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
# largest quantity an SQL INTEGER column holds
MAX_QUANTITY = 2**31 - 1


@dataclass(slots=True)
class CartMutation:
    cart: Cart
    changed: bool = True


def round_price(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def resolve_unit_price(product: Product) -> Decimal:
    """Discounted price when the product carries one, its standard price otherwise."""
    if product.temporary_price is not None and product.temporary_price != NO_DISCOUNT:
        return product.temporary_price
    return product.price


def new_cart(user_id: str) -> Cart:
    return Cart(user_id=user_id, items=[], full_price=ZERO)


def _settle(cart: Cart) -> None:
    total = sum((item.price * item.quantity for item in cart.items), ZERO)
    cart.full_price = round_price(total)


def _require_cart(cart: Cart | None) -> Cart:
    if cart is None:
        raise CartNotFoundError()
    return copy.deepcopy(cart)


def _require_product(product: Product | None) -> Product:
    if product is None:
        raise ProductNotFoundError()
    return product


def add_item(cart: Cart | None, product: Product | None, user_id: str) -> CartMutation:
    product = _require_product(product)
    cart = new_cart(user_id) if cart is None else copy.deepcopy(cart)

    existing = cart.find_item(product.id)
    if existing is not None:
        # priced with the stored snapshot, not the current catalog price
        existing.quantity += 1
        _settle(cart)
        return CartMutation(cart)

    unit_price = resolve_unit_price(product)
    cart.items.append(
        CartItem(
            product_id=product.id,
            name=product.name,
            price=unit_price,
            img_url=product.img_url,
            quantity=1,
        )
    )
    _settle(cart)
    return CartMutation(cart)


def validate_quantity(quantity: int) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidQuantityError()
    if not 0 < quantity <= MAX_QUANTITY:
        raise InvalidQuantityError()
    return quantity


def update_quantity(
    cart: Cart | None,
    product_id: str,
    product: Product | None,
    quantity: int,
) -> CartMutation:
    validate_quantity(quantity)
    cart = _require_cart(cart)
    _require_product(product)

    item = cart.find_item(product_id)
    if item is None:
        raise CartItemNotFoundError()
    if item.quantity == quantity:
        return CartMutation(cart, changed=False)

    item.quantity = quantity
    _settle(cart)
    return CartMutation(cart)


def remove_item(cart: Cart | None, product_id: str, product: Product | None) -> CartMutation:
    cart = _require_cart(cart)
    _require_product(product)

    item = cart.find_item(product_id)
    if item is None:
        raise CartItemNotFoundError()

    cart.items = [it for it in cart.items if it.product_id != product_id]
    _settle(cart)
    return CartMutation(cart)


def decrement_item(cart: Cart | None, product_id: str, product: Product | None) -> CartMutation:
    cart = _require_cart(cart)
    _require_product(product)

    item = cart.find_item(product_id)
    if item is None:
        raise CartItemNotFoundError()

    if item.quantity > 1:
        item.quantity -= 1
    else:
        cart.items = [it for it in cart.items if it.product_id != product_id]
    _settle(cart)
    return CartMutation(cart)


def clear_cart(cart: Cart | None) -> CartMutation:
    cart = _require_cart(cart)
    if not cart.items and cart.full_price == ZERO:
        return CartMutation(cart, changed=False)
    cart.items = []
    cart.full_price = ZERO
    return CartMutation(cart)
