from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from cart_service.store.cart_models import Cart, CartItem


class CartItemResponse(BaseModel):
    product_id: str
    name: str
    price: float
    img_url: str
    quantity: int

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @staticmethod
    def from_cart_item(item: CartItem) -> CartItemResponse:
        return CartItemResponse(
            product_id=item.product_id,
            name=item.name,
            price=float(item.price),
            img_url=item.img_url,
            quantity=item.quantity,
        )


class CartResponse(BaseModel):
    user_id: str
    items: List[CartItemResponse]
    full_price: float

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @staticmethod
    def from_cart(cart: Cart) -> CartResponse:
        return CartResponse(
            user_id=cart.user_id,
            items=[CartItemResponse.from_cart_item(item) for item in cart.items],
            full_price=float(cart.full_price),
        )

    @staticmethod
    def empty(user_id: str) -> CartResponse:
        return CartResponse(user_id=user_id, items=[], full_price=0.0)


class UpdateQuantityRequest(BaseModel):
    quantity: int

    model_config = ConfigDict(extra="forbid")


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    error: str
