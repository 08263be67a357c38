from __future__ import annotations

import logging
from decimal import Decimal

import httpx
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from cart_service.products.product_models import NO_DISCOUNT, Product, ProductLookup

logger = logging.getLogger(__name__)


class ProductPayload(BaseModel):
    """Body of `GET /products/{id}` as served by the product service."""

    id: str = Field(validation_alias="_id")
    name: str
    price: Decimal | None = None
    original_price: Decimal | None = Field(default=None, validation_alias="originalPrice")
    temporary_price: Decimal | None = Field(default=None, validation_alias="temporaryPrice")
    img_url: str | None = Field(default=None, validation_alias="imgUrl")

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    @model_validator(mode="before")
    @classmethod
    def accept_plain_id(cls, data):
        if isinstance(data, dict) and "_id" not in data and "id" in data:
            data = {**data, "_id": data["id"]}
        return data

    @field_validator("price", "original_price", "temporary_price", mode="before")
    @classmethod
    def float_via_str(cls, value):
        # 9.99 must become Decimal("9.99"), not its binary expansion
        if isinstance(value, float):
            return str(value)
        return value

    @model_validator(mode="after")
    def check_prices(self) -> ProductPayload:
        if self.price is None and self.original_price is None:
            raise ValueError("product carries neither price nor originalPrice")
        for value in (self.price, self.original_price):
            if value is not None and value < 0:
                raise ValueError("negative product price")
        if (
            self.temporary_price is not None
            and self.temporary_price < 0
            and self.temporary_price != NO_DISCOUNT
        ):
            raise ValueError("negative temporaryPrice")
        return self

    def as_product(self) -> Product:
        return Product(
            id=self.id,
            name=self.name,
            price=self.price if self.price is not None else self.original_price,
            img_url=self.img_url or "",
            temporary_price=self.temporary_price,
        )


class ProductClient:
    """Looks products up in the product service.

    Failures are never retried: one request per lookup, bounded by `timeout`.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
        )

    async def get_product(self, product_id: str) -> ProductLookup:
        try:
            response = await self._client.get(f"/products/{product_id}")
        except httpx.TimeoutException:
            logger.warning("Product service timed out for product %s", product_id)
            return ProductLookup.unavailable("timeout")
        except httpx.HTTPError as exc:
            logger.warning("Product service unreachable for product %s: %s", product_id, exc)
            return ProductLookup.unavailable(type(exc).__name__)

        if response.status_code == httpx.codes.NOT_FOUND:
            logger.warning("Product %s not found", product_id)
            return ProductLookup.not_found()
        if response.is_error:
            logger.warning(
                "Product service answered %d for product %s", response.status_code, product_id
            )
            return ProductLookup.unavailable(f"status {response.status_code}")

        try:
            payload = ProductPayload.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.warning("Invalid product payload for product %s: %s", product_id, exc)
            return ProductLookup.unavailable("invalid payload")

        return ProductLookup.of(payload.as_product())

    async def aclose(self) -> None:
        await self._client.aclose()
