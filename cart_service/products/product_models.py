from __future__ import annotations

import enum
from dataclasses import dataclass
from decimal import Decimal

# temporaryPrice value the product service uses for "no discount"
NO_DISCOUNT = Decimal("-1")


@dataclass(slots=True)
class Product:
    id: str
    name: str
    price: Decimal
    img_url: str = ""
    temporary_price: Decimal | None = None


class LookupStatus(enum.Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"


@dataclass(slots=True)
class ProductLookup:
    status: LookupStatus
    product: Product | None = None
    reason: str = ""

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.FOUND

    @staticmethod
    def of(product: Product) -> ProductLookup:
        return ProductLookup(status=LookupStatus.FOUND, product=product)

    @staticmethod
    def not_found(reason: str = "") -> ProductLookup:
        return ProductLookup(status=LookupStatus.NOT_FOUND, reason=reason)

    @staticmethod
    def unavailable(reason: str) -> ProductLookup:
        return ProductLookup(status=LookupStatus.UNAVAILABLE, reason=reason)
