from dataclasses import dataclass, field
from decimal import Decimal
from typing import List


@dataclass(slots=True)
class CartItem:
    product_id: str
    name: str
    price: Decimal
    img_url: str
    quantity: int = 1


@dataclass(slots=True)
class Cart:
    user_id: str
    items: List[CartItem] = field(default_factory=list)
    full_price: Decimal = Decimal("0.00")
    # optimistic concurrency token, bumped by every successful save
    version: int = 0

    def find_item(self, product_id: str) -> CartItem | None:
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None
