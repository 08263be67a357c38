from __future__ import annotations

import os
from decimal import Decimal
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

if "DATABASE_URL" not in os.environ:
	os.environ["DATABASE_URL"] = "sqlite+pysqlite:///./test_cart_service.db"
os.environ.setdefault("PRODUCT_SERVICE_URL", "http://products.test")

from cart_service import main as app_module  # noqa: E402
from cart_service.api.dependencies import get_product_client  # noqa: E402
from cart_service.products.product_models import Product, ProductLookup  # noqa: E402
from cart_service.store.cart_orm import Base, engine  # noqa: E402


class FakeProductClient:
	def __init__(self) -> None:
		self.catalog: dict[str, Product] = {}
		self.unavailable: set[str] = set()
		self.calls: list[str] = []

	def add(
		self,
		product_id: str,
		price: str,
		name: str | None = None,
		temporary_price: str | None = None,
	) -> Product:
		product = Product(
			id=product_id,
			name=name or f"product-{product_id}",
			price=Decimal(price),
			img_url=f"http://img.test/{product_id}.png",
			temporary_price=Decimal(temporary_price) if temporary_price is not None else None,
		)
		self.catalog[product_id] = product
		return product

	async def get_product(self, product_id: str) -> ProductLookup:
		self.calls.append(product_id)
		if product_id in self.unavailable:
			return ProductLookup.unavailable("timeout")
		product = self.catalog.get(product_id)
		if product is None:
			return ProductLookup.not_found()
		return ProductLookup.of(product)


@pytest.fixture(autouse=True)
def _clean_db() -> Iterator[None]:
	Base.metadata.drop_all(bind=engine)
	Base.metadata.create_all(bind=engine)
	yield


@pytest.fixture()
def products() -> FakeProductClient:
	return FakeProductClient()


@pytest.fixture()
def client(products: FakeProductClient) -> Iterator[TestClient]:
	app_module.app.dependency_overrides[get_product_client] = lambda: products
	try:
		with TestClient(app_module.app) as c:
			yield c
	finally:
		app_module.app.dependency_overrides.clear()
