from __future__ import annotations

from http import HTTPStatus
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError

from cart_service.store import cart_queries
from conftest import FakeProductClient


def add(client: TestClient, product_id: str, **kwargs: Any) -> dict[str, Any]:
	resp = client.post(f"/cart/add/{product_id}", **kwargs)
	assert resp.status_code == HTTPStatus.OK
	return resp.json()


def lines(cart: dict[str, Any]) -> list[tuple[str, int]]:
	return [(i["productId"], i["quantity"]) for i in cart["items"]]


def test_get_cart_without_cart_is_empty(client: TestClient) -> None:
	r = client.get("/cart")
	assert r.status_code == HTTPStatus.OK
	assert r.json() == {"userId": "1", "items": [], "fullPrice": 0.0}


def test_add_add_decrement_decrement(client: TestClient, products: FakeProductClient) -> None:
	products.add("A", "9.99", name="Apple")

	data = add(client, "A")
	assert data["userId"] == "1"
	assert data["items"] == [
		{
			"productId": "A",
			"name": "Apple",
			"price": 9.99,
			"imgUrl": "http://img.test/A.png",
			"quantity": 1,
		}
	]
	assert data["fullPrice"] == pytest.approx(9.99)

	data = add(client, "A")
	assert lines(data) == [("A", 2)]
	assert data["fullPrice"] == pytest.approx(19.98)

	r = client.delete("/cart/remove/A")
	assert r.status_code == HTTPStatus.OK
	assert lines(r.json()) == [("A", 1)]
	assert r.json()["fullPrice"] == pytest.approx(9.99)

	r = client.delete("/cart/remove/A")
	assert r.status_code == HTTPStatus.OK
	assert r.json()["items"] == []
	assert r.json()["fullPrice"] == 0.0

	assert client.get("/cart").json() == {"userId": "1", "items": [], "fullPrice": 0.0}


def test_add_unknown_product(client: TestClient, products: FakeProductClient) -> None:
	r = client.post("/cart/add/missing")
	assert r.status_code == HTTPStatus.NOT_FOUND
	assert r.json() == {"error": "Product not found"}

	# a failed add does not leave an empty cart behind
	assert client.get("/carts/1").status_code == HTTPStatus.NOT_FOUND


def test_add_when_product_service_unavailable(client: TestClient, products: FakeProductClient) -> None:
	products.add("A", "1.00")
	add(client, "A")
	products.unavailable.add("A")

	r = client.post("/cart/add/A")
	assert r.status_code == HTTPStatus.NOT_FOUND
	assert r.json() == {"error": "Product not found"}
	assert lines(client.get("/cart").json()) == [("A", 1)]
	assert products.calls == ["A", "A"]


def test_add_uses_discounted_price(client: TestClient, products: FakeProductClient) -> None:
	products.add("A", "20.00", temporary_price="15.00")
	products.add("B", "8.00", temporary_price="-1")

	add(client, "A")
	data = add(client, "B")

	prices = {i["productId"]: i["price"] for i in data["items"]}
	assert prices == {"A": 15.0, "B": 8.0}
	assert data["fullPrice"] == pytest.approx(23.0)


def test_update_quantity(client: TestClient, products: FakeProductClient) -> None:
	products.add("A", "1.25")
	products.add("B", "3.00")
	add(client, "A")
	add(client, "B")

	r = client.put("/cart/update/A", json={"quantity": 4})
	assert r.status_code == HTTPStatus.OK
	assert lines(r.json()) == [("A", 4), ("B", 1)]
	assert r.json()["fullPrice"] == pytest.approx(8.0)


@pytest.mark.parametrize("quantity", [0, -1, 2**31, 10**19])
def test_update_with_invalid_quantity(client: TestClient, products: FakeProductClient, quantity: int) -> None:
	products.add("A", "2.00")
	add(client, "A")

	r = client.put("/cart/update/A", json={"quantity": quantity})
	assert r.status_code == HTTPStatus.BAD_REQUEST
	assert r.json() == {"error": "Quantity must be a positive integer"}

	data = client.get("/cart").json()
	assert lines(data) == [("A", 1)]
	assert data["fullPrice"] == pytest.approx(2.0)


def test_update_malformed_body(client: TestClient, products: FakeProductClient) -> None:
	products.add("A", "2.00")
	add(client, "A")

	assert client.put("/cart/update/A", json={"quantity": "many"}).status_code == HTTPStatus.UNPROCESSABLE_ENTITY
	assert client.put("/cart/update/A", json={}).status_code == HTTPStatus.UNPROCESSABLE_ENTITY
	r = client.put("/cart/update/A", json={"quantity": 2, "extra": "forbidden"})
	assert r.status_code == HTTPStatus.UNPROCESSABLE_ENTITY


def test_update_not_found_cases(client: TestClient, products: FakeProductClient) -> None:
	products.add("A", "2.00")
	products.add("B", "3.00")

	r = client.put("/cart/update/A", json={"quantity": 2})
	assert r.status_code == HTTPStatus.NOT_FOUND
	assert r.json() == {"error": "Cart not found"}

	add(client, "A")

	r = client.put("/cart/update/B", json={"quantity": 2})
	assert r.status_code == HTTPStatus.NOT_FOUND
	assert r.json() == {"error": "Product not found in the cart"}

	r = client.put("/cart/update/ghost", json={"quantity": 2})
	assert r.status_code == HTTPStatus.NOT_FOUND
	assert r.json() == {"error": "Product not found"}

	data = client.get("/cart").json()
	assert lines(data) == [("A", 1)]
	assert data["fullPrice"] == pytest.approx(2.0)


def test_delete_item_removes_every_unit(client: TestClient, products: FakeProductClient) -> None:
	products.add("A", "2.50")
	products.add("B", "1.00")
	add(client, "A")
	add(client, "A")
	add(client, "B")

	r = client.delete("/cart/delete/A")
	assert r.status_code == HTTPStatus.OK
	assert lines(r.json()) == [("B", 1)]
	assert r.json()["fullPrice"] == pytest.approx(1.0)

	r = client.delete("/cart/delete/A")
	assert r.status_code == HTTPStatus.NOT_FOUND
	assert r.json() == {"error": "Product not found in the cart"}


def test_item_routes_without_cart(client: TestClient, products: FakeProductClient) -> None:
	products.add("A", "2.50")
	for path in ("/cart/delete/A", "/cart/remove/A", "/cart/clear"):
		r = client.delete(path)
		assert r.status_code == HTTPStatus.NOT_FOUND
		assert r.json() == {"error": "Cart not found"}


def test_clear_twice(client: TestClient, products: FakeProductClient) -> None:
	products.add("A", "4.20")
	add(client, "A")
	add(client, "A")

	for _ in range(2):
		r = client.delete("/cart/clear")
		assert r.status_code == HTTPStatus.OK
		assert r.json()["items"] == []
		assert r.json()["fullPrice"] == 0.0

	data = add(client, "A")
	assert lines(data) == [("A", 1)]


def test_delete_cart(client: TestClient, products: FakeProductClient) -> None:
	products.add("A", "1.00")
	add(client, "A")

	r = client.delete("/cart/delete")
	assert r.status_code == HTTPStatus.OK
	assert r.json() == {"message": "Cart deleted"}

	r = client.delete("/cart/delete")
	assert r.status_code == HTTPStatus.NOT_FOUND
	assert r.json() == {"error": "Cart not found"}

	assert client.get("/cart").json()["items"] == []


def test_user_header_selects_cart(client: TestClient, products: FakeProductClient) -> None:
	products.add("A", "1.00")
	products.add("B", "2.00")

	add(client, "A", headers={"X-User-Id": "alice"})
	add(client, "B", headers={"X-User-Id": "bob"})
	add(client, "B", headers={"X-User-Id": "bob"})

	alice = client.get("/cart", headers={"X-User-Id": "alice"}).json()
	bob = client.get("/cart", headers={"X-User-Id": "bob"}).json()
	assert alice["userId"] == "alice"
	assert lines(alice) == [("A", 1)]
	assert lines(bob) == [("B", 2)]
	assert bob["fullPrice"] == pytest.approx(4.0)

	assert client.get("/cart").json()["items"] == []


def test_routes_by_user_id(client: TestClient, products: FakeProductClient) -> None:
	products.add("A", "3.00")
	add(client, "A", headers={"X-User-Id": "carol"})

	r = client.get("/carts/carol")
	assert r.status_code == HTTPStatus.OK
	assert lines(r.json()) == [("A", 1)]

	assert client.get("/carts/nobody").status_code == HTTPStatus.NOT_FOUND

	r = client.put("/carts/carol/products/A", json={"quantity": 4})
	assert r.status_code == HTTPStatus.OK
	assert r.json()["fullPrice"] == pytest.approx(12.0)

	assert client.put("/carts/carol/products/A", json={"quantity": -1}).status_code == HTTPStatus.BAD_REQUEST
	assert client.put("/carts/nobody/products/A", json={"quantity": 4}).status_code == HTTPStatus.NOT_FOUND

	r = client.put("/carts/carol/clear")
	assert r.status_code == HTTPStatus.OK
	assert r.json()["items"] == []
	assert client.put("/carts/nobody/clear").status_code == HTTPStatus.NOT_FOUND

	r = client.delete("/carts/carol")
	assert r.status_code == HTTPStatus.OK
	assert r.json() == {"message": "Cart deleted"}
	assert client.delete("/carts/carol").status_code == HTTPStatus.NOT_FOUND


def test_health(client: TestClient) -> None:
	r = client.get("/health")
	assert r.status_code == HTTPStatus.OK
	assert r.json() == {"status": "ok"}


def test_openapi_lists_cart_routes(client: TestClient) -> None:
	paths = client.get("/openapi.json").json()["paths"]
	for path in (
		"/cart",
		"/cart/add/{product_id}",
		"/cart/update/{product_id}",
		"/cart/delete/{product_id}",
		"/cart/remove/{product_id}",
		"/cart/clear",
		"/cart/delete",
		"/health",
	):
		assert path in paths


def test_sub_cent_price_is_kept_exactly(client: TestClient, products: FakeProductClient) -> None:
	products.add("A", "0.00333")
	add(client, "A")

	r = client.put("/cart/update/A", json={"quantity": 1000})
	assert r.status_code == HTTPStatus.OK
	assert r.json()["fullPrice"] == pytest.approx(3.33)

	data = client.get("/cart").json()
	assert data["items"][0]["price"] == pytest.approx(0.00333)
	assert data["fullPrice"] == pytest.approx(3.33)


def test_update_to_largest_quantity(client: TestClient, products: FakeProductClient) -> None:
	products.add("A", "1.00")
	add(client, "A")

	r = client.put("/cart/update/A", json={"quantity": 2**31 - 1})
	assert r.status_code == HTTPStatus.OK
	assert lines(client.get("/cart").json()) == [("A", 2**31 - 1)]


def test_failed_save_leaves_cart_untouched(
	client: TestClient, products: FakeProductClient, monkeypatch: pytest.MonkeyPatch
) -> None:
	products.add("A", "2.00")
	products.add("B", "5.00")
	add(client, "A")

	def broken_write(*args: Any, **kwargs: Any) -> None:
		raise SQLAlchemyError("disk full")

	with monkeypatch.context() as m:
		m.setattr(cart_queries, "_cart_set_items", broken_write)
		r = client.post("/cart/add/B")
		assert r.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
		assert r.json() == {"error": "Internal Server Error"}

	data = client.get("/cart").json()
	assert lines(data) == [("A", 1)]
	assert data["fullPrice"] == pytest.approx(2.0)

	# the version bump was rolled back with the rest, so the next write succeeds
	assert lines(add(client, "B")) == [("A", 1), ("B", 1)]


def test_health_when_store_is_down(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
	def no_session() -> None:
		raise SQLAlchemyError("connection refused")

	monkeypatch.setattr(cart_queries, "SessionLocal", no_session)

	r = client.get("/health")
	assert r.status_code == HTTPStatus.INTERNAL_SERVER_ERROR
	assert r.json() == {"status": "unavailable"}
