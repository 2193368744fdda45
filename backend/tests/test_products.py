"""Tests for product endpoints."""

import pytest

from app.services.product import ProductService

pytestmark = pytest.mark.asyncio


def _product_payload(user_id: int, **overrides) -> dict:
    payload = {
        "name": "Home Contents Cover",
        "price": "899.99",
        "is_active": True,
        "created_by_user_id": user_id,
        "features": [
            {"title": "Theft", "detail": "Covers burglary and theft of contents"},
            {"title": "Fire", "detail": "Covers fire and smoke damage"},
        ],
    }
    payload.update(overrides)
    return payload


class TestListAndGet:
    """Public read endpoints."""

    async def test_list_products_public(self, async_client, product_factory):
        await product_factory(name="Motor")
        await product_factory(name="Travel")

        response = await async_client.get("/api/products")

        assert response.status_code == 200
        names = {p["name"] for p in response.json()}
        assert names == {"Motor", "Travel"}

    async def test_list_empty(self, async_client):
        response = await async_client.get("/api/products")
        assert response.status_code == 200
        assert response.json() == []

    async def test_get_product_with_features(self, async_client, product_factory, admin_user):
        product = await product_factory(
            name="Motor",
            features=[("Roadside", "24/7 roadside assistance")],
        )

        response = await async_client.get(f"/api/products/{product.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Motor"
        assert data["price"] == 1200.0
        assert data["created_by_username"] == admin_user.username
        assert [f["title"] for f in data["features"]] == ["Roadside"]

    async def test_get_product_not_found(self, async_client):
        response = await async_client.get("/api/products/999")
        assert response.status_code == 404


class TestCreate:
    """POST /api/products requires a bearer token."""

    async def test_create_product(self, async_client, customer_user, customer_headers):
        response = await async_client.post(
            "/api/products",
            json=_product_payload(customer_user.id),
            headers=customer_headers,
        )

        assert response.status_code == 201
        data = response.json()
        assert data["id"] > 0
        assert data["price"] == 899.99
        assert data["created_by_username"] == customer_user.username
        assert len(data["features"]) == 2

    async def test_create_requires_auth(self, async_client, customer_user):
        response = await async_client.post(
            "/api/products", json=_product_payload(customer_user.id)
        )
        assert response.status_code == 401

    async def test_create_unknown_creator(self, async_client, customer_headers):
        response = await async_client.post(
            "/api/products",
            json=_product_payload(4242),
            headers=customer_headers,
        )
        assert response.status_code == 400

    @pytest.mark.parametrize("price", ["0", "-5", "12.345"])
    async def test_create_invalid_price(self, async_client, customer_user, customer_headers, price):
        response = await async_client.post(
            "/api/products",
            json=_product_payload(customer_user.id, price=price),
            headers=customer_headers,
        )
        assert response.status_code == 422

    async def test_create_name_too_long(self, async_client, customer_user, customer_headers):
        response = await async_client.post(
            "/api/products",
            json=_product_payload(customer_user.id, name="x" * 201),
            headers=customer_headers,
        )
        assert response.status_code == 422


class TestUpdate:
    """PUT /api/products/{id}."""

    async def test_update_product(self, async_client, product_factory, customer_headers):
        product = await product_factory(features=[("Theft", "Covers theft")])

        response = await async_client.put(
            f"/api/products/{product.id}",
            json={"name": "Renamed", "price": "10.50", "is_active": False},
            headers=customer_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Renamed"
        assert data["price"] == 10.5
        assert data["is_active"] is False
        assert data["updated_at"] is not None
        assert len(data["features"]) == 1

    async def test_update_not_found(self, async_client, customer_headers):
        response = await async_client.put(
            "/api/products/999",
            json={"name": "Nope", "price": "1.00", "is_active": True},
            headers=customer_headers,
        )
        assert response.status_code == 404

    async def test_update_requires_auth(self, async_client, product_factory):
        product = await product_factory()
        response = await async_client.put(
            f"/api/products/{product.id}",
            json={"name": "Nope", "price": "1.00", "is_active": True},
        )
        assert response.status_code == 401


class TestDelete:
    """DELETE /api/products/{id} is admin only."""

    async def test_admin_deletes_product(self, async_client, product_factory, admin_headers):
        product = await product_factory(features=[("Theft", "Covers theft")])

        response = await async_client.delete(f"/api/products/{product.id}", headers=admin_headers)
        assert response.status_code == 204

        response = await async_client.get(f"/api/products/{product.id}")
        assert response.status_code == 404

    async def test_customer_forbidden(self, async_client, product_factory, customer_headers):
        product = await product_factory()

        response = await async_client.delete(
            f"/api/products/{product.id}", headers=customer_headers
        )
        assert response.status_code == 403

    async def test_blocked_by_policies(
        self, async_client, product_factory, policy_factory, admin_headers
    ):
        product = await product_factory()
        await policy_factory(product=product)

        response = await async_client.delete(f"/api/products/{product.id}", headers=admin_headers)

        assert response.status_code == 400
        assert "associated policies" in response.json()["detail"]

    async def test_delete_not_found(self, async_client, admin_headers):
        response = await async_client.delete("/api/products/999", headers=admin_headers)
        assert response.status_code == 404


class TestProductService:
    """Direct service calls without the HTTP layer."""

    async def test_list_all_loads_features(self, db_session, product_factory):
        await product_factory(name="Motor", features=[("Roadside", "24/7 roadside assistance")])

        products = await ProductService(db_session).list_all()

        assert [p.name for p in products] == ["Motor"]
        assert [f.title for f in products[0].features] == ["Roadside"]
